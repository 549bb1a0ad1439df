# Hippies Portal - Schedule Tests

from datetime import date, time

import pytest

from portal.services.schedule import get_week_bounds, shift_hours


# Monday, after the US daylight saving change
MONDAY = date(2025, 3, 10)


def add_schedule(client, employee_id, shift_date=MONDAY, time_in="09:00", time_out="17:00"):
    response = client.post(
        "/api/schedules",
        json={
            "employee_id": employee_id,
            "shift_date": shift_date.isoformat(),
            "time_in": time_in,
            "time_out": time_out,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestHelpers:
    def test_week_bounds(self):
        assert get_week_bounds(date(2025, 3, 13)) == (date(2025, 3, 10), date(2025, 3, 16))
        assert get_week_bounds(MONDAY) == (MONDAY, date(2025, 3, 16))

    @pytest.mark.parametrize(
        "time_in,time_out,hours",
        [
            (time(9, 0), time(17, 0), 8.0),
            (time(22, 0), time(6, 0), 8.0),
            (time(23, 30), time(0, 15), 0.75),
        ],
    )
    def test_shift_hours(self, time_in, time_out, hours):
        assert shift_hours(time_in, time_out) == hours


def test_create_schedule(admin_client, employee):
    body = add_schedule(admin_client, employee.employee_id)

    assert body["employee_name"] == "Sam Rivera"
    assert body["hours"] == 8.0
    assert body["is_overnight"] is False
    # Chicago 9 AM is 10 PM the same day in Manila
    assert body["staff_time_in"] == "Mon 10:00 PM"


def test_overnight_schedule(admin_client, employee):
    body = add_schedule(admin_client, employee.employee_id, time_in="22:00", time_out="06:00")

    assert body["is_overnight"] is True
    assert body["hours"] == 8.0


def test_equal_times_rejected(admin_client, employee):
    response = admin_client.post(
        "/api/schedules",
        json={
            "employee_id": employee.employee_id,
            "shift_date": MONDAY.isoformat(),
            "time_in": "09:00",
            "time_out": "09:00",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Time out must differ from time in"


def test_time_offsets_are_ignored(admin_client, employee):
    response = admin_client.post(
        "/api/schedules",
        json={
            "employee_id": employee.employee_id,
            "shift_date": MONDAY.isoformat(),
            "time_in": "09:00:00Z",
            "time_out": "17:00:00+08:00",
        },
    )

    assert response.status_code == 201
    assert response.json()["time_in"] == "09:00:00"
    assert response.json()["time_out"] == "17:00:00"


def test_inactive_employee_cannot_be_scheduled(admin_client, employee, db):
    employee.is_active = False
    db.commit()

    response = admin_client.post(
        "/api/schedules",
        json={
            "employee_id": employee.employee_id,
            "shift_date": MONDAY.isoformat(),
            "time_in": "09:00",
            "time_out": "17:00",
        },
    )

    assert response.status_code == 400


def test_employee_cannot_create_schedule(employee_client, employee):
    response = employee_client.post(
        "/api/schedules",
        json={
            "employee_id": employee.employee_id,
            "shift_date": MONDAY.isoformat(),
            "time_in": "09:00",
            "time_out": "17:00",
        },
    )

    assert response.status_code == 403


def test_week_view_groups_by_day(admin_client, employee, coworker):
    add_schedule(admin_client, employee.employee_id, MONDAY)
    add_schedule(admin_client, coworker.employee_id, date(2025, 3, 12))

    week = admin_client.get("/api/schedules/week", params={"week_of": "2025-03-13"}).json()

    assert week["week_start"] == "2025-03-10"
    assert week["week_end"] == "2025-03-16"
    assert week["prev_week"] == "2025-03-03"
    assert week["next_week"] == "2025-03-17"
    assert len(week["days"]) == 7
    assert len(week["days"][0]["schedules"]) == 1
    assert week["days"][2]["schedules"][0]["employee_name"] == "Jo Park"
    assert week["days"][1]["schedules"] == []


def test_employee_sees_only_own_schedule(admin_client, employee_client, employee, coworker):
    add_schedule(admin_client, employee.employee_id)
    add_schedule(admin_client, coworker.employee_id)

    week = employee_client.get("/api/schedules/week", params={"week_of": MONDAY.isoformat()}).json()
    listed = employee_client.get(
        "/api/schedules",
        params={"start": "2025-03-10", "end": "2025-03-16", "employee_id": coworker.employee_id},
    ).json()

    ids = {s["employee_id"] for day in week["days"] for s in day["schedules"]}
    assert ids == {employee.employee_id}
    assert {s["employee_id"] for s in listed} == {employee.employee_id}


def test_range_must_be_ordered(admin_client):
    response = admin_client.get("/api/schedules", params={"start": "2025-03-16", "end": "2025-03-10"})

    assert response.status_code == 400


def test_update_and_delete(admin_client, employee):
    created = add_schedule(admin_client, employee.employee_id)

    updated = admin_client.patch(
        f"/api/schedules/{created['schedule_id']}",
        json={"time_out": "13:00", "notes": "Half day"},
    )
    assert updated.status_code == 200
    assert updated.json()["hours"] == 4.0
    assert updated.json()["notes"] == "Half day"

    assert admin_client.delete(f"/api/schedules/{created['schedule_id']}").status_code == 204
    assert admin_client.patch(f"/api/schedules/{created['schedule_id']}", json={"notes": "x"}).status_code == 404
