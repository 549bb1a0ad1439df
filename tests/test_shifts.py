# Hippies Portal - Shift Log Tests

from datetime import datetime, timedelta

from portal.models.shift_log import ShiftLog
from portal.services.shift import ShiftService


def test_clock_in_and_out(employee_client, employee, db):
    clocked_in = employee_client.post("/api/shifts/clock-in")
    assert clocked_in.status_code == 201
    assert clocked_in.json()["is_open"] is True

    current = employee_client.get("/api/shifts/current").json()
    assert current["shift_id"] == clocked_in.json()["shift_id"]

    clocked_out = employee_client.post("/api/shifts/clock-out", json={"report": "Counted the drawer"})
    assert clocked_out.status_code == 200
    assert clocked_out.json()["is_open"] is False
    assert clocked_out.json()["report"] == "Counted the drawer"

    assert employee_client.get("/api/shifts/current").json() is None


def test_cannot_clock_in_twice(employee_client):
    employee_client.post("/api/shifts/clock-in")

    response = employee_client.post("/api/shifts/clock-in")

    assert response.status_code == 400
    assert response.json()["detail"] == "You are already clocked in"


def test_clock_out_requires_report(employee_client):
    employee_client.post("/api/shifts/clock-in")

    response = employee_client.post("/api/shifts/clock-out", json={"report": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "End of shift report is required"
    assert employee_client.get("/api/shifts/current").json() is not None


def test_clock_out_without_open_shift(employee_client):
    response = employee_client.post("/api/shifts/clock-out", json={"report": "Done"})

    assert response.status_code == 400
    assert response.json()["detail"] == "You are not clocked in"


def test_duration_is_hours(db, employee):
    service = ShiftService(db, employee.employee_id)
    start = datetime(2025, 3, 10, 9, 0)

    service.clock_in(employee, now=start)
    shift = service.clock_out(employee, "Closed up", now=start + timedelta(hours=7, minutes=30))

    assert float(shift.duration) == 7.5


def test_my_shifts_newest_first(employee_client, employee, db):
    for day in (3, 5, 4):
        start = datetime(2025, 3, day, 9, 0)
        shift = ShiftLog(employee_id=employee.employee_id, shift_start=start)
        shift.close(start + timedelta(hours=4))
        db.add(shift)
    db.commit()

    starts = [s["shift_start"][:10] for s in employee_client.get("/api/shifts/me").json()]

    assert starts == ["2025-03-05", "2025-03-04", "2025-03-03"]


class TestAdminCorrections:
    def test_create_closed_shift(self, admin_client, employee):
        response = admin_client.post(
            "/api/shifts",
            json={
                "employee_id": employee.employee_id,
                "shift_start": "2025-03-10T09:00:00",
                "shift_end": "2025-03-10T15:00:00",
                "notes": "Forgot to clock in",
            },
        )

        assert response.status_code == 201
        assert float(response.json()["duration"]) == 6.0
        assert response.json()["employee_name"] == "Sam Rivera"

    def test_end_must_follow_start(self, admin_client, employee):
        response = admin_client.post(
            "/api/shifts",
            json={
                "employee_id": employee.employee_id,
                "shift_start": "2025-03-10T15:00:00",
                "shift_end": "2025-03-10T09:00:00",
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Shift end must be after shift start"

    def test_shift_cannot_exceed_a_day(self, admin_client, employee):
        response = admin_client.post(
            "/api/shifts",
            json={
                "employee_id": employee.employee_id,
                "shift_start": "2025-03-10T09:00:00",
                "shift_end": "2025-03-11T10:00:00",
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Shift duration cannot exceed 24 hours"

    def test_update_recomputes_duration(self, admin_client, employee):
        created = admin_client.post(
            "/api/shifts",
            json={
                "employee_id": employee.employee_id,
                "shift_start": "2025-03-10T09:00:00",
                "shift_end": "2025-03-10T12:00:00",
            },
        ).json()

        response = admin_client.patch(
            f"/api/shifts/{created['shift_id']}",
            json={"shift_end": "2025-03-10T17:00:00"},
        )

        assert response.status_code == 200
        assert float(response.json()["duration"]) == 8.0

    def test_offset_datetimes_are_stored_as_utc(self, admin_client, employee):
        created = admin_client.post(
            "/api/shifts",
            json={
                "employee_id": employee.employee_id,
                "shift_start": "2025-03-10T17:00:00+08:00",
                "shift_end": "2025-03-10T12:00:00",
            },
        )
        assert created.status_code == 201
        assert created.json()["shift_start"] == "2025-03-10T09:00:00"

        response = admin_client.patch(
            f"/api/shifts/{created.json()['shift_id']}",
            json={"shift_end": "2025-03-10T18:00:00Z"},
        )

        assert response.status_code == 200
        assert response.json()["shift_end"] == "2025-03-10T18:00:00"
        assert float(response.json()["duration"]) == 9.0

    def test_empty_update_is_not_audited(self, admin_client, employee):
        shift_id = admin_client.post(
            "/api/shifts",
            json={
                "employee_id": employee.employee_id,
                "shift_start": "2025-03-10T09:00:00",
                "shift_end": "2025-03-10T12:00:00",
            },
        ).json()["shift_id"]

        assert admin_client.patch(f"/api/shifts/{shift_id}", json={}).status_code == 200
        admin_client.patch(f"/api/shifts/{shift_id}", json={"shift_end": "2025-03-10T12:00:00"})

        actions = [h["action"] for h in admin_client.get(f"/api/audit-log/shift_logs/{shift_id}").json()]
        assert actions == ["INSERT"]

    def test_list_filters_by_employee_and_date(self, admin_client, employee, coworker):
        for who, day in ((employee, 10), (coworker, 10), (employee, 12)):
            admin_client.post(
                "/api/shifts",
                json={
                    "employee_id": who.employee_id,
                    "shift_start": f"2025-03-{day}T09:00:00",
                    "shift_end": f"2025-03-{day}T12:00:00",
                },
            )

        mine = admin_client.get("/api/shifts", params={"employee_id": employee.employee_id}).json()
        one_day = admin_client.get("/api/shifts", params={"start": "2025-03-10", "end": "2025-03-10"}).json()

        assert len(mine) == 2
        assert len(one_day) == 2

    def test_delete(self, admin_client, employee):
        created = admin_client.post(
            "/api/shifts",
            json={"employee_id": employee.employee_id, "shift_start": "2025-03-10T09:00:00"},
        ).json()

        assert admin_client.delete(f"/api/shifts/{created['shift_id']}").status_code == 204
        assert admin_client.delete(f"/api/shifts/{created['shift_id']}").status_code == 404

    def test_employee_cannot_list_all(self, employee_client):
        assert employee_client.get("/api/shifts").status_code == 403


def test_hours_by_employee_only_counts_closed_shifts(db, employee, coworker):
    service = ShiftService(db, None)
    start = datetime(2025, 3, 10, 9, 0)
    service.clock_in(employee, now=start)
    service.clock_out(employee, "done", now=start + timedelta(hours=5))
    service.clock_in(coworker, now=start)
    db.commit()

    hours = service.hours_by_employee(start.date(), start.date())

    assert float(hours[employee.employee_id]) == 5.0
    assert coworker.employee_id not in hours
