# Hippies Portal - Audit Log Tests

from datetime import date, datetime, time, timedelta

from sqlalchemy import select

from portal.models.audit_log import AuditLog
from portal.models.schedule import Schedule
from portal.models.user_session import UserSession
from portal.services.audit import AuditService


def test_insert_update_delete_history(admin_client, admin, employee):
    created = admin_client.post(
        "/api/schedules",
        json={"employee_id": employee.employee_id, "shift_date": "2025-03-10", "time_in": "09:00", "time_out": "17:00"},
    ).json()
    schedule_id = created["schedule_id"]
    admin_client.patch(f"/api/schedules/{schedule_id}", json={"notes": "Inventory"})
    admin_client.delete(f"/api/schedules/{schedule_id}")

    history = admin_client.get(f"/api/audit-log/schedules/{schedule_id}").json()

    assert [h["action"] for h in history] == ["INSERT", "UPDATE", "DELETE"]
    assert all(h["performed_by"] == admin.employee_id for h in history)
    assert history[0]["new_values"]["time_in"] == "09:00:00"
    assert "notes" in history[1]["changed_fields"]
    assert history[1]["old_values"]["notes"] is None
    assert history[1]["new_values"]["notes"] == "Inventory"
    assert history[2]["old_values"]["notes"] == "Inventory"


def test_sensitive_fields_never_recorded(admin_client, employee):
    admin_client.patch(f"/api/employees/{employee.employee_id}", json={"ssn_last4": "1234", "account_number": "998877"})

    history = admin_client.get(f"/api/audit-log/employees/{employee.employee_id}").json()

    for entry in history:
        for snapshot in (entry["old_values"] or {}, entry["new_values"] or {}):
            assert "ssn_last4" not in snapshot
            assert "account_number" not in snapshot
            assert "password_hash" not in snapshot


def test_deactivate_and_reactivate_are_logged(admin_client, employee):
    admin_client.delete(f"/api/employees/{employee.employee_id}")
    admin_client.post(f"/api/employees/{employee.employee_id}/reactivate")

    actions = [h["action"] for h in admin_client.get(f"/api/audit-log/employees/{employee.employee_id}").json()]

    assert actions[-2:] == ["DELETE", "RESTORE"]


def test_recent_changes_filters(admin_client, employee):
    admin_client.post(
        "/api/schedules",
        json={"employee_id": employee.employee_id, "shift_date": "2025-03-10", "time_in": "09:00", "time_out": "17:00"},
    )
    admin_client.post("/api/announcements", json={"title": "Hi", "content": "Hello"})

    schedules = admin_client.get("/api/audit-log", params={"table_name": "schedules"}).json()
    inserts = admin_client.get("/api/audit-log", params={"action": "insert"}).json()

    assert {e["table_name"] for e in schedules} == {"schedules"}
    assert {"schedules", "announcements"} <= {e["table_name"] for e in inserts}
    # Newest first
    assert inserts[0]["table_name"] == "announcements"


def test_audit_log_is_admin_only(employee_client):
    assert employee_client.get("/api/audit-log").status_code == 403


def test_unaudited_tables_are_skipped(db, employee):
    session = UserSession(
        employee_id=employee.employee_id,
        session_token="t" * 64,
        expires_at=datetime.utcnow() + timedelta(hours=1),
    )
    db.add(session)
    db.flush()

    assert AuditService(db, employee.employee_id).log_insert(session) is None


def test_update_without_changes_writes_nothing(db, admin, employee):
    schedule = Schedule(
        employee_id=employee.employee_id,
        shift_date=date(2025, 3, 10),
        time_in=time(9),
        time_out=time(17),
    )
    db.add(schedule)
    db.flush()
    audit = AuditService(db, admin.employee_id)

    state = audit.capture_state(schedule)

    assert audit.log_update(schedule, state) is None
    assert db.execute(select(AuditLog)).scalars().all() == []


def test_empty_or_unchanged_patch_writes_no_update(admin_client, employee):
    schedule_id = admin_client.post(
        "/api/schedules",
        json={"employee_id": employee.employee_id, "shift_date": "2025-03-10", "time_in": "09:00", "time_out": "17:00"},
    ).json()["schedule_id"]

    assert admin_client.patch(f"/api/schedules/{schedule_id}", json={}).status_code == 200
    admin_client.patch(f"/api/schedules/{schedule_id}", json={"time_in": "09:00", "time_out": "17:00"})

    history = admin_client.get(f"/api/audit-log/schedules/{schedule_id}").json()

    assert [h["action"] for h in history] == ["INSERT"]


def test_real_change_is_stamped(admin_client, admin, employee, db):
    schedule_id = admin_client.post(
        "/api/schedules",
        json={"employee_id": employee.employee_id, "shift_date": "2025-03-10", "time_in": "09:00", "time_out": "17:00"},
    ).json()["schedule_id"]

    admin_client.patch(f"/api/schedules/{schedule_id}", json={"notes": "Cover register"})

    history = admin_client.get(f"/api/audit-log/schedules/{schedule_id}").json()
    db.expire_all()
    schedule = db.get(Schedule, schedule_id)

    assert set(history[-1]["changed_fields"]) == {"notes", "modified_at", "modified_by"}
    assert schedule.modified_by == admin.employee_id
    assert schedule.modified_at is not None


def test_empty_announcement_patch_is_not_audited(admin_client):
    announcement_id = admin_client.post(
        "/api/announcements", json={"title": "Hi", "content": "Hello"}
    ).json()["announcement_id"]

    updated = admin_client.patch(f"/api/announcements/{announcement_id}", json={})

    assert updated.json()["updated_at"] is None
    actions = [h["action"] for h in admin_client.get(f"/api/audit-log/announcements/{announcement_id}").json()]
    assert actions == ["INSERT"]
