# Hippies Portal - Employee Management Tests

from fastapi.testclient import TestClient

from portal.models.employee import Employee
from portal.services.auth import AuthService

from conftest import login


def test_admin_creates_employee_and_sends_welcome(admin_client, mailer):
    response = admin_client.post(
        "/api/employees",
        json={"full_name": "Riley Chen", "email": "Riley@HippiesHeaven.com", "employee_type": "Store"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["employee"]["email"] == "riley@hippiesheaven.com"
    assert body["employee"]["role"] == "employee"
    assert body["email_sent"] is True
    assert body["temp_password"] is None

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "riley@hippiesheaven.com"
    assert "Welcome" in mailer.sent[0]["subject"]


def test_temp_password_returned_when_mail_fails(admin_client, mailer, app):
    mailer.fail = True

    response = admin_client.post(
        "/api/employees",
        json={"full_name": "Riley Chen", "email": "riley@hippiesheaven.com"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email_sent"] is False
    assert body["temp_password"]

    # The account works with the returned password
    login(TestClient(app), "riley@hippiesheaven.com", body["temp_password"])


def test_duplicate_email_rejected(admin_client, employee):
    response = admin_client.post(
        "/api/employees",
        json={"full_name": "Other Sam", "email": "SAM@hippiesheaven.com"},
    )

    assert response.status_code == 400
    assert "already registered" in response.json()["detail"]


def test_invalid_fields_rejected(admin_client):
    bad_email = admin_client.post("/api/employees", json={"full_name": "X", "email": "not-an-email"})
    bad_ssn = admin_client.post(
        "/api/employees",
        json={"full_name": "X", "email": "x@hippiesheaven.com", "ssn_last4": "12a4"},
    )
    bad_type = admin_client.post(
        "/api/employees",
        json={"full_name": "X", "email": "x@hippiesheaven.com", "employee_type": "Remote"},
    )

    assert bad_email.status_code == 400
    assert bad_ssn.json()["detail"] == "SSN last 4 must be exactly 4 digits"
    assert bad_type.status_code == 400


def test_employee_cannot_manage_staff(employee_client):
    response = employee_client.get("/api/employees")

    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"


def test_list_and_search(admin_client, employee, coworker):
    everyone = admin_client.get("/api/employees").json()
    store = admin_client.get("/api/employees", params={"employee_type": "Store"}).json()
    found = admin_client.get("/api/employees", params={"search": "rivera"}).json()

    assert {e["email"] for e in everyone} >= {employee.email, coworker.email}
    assert [e["email"] for e in store] == [coworker.email]
    assert [e["email"] for e in found] == [employee.email]


def test_update_employee(admin_client, employee):
    response = admin_client.patch(
        f"/api/employees/{employee.employee_id}",
        json={"position": "Lead VA", "shirt_size": "M"},
    )

    assert response.status_code == 200
    assert response.json()["position"] == "Lead VA"
    assert response.json()["shirt_size"] == "M"


def test_admin_cannot_change_own_role(admin_client, admin):
    response = admin_client.patch(f"/api/employees/{admin.employee_id}", json={"role": "employee"})

    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot change your own role"


def test_unknown_employee_is_404(admin_client):
    assert admin_client.get("/api/employees/9999").status_code == 404


class TestLifecycle:
    def test_deactivate_ends_sessions(self, admin_client, employee_client, employee, db):
        response = admin_client.delete(f"/api/employees/{employee.employee_id}")

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert employee_client.get("/api/auth/me").status_code == 401

    def test_deactivated_employee_hidden_from_default_list(self, admin_client, employee):
        admin_client.delete(f"/api/employees/{employee.employee_id}")

        active = admin_client.get("/api/employees").json()
        everyone = admin_client.get("/api/employees", params={"include_inactive": True}).json()

        assert employee.email not in {e["email"] for e in active}
        assert employee.email in {e["email"] for e in everyone}

    def test_cannot_deactivate_self(self, admin_client, admin):
        response = admin_client.delete(f"/api/employees/{admin.employee_id}")

        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot deactivate your own account"

    def test_reactivate(self, admin_client, employee):
        admin_client.delete(f"/api/employees/{employee.employee_id}")

        response = admin_client.post(f"/api/employees/{employee.employee_id}/reactivate")

        assert response.status_code == 200
        assert response.json()["is_active"] is True

    def test_reactivate_active_employee_rejected(self, admin_client, employee):
        response = admin_client.post(f"/api/employees/{employee.employee_id}/reactivate")

        assert response.status_code == 400

    def test_reset_password(self, admin_client, employee_client, employee, mailer, db):
        response = admin_client.post(f"/api/employees/{employee.employee_id}/reset-password")

        assert response.status_code == 200
        assert response.json()["email_sent"] is True
        assert mailer.sent[-1]["to"] == employee.email
        # Old sessions are gone
        assert employee_client.get("/api/auth/me").status_code == 401

        db.expire_all()
        refreshed = db.get(Employee, employee.employee_id)
        assert not AuthService(db).verify_password("hippies-2025", refreshed.password_hash)


class TestSelfService:
    def test_directory_excludes_self_and_inactive(self, employee_client, employee, coworker, admin, db):
        coworker.is_active = False
        db.commit()

        names = [e["full_name"] for e in employee_client.get("/api/employees/directory").json()]

        assert names == ["Alex Morgan"]

    def test_profile_update_allowed_fields(self, employee_client):
        response = employee_client.patch(
            "/api/profile",
            json={"contact_number": "555-0100", "address": "12 Maple St"},
        )

        assert response.status_code == 200
        assert response.json()["contact_number"] == "555-0100"
        assert response.json()["address"] == "12 Maple St"

    def test_profile_update_rejects_other_fields(self, employee_client):
        response = employee_client.patch("/api/profile", json={"pay_rate": 99})

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot update field(s): pay_rate"

    def test_profile_name_cannot_be_blank(self, employee_client):
        response = employee_client.patch("/api/profile", json={"full_name": "  "})

        assert response.status_code == 400

    def test_profile_values_must_be_text(self, employee_client):
        response = employee_client.patch("/api/profile", json={"contact_number": 5551234})

        assert response.status_code == 400
        assert response.json()["detail"] == "Contact number must be text"

    def test_empty_profile_update_is_not_audited(self, employee_client, admin_client, employee):
        assert employee_client.patch("/api/profile", json={}).status_code == 200
        employee_client.patch("/api/profile", json={"full_name": employee.full_name})

        history = admin_client.get(f"/api/audit-log/employees/{employee.employee_id}").json()

        assert [h for h in history if h["action"] == "UPDATE"] == []
