# Hippies Portal - Authentication Tests

from datetime import datetime, timedelta

from sqlalchemy import select

from portal.models.employee import Employee
from portal.models.user_session import UserSession
from portal.services.auth import AuthService

from conftest import PASSWORD, session_cookie


def test_api_login_sets_cookie_and_returns_profile(client, employee):
    response = client.post("/api/auth/login", json={"email": "SAM@hippiesheaven.com", "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["employee_id"] == employee.employee_id
    assert body["dashboard_url"] == "/employee-dashboard"
    assert session_cookie(client)


def test_api_login_rejects_wrong_password(client, employee):
    response = client.post("/api/auth/login", json={"email": employee.email, "password": "nope-nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_login_does_not_reveal_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "ghost@hippiesheaven.com", "password": PASSWORD})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_inactive_account_cannot_log_in(client, make_employee, db):
    employee = make_employee("gone@hippiesheaven.com")
    employee.is_active = False
    db.commit()

    response = client.post("/api/auth/login", json={"email": "gone@hippiesheaven.com", "password": PASSWORD})

    assert response.status_code == 401
    assert response.json()["detail"] == "Account is inactive"


def test_me_requires_session(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_me_returns_current_user(admin_client, admin):
    response = admin_client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    assert response.json()["dashboard_url"] == "/admin-dashboard"


def test_logout_invalidates_session(employee_client, db):
    token = session_cookie(employee_client)

    assert employee_client.post("/api/auth/logout").json() == {"success": True}

    session = db.execute(select(UserSession).where(UserSession.session_token == token)).scalar_one()
    assert session.is_active is False
    assert session.logged_out_at is not None


def test_expired_session_is_rejected(employee_client, db):
    token = session_cookie(employee_client)
    session = db.execute(select(UserSession).where(UserSession.session_token == token)).scalar_one()
    session.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    assert employee_client.get("/api/auth/me").status_code == 401


def test_change_password(employee_client, employee, db):
    response = employee_client.post(
        "/api/auth/change-password",
        json={
            "current_password": PASSWORD,
            "new_password": "brand-new-pass",
            "confirm_password": "brand-new-pass",
        },
    )

    assert response.status_code == 200
    db.expire_all()
    assert AuthService(db).verify_password("brand-new-pass", db.get(Employee, employee.employee_id).password_hash)


def test_change_password_wrong_current(employee_client):
    response = employee_client.post(
        "/api/auth/change-password",
        json={
            "current_password": "not-it-at-all",
            "new_password": "brand-new-pass",
            "confirm_password": "brand-new-pass",
        },
    )

    assert response.status_code == 400


def test_change_password_mismatch(employee_client):
    response = employee_client.post(
        "/api/auth/change-password",
        json={
            "current_password": PASSWORD,
            "new_password": "brand-new-pass",
            "confirm_password": "other-new-pass",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "New passwords do not match"


class TestPages:
    def test_login_form_redirects_to_dashboard(self, client, admin):
        response = client.post(
            "/login",
            data={"email": admin.email, "password": PASSWORD},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/admin-dashboard"

    def test_login_form_error_rerenders(self, client, employee):
        response = client.post("/login", data={"email": employee.email, "password": "wrong-one"})

        assert response.status_code == 401
        assert "Invalid email or password" in response.text

    def test_dashboard_without_session_redirects_to_login(self, client):
        response = client.get("/employee-dashboard", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/login"

    def test_wrong_role_redirects_to_own_dashboard(self, employee_client):
        response = employee_client.get("/admin-dashboard", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/employee-dashboard"

    def test_dashboards_render(self, admin_client, employee_client):
        assert admin_client.get("/admin-dashboard").status_code == 200
        assert employee_client.get("/employee-dashboard").status_code == 200

    def test_public_pages(self, client):
        for path in ("/", "/about", "/contact", "/hiring", "/login"):
            assert client.get(path).status_code == 200, path

    def test_logged_in_user_skips_login_page(self, employee_client):
        response = employee_client.get("/login", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/employee-dashboard"


def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "ok"
