# Hippies Portal - Test Fixtures
# In-memory database, app with a recording mailer, and logged-in clients

import os

# Settings are read once at import time
os.environ["PORTAL_DB_URL"] = "sqlite://"
os.environ["PORTAL_BCRYPT_ROUNDS"] = "4"
os.environ["PORTAL_BREVO_API_KEY"] = ""
os.environ["PORTAL_DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import portal.models  # noqa: F401  (registers every table)
from portal.database import get_db, install_connection_options
from portal.dependencies import SESSION_COOKIE_NAME
from portal.main import create_app
from portal.models.base import Base
from portal.models.employee import Employee
from portal.services.auth import AuthService
from portal.services.mail import MailError, MailService


PASSWORD = "hippies-2025"


class FakeMailer:
    """Stands in for BrevoMailer; keeps what would have been sent."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to_email, to_name, subject, html):
        if self.fail:
            raise MailError("relay unavailable")
        self.sent.append({"to": to_email, "name": to_name, "subject": subject, "html": html})
        return {"messageId": f"<{len(self.sent)}@relay>"}


class RecordingNotifier:
    """Collects publish() calls instead of pushing to sockets."""

    def __init__(self):
        self.events = []

    def publish(self, employee_ids, event, data):
        recipients = None if employee_ids is None else sorted(employee_ids)
        self.events.append({"to": recipients, "event": event, "data": data})

    def named(self, event):
        return [e for e in self.events if e["event"] == event]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_connection_options(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(session_factory, mailer):
    app = create_app(mail=MailService(mailer))

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = session_factory
    return app


@pytest.fixture
def notifier(app):
    recorder = RecordingNotifier()
    app.state.notifier = recorder
    return recorder


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_employee(db):
    def _make(email, full_name="Sam Rivera", role="employee", password=PASSWORD, **fields):
        employee = Employee(email=email, full_name=full_name, role=role, is_active=True, **fields)
        if password:
            employee.password_hash = AuthService(db).hash_password(password)
        db.add(employee)
        db.commit()
        return employee
    return _make


@pytest.fixture
def admin(make_employee):
    return make_employee("boss@hippiesheaven.com", full_name="Alex Morgan", role="admin")


@pytest.fixture
def employee(make_employee):
    return make_employee(
        "sam@hippiesheaven.com",
        full_name="Sam Rivera",
        employee_type="VA",
        pay_rate=5,
    )


@pytest.fixture
def coworker(make_employee):
    return make_employee("jo@hippiesheaven.com", full_name="Jo Park", employee_type="Store")


def login(client, email, password=PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def admin_client(app, admin):
    return login(TestClient(app), admin.email)


@pytest.fixture
def employee_client(app, employee):
    return login(TestClient(app), employee.email)


@pytest.fixture
def coworker_client(app, coworker):
    return login(TestClient(app), coworker.email)


def session_cookie(client):
    return client.cookies.get(SESSION_COOKIE_NAME)
