# Hippies Portal - Mail Tests

import json
from datetime import datetime, timezone

import httpx
import pytest

from portal.services.mail import BrevoMailer, MailError, MailService, format_interview_time


def make_mailer(handler, api_key="test-key"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return BrevoMailer(
        api_key=api_key,
        api_url="https://relay.test/v3/smtp/email",
        sender_name="Hippies Heaven Gift Shop",
        sender_email="shop@hippiesheaven.com",
        client=client,
    )


class TestFormatInterviewTime:
    def test_utc_string_to_central(self):
        assert format_interview_time("2025-01-06T20:00:00Z") == "Monday, January 6 at 2:00 PM"

    def test_naive_datetime_is_utc(self):
        assert format_interview_time(datetime(2025, 7, 4, 15, 30)) == "Friday, July 4 at 10:30 AM"

    def test_aware_datetime(self):
        value = datetime(2025, 1, 6, 6, 5, tzinfo=timezone.utc)

        assert format_interview_time(value, "Asia/Manila") == "Monday, January 6 at 2:05 PM"

    def test_garbage_raises_value_error(self):
        with pytest.raises(ValueError):
            format_interview_time("next tuesday")

    @pytest.mark.parametrize("value", [12345, None, ["2025-01-06"]])
    def test_non_string_raises_value_error(self, value):
        with pytest.raises(ValueError):
            format_interview_time(value)


class TestBrevoMailer:
    def test_sends_payload_with_api_key(self):
        seen = {}

        def handler(request):
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"messageId": "<abc@relay>"})

        result = make_mailer(handler).send("sam@example.com", "Sam", "Hello", "<p>Hi</p>")

        assert result == {"messageId": "<abc@relay>"}
        assert seen["headers"]["api-key"] == "test-key"
        assert seen["body"] == {
            "sender": {"name": "Hippies Heaven Gift Shop", "email": "shop@hippiesheaven.com"},
            "to": [{"email": "sam@example.com", "name": "Sam"}],
            "subject": "Hello",
            "htmlContent": "<p>Hi</p>",
        }

    def test_missing_api_key(self):
        mailer = make_mailer(lambda request: httpx.Response(201, json={}), api_key="")

        with pytest.raises(MailError, match="BREVO_API_KEY not configured"):
            mailer.send("sam@example.com", "Sam", "Hello", "<p>Hi</p>")

    def test_error_response(self):
        mailer = make_mailer(lambda request: httpx.Response(401, json={"code": "unauthorized"}))

        with pytest.raises(MailError, match="unauthorized"):
            mailer.send("sam@example.com", "Sam", "Hello", "<p>Hi</p>")

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MailError, match="connection refused"):
            make_mailer(handler).send("sam@example.com", "Sam", "Hello", "<p>Hi</p>")


class TestMailService:
    def test_welcome_contains_password(self, mailer):
        MailService(mailer).send_welcome("Sam Rivera", "sam@example.com", "Xy7pQ2mK9a")

        sent = mailer.sent[0]
        assert sent["subject"] == "Welcome to Hippies Heaven Employee Portal 🌿"
        assert "Xy7pQ2mK9a" in sent["html"]
        assert "Sam Rivera" in sent["html"]

    def test_names_are_escaped(self, mailer):
        MailService(mailer).send_application_confirmation("<b>Casey</b>", "casey@example.com")

        assert "&lt;b&gt;Casey&lt;/b&gt;" in mailer.sent[0]["html"]


class TestRelayRoutes:
    def test_application_confirmation(self, client, mailer):
        response = client.post(
            "/api/mail/application-confirmation",
            json={"name": "Casey", "email": "casey@example.com", "jobTitle": "Night VA"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Confirmation email sent to casey@example.com",
            "brevo": {"messageId": "<1@relay>"},
        }
        assert mailer.sent[0]["subject"] == "We received your application for Night VA!"

    def test_interview_confirmation(self, client, mailer):
        response = client.post(
            "/api/mail/interview-confirmation",
            json={"name": "Casey", "email": "casey@example.com", "interviewTime": "2025-01-06T20:00:00Z"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Interview email sent to casey@example.com"
        assert "Monday, January 6 at 2:00 PM" in mailer.sent[0]["html"]

    def test_invalid_interview_time(self, client):
        response = client.post(
            "/api/mail/interview-confirmation",
            json={"name": "Casey", "email": "casey@example.com", "interviewTime": "soon"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid interviewTime"}

    def test_numeric_interview_time(self, client, mailer):
        response = client.post(
            "/api/mail/interview-confirmation",
            json={"name": "Casey", "email": "casey@example.com", "interviewTime": 12345},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid interviewTime"}
        assert mailer.sent == []

    def test_welcome(self, client):
        response = client.post(
            "/api/mail/welcome",
            json={"name": "Sam", "email": "sam@example.com", "tempPassword": "Xy7pQ2mK9a"},
        )

        assert response.json() == {"success": True, "result": {"messageId": "<1@relay>"}}

    @pytest.mark.parametrize(
        "path,body",
        [
            ("/api/mail/application-confirmation", {"name": "Casey"}),
            ("/api/mail/interview-confirmation", {"name": "Casey", "email": "casey@example.com"}),
            ("/api/mail/welcome", {"email": "sam@example.com", "tempPassword": "x"}),
        ],
    )
    def test_missing_fields(self, client, path, body):
        response = client.post(path, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_relay_failure(self, client, mailer):
        mailer.fail = True

        response = client.post("/api/mail/welcome", json={"name": "Sam", "email": "sam@example.com", "tempPassword": "x"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send email", "details": "relay unavailable"}
