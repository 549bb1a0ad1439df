# Hippies Portal - Mail Service
# Transactional email through the Brevo HTTP API

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo
import logging

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from portal.config import get_settings


settings = get_settings()
logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


class MailError(Exception):
    """Raised when an email could not be handed to the relay."""
    pass


def format_interview_time(value: Union[datetime, str], tz_name: Optional[str] = None) -> str:
    """
    Render an interview time in the business timezone.

    Naive datetimes (and ISO strings without an offset) are treated as
    UTC. Output looks like "Monday, January 6 at 2:00 PM".
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        raise ValueError(f"Unsupported interview time: {value!r}")

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    local = value.astimezone(ZoneInfo(tz_name or settings.business_timezone))
    hour = local.hour % 12 or 12
    return f"{local:%A, %B} {local.day} at {hour}:{local:%M} {local:%p}"


class BrevoMailer:
    """
    Thin client for Brevo's transactional email endpoint.

    Usage:
        mailer = BrevoMailer.from_settings()
        result = mailer.send("sam@example.com", "Sam", "Hello", "<p>Hi</p>")

    Raises MailError for a missing API key, transport failures and
    non-2xx responses. There is no retry.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        sender_name: str,
        sender_email: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, client: Optional[httpx.Client] = None) -> "BrevoMailer":
        return cls(
            api_key=settings.brevo_api_key,
            api_url=settings.brevo_api_url,
            sender_name=settings.mail_sender_name,
            sender_email=settings.mail_sender_email,
            timeout=settings.mail_timeout_seconds,
            client=client,
        )

    def build_payload(self, to_email: str, to_name: str, subject: str, html: str) -> dict[str, Any]:
        return {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to_email, "name": to_name}],
            "subject": subject,
            "htmlContent": html,
        }

    def send(self, to_email: str, to_name: str, subject: str, html: str) -> dict[str, Any]:
        """Send one email; returns Brevo's JSON response body."""
        if not self.api_key:
            raise MailError("BREVO_API_KEY not configured")

        payload = self.build_payload(to_email, to_name, subject, html)
        headers = {"api-key": self.api_key, "Content-Type": "application/json"}

        try:
            if self._client is not None:
                response = self._client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Mail relay unreachable for %s: %s", to_email, e)
            raise MailError(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text}

        if response.is_error:
            logger.warning("Mail relay rejected %s (%s): %s", to_email, response.status_code, body)
            raise MailError(str(body))

        logger.info("Sent '%s' to %s", subject, to_email)
        return body


class MailService:
    """
    The three portal emails, rendered from Jinja2 templates.

    Usage:
        mail = MailService(BrevoMailer.from_settings())
        mail.send_welcome("Sam Rivera", "sam@example.com", "Xy7pQ2mK9a")
    """

    def __init__(self, mailer: BrevoMailer):
        self.mailer = mailer

    def _render(self, template: str, **context) -> str:
        context.setdefault("contact_email", settings.mail_contact_email)
        return _env.get_template(template).render(**context)

    def send_application_confirmation(
        self,
        name: str,
        email: str,
        job_title: Optional[str] = None,
    ) -> dict[str, Any]:
        subject = f"We received your application for {job_title}!" if job_title else "We received your application!"
        html = self._render("email/application_confirmation.html", name=name, job_title=job_title)
        return self.mailer.send(email, name, subject, html)

    def send_interview_confirmation(
        self,
        name: str,
        email: str,
        interview_time: Union[datetime, str],
        job_title: Optional[str] = None,
    ) -> dict[str, Any]:
        subject = f"Interview Scheduled for {job_title or 'your application'} 🌿"
        html = self._render(
            "email/interview_confirmation.html",
            name=name,
            job_title=job_title,
            formatted_time=format_interview_time(interview_time),
        )
        return self.mailer.send(email, name, subject, html)

    def send_welcome(self, name: str, email: str, temp_password: str) -> dict[str, Any]:
        subject = "Welcome to Hippies Heaven Employee Portal 🌿"
        html = self._render(
            "email/welcome.html",
            name=name,
            temp_password=temp_password,
            login_url=settings.portal_login_url,
        )
        return self.mailer.send(email, name, subject, html)
