# Hippies Portal - Shared Validators
# Field checks reused across services; all raise ValueError

import re
import secrets
import string
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[a-zA-Z]{2,}$")

# Throwaway / placeholder addresses rejected on the public application form
BANNED_EMAIL_PATTERNS = (
    "test@",
    "example@",
    "mailinator",
    "tempmail",
    "yopmail",
    "guerrillamail",
)

TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def is_valid_email(email: Optional[str]) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.match(email.strip()) is not None


def is_acceptable_applicant_email(email: Optional[str]) -> bool:
    """Format check plus the disposable-address blocklist."""
    if not is_valid_email(email):
        return False
    lowered = email.lower()
    return not any(pattern in lowered for pattern in BANNED_EMAIL_PATTERNS)


def generate_temp_password(length: int = 10) -> str:
    """Random letters-and-digits password for new or reset accounts."""
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))


def _as_text(value: Any, label: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{label} must be text")
    return value


def require_text(value: Optional[str], label: str) -> str:
    """Return the stripped value or raise '<label> is required'."""
    cleaned = _as_text(value, label).strip()
    if not cleaned:
        raise ValueError(f"{label} is required")
    return cleaned


def optional_text(value: Optional[str], label: str = "Value") -> Optional[str]:
    cleaned = _as_text(value, label).strip()
    return cleaned or None


def require_choice(value: Optional[str], choices: Iterable[str], label: str) -> str:
    choices = tuple(choices)
    if value not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return value


def require_date_order(start: date, end: date, message: str = "End date must be on or after start date") -> None:
    if end < start:
        raise ValueError(message)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored datetimes are naive UTC; convert aware input to match."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
