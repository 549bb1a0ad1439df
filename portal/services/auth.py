# Hippies Portal - Authentication Service
# Password hashing, session management, login/logout

from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets

from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.config import get_settings
from portal.models.employee import Employee
from portal.models.user_session import UserSession


settings = get_settings()
logger = logging.getLogger(__name__)

# Password hashing configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


class AuthenticationError(Exception):
    """Raised when authentication fails."""
    pass


class AuthorizationError(PermissionError):
    """Raised when a user touches a record that is not theirs."""
    pass


class AuthService:
    """
    Authentication service for login, logout, and session management.

    Usage:
        auth = AuthService(db)

        # Login
        employee, session = auth.login("sam@hippiesheaven.com", "password123")

        # Validate session (cookie value)
        employee = auth.validate_session(session.session_token)

        # Logout
        auth.logout(session.session_token)

    Sessions are stored in the database so they can be revoked when an
    employee is deactivated or their password is reset.
    """

    def __init__(self, db: Session):
        self.db = db

    def hash_password(self, plain_password: str) -> str:
        return pwd_context.hash(plain_password)

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Return True if the password matches; malformed hashes never match."""
        if not hashed_password:
            return False
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self.db.execute(
            select(Employee).where(func.lower(Employee.email) == email.strip().lower())
        ).scalar_one_or_none()

    def authenticate(self, email: str, password: str) -> Employee:
        """
        Authenticate a user by email and password.

        Raises:
            AuthenticationError: If credentials are invalid or account is inactive
        """
        employee = self.get_by_email(email)

        if not employee:
            # Don't reveal whether the email exists
            raise AuthenticationError("Invalid email or password")

        if not employee.is_active:
            raise AuthenticationError("Account is inactive")

        if not employee.password_hash:
            raise AuthenticationError("Account has no password set")

        if not self.verify_password(password, employee.password_hash):
            raise AuthenticationError("Invalid email or password")

        return employee

    def generate_session_token(self) -> str:
        """64-character hex string (256 bits of entropy)."""
        return secrets.token_hex(32)

    def login(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> tuple[Employee, UserSession]:
        """
        Authenticate user and create a new session.

        Raises:
            AuthenticationError: If credentials are invalid
        """
        try:
            employee = self.authenticate(email, password)
        except AuthenticationError as e:
            logger.info("Login failed for %s: %s", email, e)
            raise

        now = datetime.utcnow()
        session = UserSession(
            employee_id=employee.employee_id,
            session_token=self.generate_session_token(),
            expires_at=now + timedelta(minutes=settings.session_expire_minutes),
            created_at=now,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )

        self.db.add(session)
        self.db.commit()

        logger.info("Employee %s logged in", employee.employee_id)
        return employee, session

    def validate_session(self, session_token: str) -> Optional[Employee]:
        """
        Return the employee for a valid session token, None otherwise.

        Expired sessions are deactivated on the way through.
        """
        session = self.db.execute(
            select(UserSession)
            .where(UserSession.session_token == session_token)
            .where(UserSession.is_active == True)
        ).scalar_one_or_none()

        if not session:
            return None

        if session.is_expired:
            session.is_active = False
            self.db.commit()
            return None

        employee = self.db.execute(
            select(Employee)
            .where(Employee.employee_id == session.employee_id)
            .where(Employee.is_active == True)
        ).scalar_one_or_none()

        if not employee:
            return None

        session.last_activity_at = datetime.utcnow()
        self.db.commit()

        return employee

    def logout(self, session_token: str) -> bool:
        """Invalidate a session. Returns False if the token is unknown."""
        session = self.db.execute(
            select(UserSession).where(UserSession.session_token == session_token)
        ).scalar_one_or_none()

        if not session:
            return False

        session.is_active = False
        session.logged_out_at = datetime.utcnow()
        self.db.commit()

        return True

    def logout_all_sessions(self, employee_id: int, commit: bool = True) -> int:
        """
        Invalidate all sessions for an employee.

        Used on deactivation and password resets.
        """
        sessions = self.db.execute(
            select(UserSession)
            .where(UserSession.employee_id == employee_id)
            .where(UserSession.is_active == True)
        ).scalars().all()

        now = datetime.utcnow()
        for session in sessions:
            session.is_active = False
            session.logged_out_at = now

        if commit:
            self.db.commit()
        return len(sessions)

    def set_password(self, employee: Employee, new_password: str, commit: bool = True) -> None:
        employee.password_hash = self.hash_password(new_password)
        if commit:
            self.db.commit()

    def change_password(
        self,
        employee: Employee,
        current_password: str,
        new_password: str,
        confirm_password: Optional[str] = None,
    ) -> None:
        """
        Change an employee's password (requires current password).

        Raises:
            AuthenticationError: If current password is wrong
            ValueError: If the new password is unacceptable
        """
        if confirm_password is not None and new_password != confirm_password:
            raise ValueError("New passwords do not match")

        if len(new_password) < settings.min_password_length:
            raise ValueError(f"Password must be at least {settings.min_password_length} characters")

        if len(new_password.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")

        if not self.verify_password(current_password, employee.password_hash):
            raise AuthenticationError("Current password is incorrect")

        self.set_password(employee, new_password)
