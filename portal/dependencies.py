# Hippies Portal - Request Dependencies
# Session lookup, role guards, and access to app-wide services

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.models.employee import Employee
from portal.services.auth import AuthService
from portal.services.mail import MailService


# Cookie name for session token
SESSION_COOKIE_NAME = "portal_session"


class PageRedirect(Exception):
    """
    Raised by page guards; the app turns it into a 302.

    API routes raise HTTPException instead so clients get JSON.
    """

    def __init__(self, url: str):
        self.url = url


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE_NAME)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[Employee]:
    """
    Get the current user if logged in, None otherwise.

    Usage:
        @router.get("/")
        def home(user: Optional[Employee] = Depends(get_current_user_optional)):
            ...
    """
    session_token = get_session_token(request)
    if not session_token:
        return None

    return AuthService(db).validate_session(session_token)


def get_current_user(
    user: Optional[Employee] = Depends(get_current_user_optional),
) -> Employee:
    """
    Get the current logged-in user or raise 401.

    Usage:
        @router.get("/api/shifts/me")
        def my_shifts(user: Employee = Depends(get_current_user)):
            ...
    """
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(
    user: Employee = Depends(get_current_user),
) -> Employee:
    """
    Require the current user to be an admin.

    Usage:
        @router.post("/api/payroll/periods")
        def create_period(user: Employee = Depends(require_admin)):
            ...
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


class RequireRole:
    """
    Flexible role checker dependency.

    Usage:
        @router.get("/api/special")
        def special(user: Employee = Depends(RequireRole("employee"))):
            ...
    """

    def __init__(self, *allowed_roles: str):
        self.allowed_roles = allowed_roles

    def __call__(self, user: Employee = Depends(get_current_user)) -> Employee:
        if user.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Required role: {' or '.join(self.allowed_roles)}",
            )
        return user


class RequirePage:
    """
    Guard for HTML pages.

    No session redirects to /login; a role mismatch redirects to the
    user's own dashboard.

    Usage:
        @router.get("/admin-dashboard")
        def admin_dashboard(user: Employee = Depends(RequirePage("admin"))):
            ...
    """

    def __init__(self, *allowed_roles: str):
        self.allowed_roles = allowed_roles

    def __call__(self, user: Optional[Employee] = Depends(get_current_user_optional)) -> Employee:
        if not user:
            raise PageRedirect("/login")
        if self.allowed_roles and user.role not in self.allowed_roles:
            raise PageRedirect(user.dashboard_url)
        return user


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail


def get_notifier(request: Request):
    """The app's ConnectionManager (or any object with publish())."""
    return request.app.state.notifier
