# Hippies Portal - Authentication Routes
# Login, logout, and password management (HTML forms and JSON API)

from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.config import get_settings
from portal.database import get_db
from portal.dependencies import (
    SESSION_COOKIE_NAME,
    RequirePage,
    client_ip,
    get_current_user,
    get_current_user_optional,
    get_session_token,
)
from portal.models.employee import Employee
from portal.services.auth import AuthService, AuthenticationError


settings = get_settings()

router = APIRouter(tags=["auth"])


# Request/Response models

class LoginRequest(BaseModel):
    email: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class MeResponse(BaseModel):
    employee_id: int
    full_name: str
    nickname: Optional[str] = None
    email: str
    role: str
    employee_type: str
    dashboard_url: str


def me_response(user: Employee) -> MeResponse:
    return MeResponse(
        employee_id=user.employee_id,
        full_name=user.full_name,
        nickname=user.nickname,
        email=user.email,
        role=user.role,
        employee_type=user.employee_type,
        dashboard_url=user.dashboard_url,
    )


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_expire_minutes * 60,
    )


# HTML

@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    user: Optional[Employee] = Depends(get_current_user_optional),
    error: Optional[str] = None,
):
    """Display the login form; logged-in users go to their dashboard."""
    if user:
        return RedirectResponse(url=user.dashboard_url, status_code=302)

    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "auth/login.html",
        {"error": error},
    )


@router.post("/login")
def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    """
    Process login form submission.

    On success: set the session cookie and redirect to the dashboard.
    On failure: re-render the form with the error.
    """
    auth = AuthService(db)
    templates = request.app.state.templates

    try:
        employee, session = auth.login(
            email,
            password,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except AuthenticationError as e:
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"error": str(e), "email": email},
            status_code=401,
        )

    redirect = RedirectResponse(url=employee.dashboard_url, status_code=302)
    set_session_cookie(redirect, session.session_token)
    return redirect


@router.get("/logout")
@router.post("/logout")
def logout(
    request: Request,
    db: Session = Depends(get_db),
):
    """Invalidate the session and clear the cookie."""
    session_token = get_session_token(request)
    if session_token:
        AuthService(db).logout(session_token)

    redirect = RedirectResponse(url="/login", status_code=302)
    redirect.delete_cookie(SESSION_COOKIE_NAME)
    return redirect


@router.get("/change-password", response_class=HTMLResponse)
def change_password_page(
    request: Request,
    user: Employee = Depends(RequirePage()),
    success: bool = False,
):
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "auth/change_password.html",
        {"user": user, "success": success},
    )


@router.post("/change-password")
def change_password_submit(
    request: Request,
    current_password: str = Form(...),
    new_password: str = Form(...),
    confirm_password: str = Form(...),
    user: Employee = Depends(RequirePage()),
    db: Session = Depends(get_db),
):
    templates = request.app.state.templates

    try:
        AuthService(db).change_password(user, current_password, new_password, confirm_password)
    except (AuthenticationError, ValueError) as e:
        return templates.TemplateResponse(
            request,
            "auth/change_password.html",
            {"user": user, "error": str(e)},
            status_code=400,
        )

    return templates.TemplateResponse(
        request,
        "auth/change_password.html",
        {"user": user, "success": True},
    )


# JSON API

@router.post("/api/auth/login", response_model=MeResponse)
def api_login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """Log in and set the session cookie; returns the profile summary."""
    employee, session = AuthService(db).login(
        payload.email,
        payload.password,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    set_session_cookie(response, session.session_token)
    return me_response(employee)


@router.post("/api/auth/logout")
def api_logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    session_token = get_session_token(request)
    if session_token:
        AuthService(db).logout(session_token)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/api/auth/me", response_model=MeResponse)
def api_me(user: Employee = Depends(get_current_user)):
    return me_response(user)


@router.post("/api/auth/change-password")
def api_change_password(
    payload: ChangePasswordRequest,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        AuthService(db).change_password(
            user,
            payload.current_password,
            payload.new_password,
            payload.confirm_password,
        )
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"success": True}
