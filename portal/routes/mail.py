# Hippies Portal - Mail Relay Routes
# JSON endpoints for the three transactional emails (camelCase bodies)

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from portal.dependencies import get_mail_service
from portal.services.mail import MailError, MailService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mail", tags=["mail"])


def missing_fields() -> JSONResponse:
    return JSONResponse({"error": "Missing required fields"}, status_code=status.HTTP_400_BAD_REQUEST)


def relay_failed(error: MailError) -> JSONResponse:
    return JSONResponse(
        {"error": "Failed to send email", "details": str(error)},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@router.post("/application-confirmation")
def application_confirmation(
    payload: dict[str, Any] = Body(...),
    mail: MailService = Depends(get_mail_service),
):
    """{name, email, jobTitle?}"""
    name, email = payload.get("name"), payload.get("email")
    if not name or not email:
        return missing_fields()

    try:
        data = mail.send_application_confirmation(name, email, payload.get("jobTitle") or None)
    except MailError as e:
        return relay_failed(e)
    return {"message": f"Confirmation email sent to {email}", "brevo": data}


@router.post("/interview-confirmation")
def interview_confirmation(
    payload: dict[str, Any] = Body(...),
    mail: MailService = Depends(get_mail_service),
):
    """{name, email, jobTitle?, interviewTime}"""
    name, email = payload.get("name"), payload.get("email")
    interview_time = payload.get("interviewTime")
    if not name or not email or not interview_time:
        return missing_fields()

    try:
        data = mail.send_interview_confirmation(name, email, interview_time, payload.get("jobTitle") or None)
    except ValueError:
        return JSONResponse({"error": "Invalid interviewTime"}, status_code=status.HTTP_400_BAD_REQUEST)
    except MailError as e:
        return relay_failed(e)
    return {"message": f"Interview email sent to {email}", "brevo": data}


@router.post("/welcome")
def welcome(
    payload: dict[str, Any] = Body(...),
    mail: MailService = Depends(get_mail_service),
):
    """{name, email, tempPassword}"""
    name, email = payload.get("name"), payload.get("email")
    temp_password = payload.get("tempPassword")
    if not name or not email or not temp_password:
        return missing_fields()

    try:
        data = mail.send_welcome(name, email, temp_password)
    except MailError as e:
        return relay_failed(e)
    return {"success": True, "result": data}
