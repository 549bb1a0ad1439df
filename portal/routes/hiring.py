# Hippies Portal - Hiring Routes
# Public job board and applications, admin hiring pipeline

from datetime import date, datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_mail_service, require_admin
from portal.models.employee import Employee
from portal.models.hiring import Application, JobOpening
from portal.services.applicant_quiz import randomized_quiz
from portal.services.hiring import HiringService
from portal.services.mail import MailService


router = APIRouter(prefix="/api", tags=["hiring"])


# Request/Response models

class JobCreate(BaseModel):
    title: str
    description: Optional[str] = None
    employment_type: Optional[str] = None
    status: Optional[str] = None


class JobUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    employment_type: Optional[str] = None
    status: Optional[str] = None


class InterviewSlot(BaseModel):
    date: date
    slot: str


class ApplicationSubmit(BaseModel):
    full_name: str
    email: str
    contact_number: Optional[str] = None
    message: Optional[str] = None
    resume_url: Optional[str] = None
    interview_schedules: list[InterviewSlot] = []
    quiz_answers: dict[str, str] = {}


class ApplicationStatusUpdate(BaseModel):
    status: str
    interview_time: Optional[datetime] = None


class JobResponse(BaseModel):
    job_id: int
    title: str
    description: Optional[str] = None
    employment_type: str
    status: str
    created_at: datetime


class SubmittedResponse(BaseModel):
    application_id: int
    status: str
    quiz_score: Optional[int] = None
    email_sent: bool


class ApplicationResponse(BaseModel):
    application_id: int
    job_id: Optional[int] = None
    job_title: Optional[str] = None
    full_name: str
    email: str
    contact_number: Optional[str] = None
    message: Optional[str] = None
    resume_url: Optional[str] = None
    interview_schedules: list[dict[str, Any]]
    preferred_interview_date: Optional[date] = None
    preferred_interview_time: Optional[str] = None
    interview_time: Optional[datetime] = None
    quiz_answers: list[dict[str, Any]]
    quiz_score: Optional[int] = None
    status: str
    created_at: datetime
    email_sent: Optional[bool] = None


def job_response(job: JobOpening) -> JobResponse:
    return JobResponse(
        job_id=job.job_id,
        title=job.title,
        description=job.description,
        employment_type=job.employment_type,
        status=job.status,
        created_at=job.created_at,
    )


def application_response(application: Application, email_sent: Optional[bool] = None) -> ApplicationResponse:
    return ApplicationResponse(
        application_id=application.application_id,
        job_id=application.job_id,
        job_title=application.job.title if application.job else None,
        full_name=application.full_name,
        email=application.email,
        contact_number=application.contact_number,
        message=application.message,
        resume_url=application.resume_url,
        interview_schedules=application.interview_schedules,
        preferred_interview_date=application.preferred_interview_date,
        preferred_interview_time=application.preferred_interview_time,
        interview_time=application.interview_time,
        quiz_answers=application.quiz_answers,
        quiz_score=application.quiz_score,
        status=application.status,
        created_at=application.created_at,
        email_sent=email_sent,
    )


# Public job board

@router.get("/jobs", response_model=list[JobResponse])
def list_open_jobs(db: Session = Depends(get_db)):
    return [job_response(j) for j in HiringService(db, None).list_jobs(open_only=True)]


@router.get("/jobs/quiz")
def applicant_quiz() -> list[dict[str, Any]]:
    """The employment questionnaire, shuffled, without answers."""
    return randomized_quiz()


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_open_job(job_id: int, db: Session = Depends(get_db)):
    return job_response(HiringService(db, None).get_open_job(job_id))


@router.post("/jobs/{job_id}/apply", response_model=SubmittedResponse, status_code=status.HTTP_201_CREATED)
def apply(
    job_id: int,
    payload: ApplicationSubmit,
    request: Request,
    db: Session = Depends(get_db),
    mail: MailService = Depends(get_mail_service),
):
    """Save the application, then send the confirmation email."""
    service = HiringService(db, None, client_ip(request), mail=mail)
    fields = payload.model_dump()
    fields["interview_schedules"] = [
        {"date": s.date, "slot": s.slot} for s in payload.interview_schedules
    ]
    application = service.submit_application(job_id, fields)
    db.commit()

    email_sent = service.send_application_confirmation(application)
    return SubmittedResponse(
        application_id=application.application_id,
        status=application.status,
        quiz_score=application.quiz_score,
        email_sent=email_sent,
    )


# Admin: jobs

@router.get("/admin/jobs", response_model=list[JobResponse])
def list_jobs(
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [job_response(j) for j in HiringService(db, user.employee_id).list_jobs()]


@router.post("/admin/jobs", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    job = HiringService(db, user.employee_id, client_ip(request)).create_job(payload.model_dump())
    db.commit()
    return job_response(job)


@router.patch("/admin/jobs/{job_id}", response_model=JobResponse)
def update_job(
    job_id: int,
    payload: JobUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    job = HiringService(db, user.employee_id, client_ip(request)).update_job(
        job_id, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return job_response(job)


@router.post("/admin/jobs/{job_id}/toggle", response_model=JobResponse)
def toggle_job(
    job_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Open <-> Closed."""
    job = HiringService(db, user.employee_id, client_ip(request)).toggle_status(job_id)
    db.commit()
    return job_response(job)


@router.delete("/admin/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    HiringService(db, user.employee_id, client_ip(request)).delete_job(job_id)
    db.commit()


# Admin: applications

@router.get("/admin/applications", response_model=list[ApplicationResponse])
def list_applications(
    job_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    applications = HiringService(db, user.employee_id).list_applications(job_id, status_filter)
    return [application_response(a) for a in applications]


@router.get("/admin/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: int,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return application_response(HiringService(db, user.employee_id).get_application(application_id))


@router.patch("/admin/applications/{application_id}/status", response_model=ApplicationResponse)
def update_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
    mail: MailService = Depends(get_mail_service),
):
    """Setting interview_set emails the applicant their interview time."""
    service = HiringService(db, user.employee_id, client_ip(request), mail=mail)
    application = service.update_status(application_id, payload.status, payload.interview_time)
    db.commit()

    email_sent = None
    if application.status == "interview_set":
        email_sent = service.send_interview_confirmation(application)
    return application_response(application, email_sent)


@router.delete("/admin/applications/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    HiringService(db, user.employee_id, client_ip(request)).delete_application(application_id)
    db.commit()
