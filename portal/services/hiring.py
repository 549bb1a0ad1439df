# Hippies Portal - Hiring Service
# Job openings, public applications and the interview pipeline

from datetime import date, datetime
from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from portal.models.employee import EMPLOYEE_TYPES
from portal.models.hiring import Application, JobOpening, APPLICATION_STATUSES, JOB_STATUSES
from portal.services.applicant_quiz import grade_answers
from portal.services.audit import AuditService
from portal.services.errors import NotFoundError
from portal.services.mail import MailError, MailService
from portal.services.validation import (
    is_acceptable_applicant_email,
    optional_text,
    require_choice,
    require_text,
    to_naive_utc,
)


logger = logging.getLogger(__name__)

INTERVIEW_SLOTS = (
    "8 AM - 11 AM",
    "11 AM - 2 PM",
    "2 PM - 5 PM",
    "5 PM - 8 PM",
    "8 PM - 11 PM",
    "11 PM - 2 AM",
    "2 AM - 5 AM",
    "5 AM - 8 AM",
)
MAX_INTERVIEW_SLOTS = 3

APPLICANT_EMAIL_MESSAGE = "Please enter a valid personal or business email address."


def clean_interview_schedules(schedules: Optional[list[dict[str, Any]]]) -> list[dict[str, str]]:
    """Validate up to three {"date", "slot"} preferences."""
    schedules = schedules or []
    if len(schedules) > MAX_INTERVIEW_SLOTS:
        raise ValueError(f"Choose at most {MAX_INTERVIEW_SLOTS} interview slots")

    cleaned = []
    for entry in schedules:
        slot_date = entry.get("date")
        if isinstance(slot_date, str):
            try:
                slot_date = date.fromisoformat(slot_date)
            except ValueError:
                raise ValueError("Interview date must be YYYY-MM-DD")
        if not isinstance(slot_date, date):
            raise ValueError("Interview date is required")

        slot = require_choice(entry.get("slot"), INTERVIEW_SLOTS, "Interview slot")
        item = {"date": slot_date.isoformat(), "slot": slot}
        if item in cleaned:
            raise ValueError("Interview slots must be different")
        cleaned.append(item)
    return cleaned


class HiringService:
    """
    Service for job openings and applications.

    Usage:
        # public
        service = HiringService(db, None, ip, mail=mail)
        application = service.submit_application(job_id, {...})
        db.commit()
        service.send_application_confirmation(application)

        # admin
        service = HiringService(db, admin.employee_id, ip, mail=mail)
        service.update_status(application_id, "interview_set", interview_time=when)
    """

    def __init__(
        self,
        db: Session,
        current_user_id: Optional[int],
        ip_address: Optional[str] = None,
        mail: Optional[MailService] = None,
    ):
        self.db = db
        self.current_user_id = current_user_id
        self.audit = AuditService(db, current_user_id, ip_address)
        self.mail = mail

    # =========================================================================
    # Job openings
    # =========================================================================

    def get_job(self, job_id: int) -> JobOpening:
        job = self.db.get(JobOpening, job_id)
        if not job:
            raise NotFoundError(f"Job {job_id} not found")
        return job

    def get_open_job(self, job_id: int) -> JobOpening:
        job = self.get_job(job_id)
        if not job.is_open:
            raise NotFoundError(f"Job {job_id} is not open")
        return job

    def list_jobs(self, open_only: bool = False) -> list[JobOpening]:
        query = select(JobOpening)
        if open_only:
            query = query.where(JobOpening.status == "Open")
        return self.db.execute(
            query.order_by(JobOpening.created_at.desc(), JobOpening.job_id.desc())
        ).scalars().all()

    def create_job(self, fields: dict[str, Any]) -> JobOpening:
        job = JobOpening(
            title=require_text(fields.get("title"), "Title"),
            description=optional_text(fields.get("description")),
            employment_type=require_choice(fields.get("employment_type") or "VA", EMPLOYEE_TYPES, "Employment type"),
            status=require_choice(fields.get("status") or "Open", JOB_STATUSES, "Status"),
            created_by=self.current_user_id,
        )
        self.db.add(job)
        self.db.flush()
        self.audit.log_insert(job)
        return job

    def update_job(self, job_id: int, fields: dict[str, Any]) -> JobOpening:
        job = self.get_job(job_id)
        changes = {}
        if "title" in fields:
            changes["title"] = require_text(fields.get("title"), "Title")
        if "description" in fields:
            changes["description"] = optional_text(fields.get("description"))
        if "employment_type" in fields:
            changes["employment_type"] = require_choice(fields.get("employment_type"), EMPLOYEE_TYPES, "Employment type")
        if "status" in fields:
            changes["status"] = require_choice(fields.get("status"), JOB_STATUSES, "Status")

        self.audit.update_fields(job, changes)
        return job

    def toggle_status(self, job_id: int) -> JobOpening:
        job = self.get_job(job_id)
        self.audit.update_fields(job, {"status": "Closed" if job.is_open else "Open"})
        return job

    def delete_job(self, job_id: int) -> None:
        """Applications stay; their job_id becomes NULL."""
        job = self.get_job(job_id)
        for application in list(job.applications):
            application.job_id = None
        self.audit.log_delete(job)
        self.db.delete(job)

    # =========================================================================
    # Applications
    # =========================================================================

    def get_application(self, application_id: int) -> Application:
        application = self.db.get(Application, application_id)
        if not application:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def list_applications(
        self,
        job_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Application]:
        query = select(Application).options(joinedload(Application.job))
        if job_id is not None:
            query = query.where(Application.job_id == job_id)
        if status:
            require_choice(status, APPLICATION_STATUSES, "Status")
            query = query.where(Application.status == status)

        return self.db.execute(
            query.order_by(Application.created_at.desc(), Application.application_id.desc())
        ).scalars().all()

    def submit_application(self, job_id: int, fields: dict[str, Any]) -> Application:
        """
        Public application against an open job.

        Raises:
            NotFoundError: If the job does not exist or is closed
            ValueError: If a field fails validation
        """
        job = self.get_open_job(job_id)
        contact = self._clean_contact(fields)
        schedules = clean_interview_schedules(fields.get("interview_schedules"))
        score, graded = grade_answers(fields.get("quiz_answers") or {})

        application = Application(
            job_id=job.job_id,
            **contact,
            resume_url=optional_text(fields.get("resume_url")),
            interview_schedules=schedules,
            quiz_answers=graded,
            quiz_score=score,
            status="pending",
        )
        self.db.add(application)
        self.db.flush()
        self.audit.log_insert(application)

        logger.info("Application %s for job %s (quiz %s)", application.application_id, job.job_id, score)
        return application

    def submit_general_application(self, fields: dict[str, Any]) -> Application:
        """The /hiring page form: no job, one preferred date and time."""
        contact = self._clean_contact(fields)

        preferred_date = fields.get("preferred_interview_date")
        if isinstance(preferred_date, str) and preferred_date:
            try:
                preferred_date = date.fromisoformat(preferred_date)
            except ValueError:
                raise ValueError("Preferred interview date must be YYYY-MM-DD")

        application = Application(
            job_id=None,
            **contact,
            preferred_interview_date=preferred_date or None,
            preferred_interview_time=optional_text(fields.get("preferred_interview_time")),
            status="pending",
        )
        self.db.add(application)
        self.db.flush()
        self.audit.log_insert(application)
        return application

    def update_status(
        self,
        application_id: int,
        status: str,
        interview_time: Optional[datetime] = None,
    ) -> Application:
        """
        Move an application through the pipeline.

        interview_set needs an interview_time; call
        send_interview_confirmation() after committing.
        """
        require_choice(status, APPLICATION_STATUSES, "Status")
        application = self.get_application(application_id)

        changes: dict[str, Any] = {"status": status}
        if status == "interview_set":
            if interview_time is None:
                raise ValueError("Interview time is required")
            changes["interview_time"] = to_naive_utc(interview_time)
        elif interview_time is not None:
            changes["interview_time"] = to_naive_utc(interview_time)

        self.audit.update_fields(application, changes)
        return application

    def delete_application(self, application_id: int) -> None:
        application = self.get_application(application_id)
        self.audit.log_delete(application)
        self.db.delete(application)

    # =========================================================================
    # Emails
    # =========================================================================

    def send_application_confirmation(self, application: Application) -> bool:
        if self.mail is None:
            return False
        job_title = application.job.title if application.job else None
        try:
            self.mail.send_application_confirmation(application.full_name, application.email, job_title)
            return True
        except MailError as e:
            logger.warning("Application email to %s failed: %s", application.email, e)
            return False

    def send_interview_confirmation(self, application: Application) -> bool:
        if self.mail is None or application.interview_time is None:
            return False
        job_title = application.job.title if application.job else None
        try:
            self.mail.send_interview_confirmation(
                application.full_name,
                application.email,
                application.interview_time,
                job_title,
            )
            return True
        except MailError as e:
            logger.warning("Interview email to %s failed: %s", application.email, e)
            return False

    # Validation helpers

    def _clean_contact(self, fields: dict[str, Any]) -> dict[str, Any]:
        email = (fields.get("email") or "").strip().lower()
        if not is_acceptable_applicant_email(email):
            raise ValueError(APPLICANT_EMAIL_MESSAGE)

        return {
            "full_name": require_text(fields.get("full_name"), "Full name"),
            "email": email,
            "contact_number": optional_text(fields.get("contact_number")),
            "message": optional_text(fields.get("message")),
        }
