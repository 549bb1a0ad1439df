# Hippies Portal - Hiring Models
# Public job openings and the applications submitted against them

from datetime import date, datetime
from typing import Optional, Any

from sqlalchemy import String, Integer, Date, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, AuditMixin


JOB_STATUSES = ("Open", "Closed")
APPLICATION_STATUSES = ("pending", "interview_set", "accepted", "declined", "cancelled")


class JobOpening(AuditMixin, Base):
    __tablename__ = "job_openings"

    job_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    employment_type: Mapped[str] = mapped_column(String(10), nullable=False, default="VA")
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="Open", index=True)

    applications: Mapped[list["Application"]] = relationship("Application", back_populates="job")

    def __repr__(self) -> str:
        return f"<JobOpening {self.job_id} '{self.title}' ({self.status})>"

    @property
    def is_open(self) -> bool:
        return self.status == "Open"


class Application(Base):
    """
    A job application from a public visitor.

    interview_schedules holds up to three preferred slots as
    {"date": "YYYY-MM-DD", "slot": "2 PM - 5 PM"} dicts.
    quiz_answers holds {"question", "selected", "correct"} dicts and
    quiz_score the number answered correctly.

    Applications sent through the older general hiring form have no
    job and carry preferred_interview_date / _time instead.
    """

    __tablename__ = "applications"

    application_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("job_openings.job_id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    full_name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resume_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    interview_schedules: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    preferred_interview_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    preferred_interview_time: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    interview_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    quiz_answers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    quiz_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    modified_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )

    job: Mapped[Optional["JobOpening"]] = relationship("JobOpening", back_populates="applications")

    def __repr__(self) -> str:
        return f"<Application {self.application_id} {self.email} job={self.job_id} ({self.status})>"
