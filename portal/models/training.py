# Hippies Portal - Training Models
# Training modules, versioned quizzes, and per-employee completion

from datetime import datetime
from typing import Optional, Any, TYPE_CHECKING

from sqlalchemy import String, Boolean, Integer, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, AuditMixin

if TYPE_CHECKING:
    from .employee import Employee


MEDIA_TYPES = ("video", "document")


class Training(AuditMixin, Base):
    """
    A training module.

    media is a list of {"title", "type", "url"} dicts where type is
    "video" or "document".
    """

    __tablename__ = "trainings"

    training_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    media: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    quizzes: Mapped[list["TrainingQuiz"]] = relationship(
        "TrainingQuiz",
        back_populates="training",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TrainingQuiz.version",
    )

    def __repr__(self) -> str:
        return f"<Training {self.training_id} '{self.title}'>"

    @property
    def active_quiz(self) -> Optional["TrainingQuiz"]:
        for quiz in self.quizzes:
            if quiz.is_active:
                return quiz
        return None


class TrainingQuiz(Base):
    """
    One version of a training's quiz.

    content is a list of {"question", "choices", "answer"} dicts. Saving
    a quiz creates the next version and deactivates the previous one so
    tracker rows keep pointing at the version that was actually taken.
    """

    __tablename__ = "training_quizzes"

    __table_args__ = (
        UniqueConstraint("training_id", "version", name="uq_training_quizzes_version"),
    )

    quiz_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    training_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trainings.training_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    content: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )

    training: Mapped["Training"] = relationship("Training", back_populates="quizzes")

    def __repr__(self) -> str:
        state = "active" if self.is_active else "retired"
        return f"<TrainingQuiz training={self.training_id} v{self.version} ({state})>"


class TrainingTracker(Base):
    """Completed quiz attempt. One row per employee and training."""

    __tablename__ = "training_tracker"

    __table_args__ = (
        UniqueConstraint("employee_id", "training_id", name="uq_training_tracker_employee_training"),
    )

    tracker_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False,
        index=True
    )
    training_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trainings.training_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    quiz_score: Mapped[int] = mapped_column(Integer, nullable=False)
    quiz_version: Mapped[int] = mapped_column(Integer, nullable=False)
    quiz_answers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    completed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])
    training: Mapped["Training"] = relationship("Training")

    def __repr__(self) -> str:
        return f"<TrainingTracker employee={self.employee_id} training={self.training_id} {self.quiz_score}%>"
