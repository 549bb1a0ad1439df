# Hippies Portal - Task Models

from datetime import date, datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Boolean, Integer, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, AuditMixin

if TYPE_CHECKING:
    from .employee import Employee


TASK_PRIORITIES = ("Low", "Medium", "High")
TASK_STATUSES = ("Pending", "In Progress", "Completed", "On Hold")


class Task(AuditMixin, Base):
    """
    Work item assigned to an employee.

    Progress is derived from subitems and never stored.
    """

    __tablename__ = "tasks"

    task_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True,
        index=True
    )

    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="Medium")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending", index=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    assignee: Mapped[Optional["Employee"]] = relationship("Employee", foreign_keys=[assigned_to])
    subitems: Mapped[list["TaskSubitem"]] = relationship(
        "TaskSubitem",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TaskSubitem.subitem_id",
    )
    comments: Mapped[list["TaskComment"]] = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TaskComment.created_at",
    )

    def __repr__(self) -> str:
        return f"<Task {self.task_id} '{self.title}' ({self.status})>"

    @property
    def progress(self) -> int:
        """Percent of subitems completed, 0 when there are none."""
        if not self.subitems:
            return 0
        done = sum(1 for s in self.subitems if s.completed)
        return round(done / len(self.subitems) * 100)


class TaskSubitem(Base):
    """Checklist entry under a task."""

    __tablename__ = "task_subitems"

    subitem_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tasks.task_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    task: Mapped["Task"] = relationship("Task", back_populates="subitems")

    def __repr__(self) -> str:
        mark = "x" if self.completed else " "
        return f"<TaskSubitem {self.subitem_id} [{mark}] {self.title}>"


class TaskComment(Base):
    __tablename__ = "task_comments"

    comment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tasks.task_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    commenter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    task: Mapped["Task"] = relationship("Task", back_populates="comments")
    commenter: Mapped["Employee"] = relationship("Employee", foreign_keys=[commenter_id])

    def __repr__(self) -> str:
        return f"<TaskComment {self.comment_id} on task {self.task_id} by {self.commenter_id}>"
