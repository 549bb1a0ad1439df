# Hippies Portal - Announcement Model

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .employee import Employee


class Announcement(Base):
    """Staff-wide notice shown on both dashboards, newest first."""

    __tablename__ = "announcements"

    announcement_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    author: Mapped[Optional["Employee"]] = relationship("Employee", foreign_keys=[created_by])

    def __repr__(self) -> str:
        return f"<Announcement {self.announcement_id} '{self.title}'>"
