# Hippies Portal - Shift Log Model

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Integer, DateTime, Numeric, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .employee import Employee


class ShiftLog(Base):
    """
    Actual clock-in / clock-out record.

    A row with shift_end NULL is an open shift. Each employee has at
    most one open shift at a time; the service layer enforces it.

    duration is stored in hours (2 decimal places) once the shift is
    closed so payroll can sum it without recomputing.
    """

    __tablename__ = "shift_logs"

    __table_args__ = (
        Index("ix_shift_logs_employee_start", "employee_id", "shift_start"),
    )

    shift_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False,
        index=True
    )

    shift_start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    shift_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    duration: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    report: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    modified_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )

    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])

    def __repr__(self) -> str:
        status = "open" if self.is_open else f"{self.duration}h"
        return f"<ShiftLog {self.shift_id} employee={self.employee_id} {status}>"

    @property
    def is_open(self) -> bool:
        return self.shift_end is None

    def close(self, shift_end: datetime) -> None:
        """Set the end time and compute duration in hours."""
        self.shift_end = shift_end
        self.duration = self.calculated_hours

    @property
    def calculated_hours(self) -> Optional[Decimal]:
        if self.shift_end is None:
            return None
        return self.hours_between(self.shift_start, self.shift_end)

    @staticmethod
    def hours_between(shift_start: datetime, shift_end: datetime) -> Decimal:
        seconds = (shift_end - shift_start).total_seconds()
        return Decimal(str(seconds / 3600)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
