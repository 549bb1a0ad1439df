# Hippies Portal - Schedule Model

from datetime import date, datetime, time, timedelta
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Integer, Date, Time, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, AuditMixin

if TYPE_CHECKING:
    from .employee import Employee


class Schedule(AuditMixin, Base):
    """
    A planned shift for one employee on one day.

    time_out earlier than time_in means the shift runs past midnight
    and ends on the following day (common for VA night coverage).
    """

    __tablename__ = "schedules"

    __table_args__ = (
        Index("ix_schedules_employee_date", "employee_id", "date"),
    )

    schedule_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False,
        index=True
    )

    shift_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    time_in: Mapped[time] = mapped_column(Time, nullable=False)
    time_out: Mapped[time] = mapped_column(Time, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])

    def __repr__(self) -> str:
        return f"<Schedule {self.schedule_id} employee={self.employee_id} {self.shift_date} {self.time_in}-{self.time_out}>"

    @property
    def is_overnight(self) -> bool:
        return self.time_out <= self.time_in

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.shift_date, self.time_in)

    @property
    def ends_at(self) -> datetime:
        end_day = self.shift_date + timedelta(days=1) if self.is_overnight else self.shift_date
        return datetime.combine(end_day, self.time_out)

    @property
    def hours(self) -> float:
        return round((self.ends_at - self.starts_at).total_seconds() / 3600, 2)
