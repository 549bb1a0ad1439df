# Hippies Portal - Security Log Models
# CCTV cameras and the store's incident / cash / door logbooks

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import String, Boolean, Integer, Date, DateTime, Time, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, declared_attr

from .base import Base


CAMERA_STATUSES = ("active", "inactive")


class CctvCamera(Base):
    """
    A store camera and its last reported battery level.

    Every battery change leaves a CctvLog row so the history of
    recharges can be reviewed.
    """

    __tablename__ = "cctv_cameras"

    camera_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    camera_name: Mapped[str] = mapped_column(String(100), nullable=False)
    battery_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="active")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    battery_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    inputted_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<CctvCamera {self.camera_id} {self.camera_name} {self.battery_percentage}%>"


class CctvLog(Base):
    __tablename__ = "cctv_logs"

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    camera_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cctv_cameras.camera_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    battery_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<CctvLog camera={self.camera_id} {self.battery_percentage}% '{self.note}'>"


class SecurityLogMixin:
    """
    Columns shared by every logbook table.

    The date and time columns are named "date" and "time" in the
    database; they are mapped as log_date / log_time on the class.
    """

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    log_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    log_time: Mapped[time] = mapped_column("time", Time, nullable=False)
    footage_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    @declared_attr
    def inputted_by(cls) -> Mapped[Optional[int]]:
        return mapped_column(Integer, ForeignKey("employees.employee_id"), nullable=True)

    @declared_attr
    def modified_by(cls) -> Mapped[Optional[int]]:
        return mapped_column(Integer, ForeignKey("employees.employee_id"), nullable=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.log_id} {self.log_date} {self.log_time}>"


class EmployeeSubjectMixin:
    """Logbooks that record which employee was involved."""

    @declared_attr
    def employee_id(cls) -> Mapped[Optional[int]]:
        return mapped_column(Integer, ForeignKey("employees.employee_id"), nullable=True, index=True)


class SoldOutLog(SecurityLogMixin, EmployeeSubjectMixin, Base):
    __tablename__ = "sold_out_logs"

    number_of_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    id_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verifier_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class DoorLog(SecurityLogMixin, EmployeeSubjectMixin, Base):
    __tablename__ = "door_logs"

    door_location: Mapped[str] = mapped_column(String(100), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class EmployeeViolation(SecurityLogMixin, EmployeeSubjectMixin, Base):
    __tablename__ = "employee_violations"

    description: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class IncidentReport(SecurityLogMixin, Base):
    __tablename__ = "incident_reports"

    description: Mapped[str] = mapped_column(Text, nullable=False)
    management_contacted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    police_contacted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class SafeRoomLog(SecurityLogMixin, EmployeeSubjectMixin, Base):
    __tablename__ = "safe_room_logs"

    reason_for_entry: Mapped[str] = mapped_column(Text, nullable=False)


class CashRemovalLog(SecurityLogMixin, EmployeeSubjectMixin, Base):
    __tablename__ = "cash_removal_logs"

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
