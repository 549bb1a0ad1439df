# Hippies Portal - Shift Service
# Clock in / clock out and admin corrections to shift logs

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from portal.models.employee import Employee
from portal.models.shift_log import ShiftLog
from portal.services.audit import AuditService
from portal.services.errors import NotFoundError
from portal.services.validation import optional_text, require_text, to_naive_utc


logger = logging.getLogger(__name__)

MAX_SHIFT_HOURS = 24


class ShiftService:
    """
    Service for shift logs.

    Usage:
        service = ShiftService(db, user.employee_id, request.client.host)

        shift = service.clock_in(user)
        ...
        shift = service.clock_out(user, report="Restocked glass, counted drawer")

    An employee has at most one open shift (shift_end NULL).
    """

    def __init__(
        self,
        db: Session,
        current_user_id: Optional[int],
        ip_address: Optional[str] = None,
    ):
        self.db = db
        self.current_user_id = current_user_id
        self.audit = AuditService(db, current_user_id, ip_address)

    def get_shift(self, shift_id: int) -> ShiftLog:
        shift = self.db.get(ShiftLog, shift_id)
        if not shift:
            raise NotFoundError(f"Shift {shift_id} not found")
        return shift

    def current_shift(self, employee_id: int) -> Optional[ShiftLog]:
        return self.db.execute(
            select(ShiftLog)
            .where(ShiftLog.employee_id == employee_id)
            .where(ShiftLog.shift_end.is_(None))
            .order_by(ShiftLog.shift_start.desc())
        ).scalars().first()

    def clock_in(self, employee: Employee, now: Optional[datetime] = None) -> ShiftLog:
        """
        Raises:
            ValueError: If the employee already has an open shift
        """
        if self.current_shift(employee.employee_id):
            raise ValueError("You are already clocked in")

        shift = ShiftLog(
            employee_id=employee.employee_id,
            shift_start=to_naive_utc(now) or datetime.utcnow(),
        )
        self.db.add(shift)
        self.db.flush()
        self.audit.log_insert(shift, context="clock in")

        logger.info("Employee %s clocked in (shift %s)", employee.employee_id, shift.shift_id)
        return shift

    def clock_out(
        self,
        employee: Employee,
        report: Optional[str],
        now: Optional[datetime] = None,
    ) -> ShiftLog:
        """
        Close the open shift with an end-of-shift report.

        Raises:
            ValueError: If there is no open shift or the report is blank
        """
        report_text = require_text(report, "End of shift report")

        shift = self.current_shift(employee.employee_id)
        if not shift:
            raise ValueError("You are not clocked in")

        old_state = self.audit.capture_state(shift)
        shift.close(to_naive_utc(now) or datetime.utcnow())
        shift.report = report_text
        self.audit.log_update(shift, old_state, context="clock out")

        logger.info("Employee %s clocked out (%s h)", employee.employee_id, shift.duration)
        return shift

    def my_shifts(self, employee_id: int, limit: int = 50) -> list[ShiftLog]:
        return self.db.execute(
            select(ShiftLog)
            .where(ShiftLog.employee_id == employee_id)
            .order_by(ShiftLog.shift_start.desc())
            .limit(limit)
        ).scalars().all()

    def list_shifts(
        self,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[ShiftLog]:
        """Admin view of shift logs, newest first, with employees loaded."""
        query = select(ShiftLog).options(joinedload(ShiftLog.employee))

        if employee_id is not None:
            query = query.where(ShiftLog.employee_id == employee_id)
        if start is not None:
            query = query.where(ShiftLog.shift_start >= datetime.combine(start, time.min))
        if end is not None:
            query = query.where(ShiftLog.shift_start < datetime.combine(end + timedelta(days=1), time.min))

        return self.db.execute(query.order_by(ShiftLog.shift_start.desc())).scalars().all()

    def create_shift(
        self,
        employee_id: int,
        shift_start: datetime,
        shift_end: Optional[datetime] = None,
        notes: Optional[str] = None,
        report: Optional[str] = None,
    ) -> ShiftLog:
        """Admin entry of a shift (e.g. a forgotten clock in)."""
        shift_start, shift_end = to_naive_utc(shift_start), to_naive_utc(shift_end)
        self._validate_employee_exists(employee_id)
        if shift_end is not None:
            self._validate_times(shift_start, shift_end)
        elif self.current_shift(employee_id):
            raise ValueError("Employee already has an open shift")

        shift = ShiftLog(
            employee_id=employee_id,
            shift_start=shift_start,
            notes=optional_text(notes),
            report=optional_text(report),
            modified_by=self.current_user_id,
        )
        if shift_end is not None:
            shift.close(shift_end)

        self.db.add(shift)
        self.db.flush()
        self.audit.log_insert(shift)
        return shift

    def update_shift(
        self,
        shift_id: int,
        shift_start: Optional[datetime] = None,
        shift_end: Optional[datetime] = None,
        notes: Optional[str] = None,
        report: Optional[str] = None,
    ) -> ShiftLog:
        shift = self.get_shift(shift_id)
        shift_start, shift_end = to_naive_utc(shift_start), to_naive_utc(shift_end)

        new_start = shift_start if shift_start is not None else shift.shift_start
        new_end = shift_end if shift_end is not None else shift.shift_end

        changes = {"shift_start": new_start}
        if new_end is not None:
            self._validate_times(new_start, new_end)
            changes["shift_end"] = new_end
            changes["duration"] = ShiftLog.hours_between(new_start, new_end)

        if notes is not None:
            changes["notes"] = optional_text(notes, "Notes")
        if report is not None:
            changes["report"] = optional_text(report, "Report")

        self.audit.update_fields(shift, changes)
        return shift

    def delete_shift(self, shift_id: int) -> None:
        shift = self.get_shift(shift_id)
        self.audit.log_delete(shift)
        self.db.delete(shift)

    def hours_by_employee(self, start: date, end: date) -> dict[int, Decimal]:
        """
        Total closed-shift hours per employee for shifts starting in
        [start, end]. Used to prefill payroll items.
        """
        rows = self.db.execute(
            select(ShiftLog.employee_id, func.sum(ShiftLog.duration))
            .where(ShiftLog.shift_end.is_not(None))
            .where(ShiftLog.shift_start >= datetime.combine(start, time.min))
            .where(ShiftLog.shift_start < datetime.combine(end + timedelta(days=1), time.min))
            .group_by(ShiftLog.employee_id)
        ).all()

        return {employee_id: Decimal(str(total or 0)) for employee_id, total in rows}

    # Validation helpers

    def _validate_employee_exists(self, employee_id: int) -> None:
        exists = self.db.execute(
            select(Employee.employee_id).where(Employee.employee_id == employee_id)
        ).scalar_one_or_none()
        if not exists:
            raise ValueError(f"Employee {employee_id} not found")

    def _validate_times(self, shift_start: datetime, shift_end: datetime) -> None:
        if shift_end <= shift_start:
            raise ValueError("Shift end must be after shift start")

        duration_hours = (shift_end - shift_start).total_seconds() / 3600
        if duration_hours > MAX_SHIFT_HOURS:
            raise ValueError(f"Shift duration cannot exceed {MAX_SHIFT_HOURS} hours")
