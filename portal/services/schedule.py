# Hippies Portal - Schedule Service
# Weekly shift planning with audit logging

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.config import get_settings
from portal.models.employee import Employee
from portal.models.schedule import Schedule
from portal.services.audit import AuditService
from portal.services.errors import NotFoundError
from portal.services.validation import optional_text, require_date_order


settings = get_settings()


def get_week_bounds(target_date: date) -> tuple[date, date]:
    """Get Monday and Sunday of the week containing target_date."""
    monday = target_date - timedelta(days=target_date.weekday())
    sunday = monday + timedelta(days=6)
    return monday, sunday


def convert_time(on_date: date, at: time, from_tz: str, to_tz: str) -> datetime:
    """
    Convert a wall-clock time on a date between two timezones.

    Used to show store-time schedules in the VA team's local time.
    """
    local = datetime.combine(on_date, at).replace(tzinfo=ZoneInfo(from_tz))
    return local.astimezone(ZoneInfo(to_tz))


def wall_clock(value: Optional[time]) -> Optional[time]:
    """Schedule times are business-local wall clock; any offset is dropped."""
    return value.replace(tzinfo=None) if value is not None else None


def shift_hours(time_in: time, time_out: time) -> float:
    """Length of a shift in hours; time_out <= time_in wraps past midnight."""
    start = datetime.combine(date.min, time_in)
    end = datetime.combine(date.min, time_out)
    if end <= start:
        end += timedelta(days=1)
    return round((end - start).total_seconds() / 3600, 2)


class ScheduleService:
    """
    Service for managing planned shifts.

    Usage:
        service = ScheduleService(db, admin.employee_id, request.client.host)

        schedule = service.create_schedule(
            employee_id=5,
            shift_date=date(2025, 3, 3),
            time_in=time(9, 0),
            time_out=time(17, 0),
        )

        week = service.list_week(date.today(), viewer=user)
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

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self.db.get(Schedule, schedule_id)
        if not schedule:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    def create_schedule(
        self,
        employee_id: int,
        shift_date: date,
        time_in: time,
        time_out: time,
        notes: Optional[str] = None,
    ) -> Schedule:
        """
        Raises:
            ValueError: If the employee is unknown or the times are equal
        """
        time_in, time_out = wall_clock(time_in), wall_clock(time_out)
        self._validate_employee_exists(employee_id)
        self._validate_times(time_in, time_out)

        schedule = Schedule(
            employee_id=employee_id,
            shift_date=shift_date,
            time_in=time_in,
            time_out=time_out,
            notes=optional_text(notes),
            created_by=self.current_user_id,
        )

        self.db.add(schedule)
        self.db.flush()
        self.audit.log_insert(schedule)
        return schedule

    def update_schedule(
        self,
        schedule_id: int,
        employee_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        time_in: Optional[time] = None,
        time_out: Optional[time] = None,
        notes: Optional[str] = None,
    ) -> Schedule:
        """Only provided fields are updated. Pass notes="" to clear."""
        schedule = self.get_schedule(schedule_id)
        changes = {}
        time_in, time_out = wall_clock(time_in), wall_clock(time_out)

        if employee_id is not None:
            self._validate_employee_exists(employee_id)
            changes["employee_id"] = employee_id
        if shift_date is not None:
            changes["shift_date"] = shift_date

        new_in = time_in if time_in is not None else schedule.time_in
        new_out = time_out if time_out is not None else schedule.time_out
        if time_in is not None or time_out is not None:
            self._validate_times(new_in, new_out)
            changes["time_in"] = new_in
            changes["time_out"] = new_out

        if notes is not None:
            changes["notes"] = optional_text(notes)

        self.audit.update_fields(schedule, changes)
        return schedule

    def delete_schedule(self, schedule_id: int) -> None:
        schedule = self.get_schedule(schedule_id)
        self.audit.log_delete(schedule)
        self.db.delete(schedule)

    def list_range(
        self,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> list[Schedule]:
        require_date_order(start, end)

        query = (
            select(Schedule)
            .where(Schedule.shift_date >= start)
            .where(Schedule.shift_date <= end)
        )
        if employee_id is not None:
            query = query.where(Schedule.employee_id == employee_id)

        return self.db.execute(
            query.order_by(Schedule.shift_date, Schedule.time_in, Schedule.schedule_id)
        ).scalars().all()

    def list_week(self, target_date: date, viewer: Employee) -> dict:
        """
        Week view, Monday to Sunday, grouped by day.

        Admins see everyone's shifts, employees only their own. Every
        day of the week is present even when empty.
        """
        week_start, week_end = get_week_bounds(target_date)
        employee_id = None if viewer.is_admin else viewer.employee_id
        schedules = self.list_range(week_start, week_end, employee_id)

        days = {week_start + timedelta(days=i): [] for i in range(7)}
        for schedule in schedules:
            days[schedule.shift_date].append(schedule)

        return {
            "week_start": week_start,
            "week_end": week_end,
            "prev_week": week_start - timedelta(days=7),
            "next_week": week_start + timedelta(days=7),
            "days": days,
        }

    def today_for(self, employee_id: int, today: Optional[date] = None) -> list[Schedule]:
        today = today or date.today()
        return self.list_range(today, today, employee_id)

    # Validation helpers

    def _validate_employee_exists(self, employee_id: int) -> None:
        exists = self.db.execute(
            select(Employee.employee_id)
            .where(Employee.employee_id == employee_id)
            .where(Employee.is_active == True)
        ).scalar_one_or_none()

        if not exists:
            raise ValueError(f"Employee {employee_id} not found or inactive")

    def _validate_times(self, time_in: time, time_out: time) -> None:
        if time_in == time_out:
            raise ValueError("Time out must differ from time in")
