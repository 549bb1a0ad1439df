# Hippies Portal - Schedule Routes

from datetime import date, time
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.config import get_settings
from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.employee import Employee
from portal.models.schedule import Schedule
from portal.services.schedule import ScheduleService, convert_time


settings = get_settings()

router = APIRouter(prefix="/api/schedules", tags=["schedules"])


# Request/Response models

class ScheduleCreate(BaseModel):
    employee_id: int
    shift_date: date
    time_in: time
    time_out: time
    notes: Optional[str] = None


class ScheduleUpdate(BaseModel):
    employee_id: Optional[int] = None
    shift_date: Optional[date] = None
    time_in: Optional[time] = None
    time_out: Optional[time] = None
    notes: Optional[str] = None


class ScheduleResponse(BaseModel):
    schedule_id: int
    employee_id: int
    employee_name: Optional[str] = None
    shift_date: date
    time_in: time
    time_out: time
    notes: Optional[str] = None
    hours: float
    is_overnight: bool
    # The same shift on the VA team's clock
    staff_time_in: str
    staff_time_out: str


class DayResponse(BaseModel):
    date: date
    schedules: list[ScheduleResponse]


class WeekResponse(BaseModel):
    week_start: date
    week_end: date
    prev_week: date
    next_week: date
    days: list[DayResponse]


def schedule_response(schedule: Schedule) -> ScheduleResponse:
    staff_in = convert_time(schedule.shift_date, schedule.time_in, settings.business_timezone, settings.staff_timezone)
    staff_out = convert_time(
        schedule.ends_at.date(), schedule.time_out, settings.business_timezone, settings.staff_timezone
    )
    return ScheduleResponse(
        schedule_id=schedule.schedule_id,
        employee_id=schedule.employee_id,
        employee_name=schedule.employee.full_name if schedule.employee else None,
        shift_date=schedule.shift_date,
        time_in=schedule.time_in,
        time_out=schedule.time_out,
        notes=schedule.notes,
        hours=schedule.hours,
        is_overnight=schedule.is_overnight,
        staff_time_in=staff_in.strftime("%a %I:%M %p"),
        staff_time_out=staff_out.strftime("%a %I:%M %p"),
    )


# Routes

@router.get("/week", response_model=WeekResponse)
def week_view(
    week_of: Optional[date] = Query(None, description="Any date in the week"),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Monday to Sunday; admins see everyone, employees themselves."""
    week = ScheduleService(db, user.employee_id).list_week(week_of or date.today(), user)
    return WeekResponse(
        week_start=week["week_start"],
        week_end=week["week_end"],
        prev_week=week["prev_week"],
        next_week=week["next_week"],
        days=[
            DayResponse(date=day, schedules=[schedule_response(s) for s in schedules])
            for day, schedules in week["days"].items()
        ],
    )


@router.get("", response_model=list[ScheduleResponse])
def list_schedules(
    start: date = Query(...),
    end: date = Query(...),
    employee_id: Optional[int] = Query(None),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not user.is_admin:
        employee_id = user.employee_id
    schedules = ScheduleService(db, user.employee_id).list_range(start, end, employee_id)
    return [schedule_response(s) for s in schedules]


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    schedule = ScheduleService(db, user.employee_id, client_ip(request)).create_schedule(**payload.model_dump())
    db.commit()
    return schedule_response(schedule)


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    schedule = ScheduleService(db, user.employee_id, client_ip(request)).update_schedule(
        schedule_id, **payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return schedule_response(schedule)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ScheduleService(db, user.employee_id, client_ip(request)).delete_schedule(schedule_id)
    db.commit()
