# Hippies Portal - Shift Log Routes
# Clock in / out for staff, corrections for admins

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.employee import Employee
from portal.models.shift_log import ShiftLog
from portal.services.shift import ShiftService


router = APIRouter(prefix="/api/shifts", tags=["shifts"])


# Request/Response models

class ClockOutRequest(BaseModel):
    report: str


class ShiftCreate(BaseModel):
    employee_id: int
    shift_start: datetime
    shift_end: Optional[datetime] = None
    notes: Optional[str] = None
    report: Optional[str] = None


class ShiftUpdate(BaseModel):
    shift_start: Optional[datetime] = None
    shift_end: Optional[datetime] = None
    notes: Optional[str] = None
    report: Optional[str] = None


class ShiftResponse(BaseModel):
    shift_id: int
    employee_id: int
    employee_name: Optional[str] = None
    shift_start: datetime
    shift_end: Optional[datetime] = None
    duration: Optional[Decimal] = None
    notes: Optional[str] = None
    report: Optional[str] = None
    is_open: bool


def shift_response(shift: ShiftLog) -> ShiftResponse:
    return ShiftResponse(
        shift_id=shift.shift_id,
        employee_id=shift.employee_id,
        employee_name=shift.employee.full_name if shift.employee else None,
        shift_start=shift.shift_start,
        shift_end=shift.shift_end,
        duration=shift.duration,
        notes=shift.notes,
        report=shift.report,
        is_open=shift.is_open,
    )


# Own shifts

@router.get("/current", response_model=Optional[ShiftResponse])
def current_shift(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    shift = ShiftService(db, user.employee_id).current_shift(user.employee_id)
    return shift_response(shift) if shift else None


@router.get("/me", response_model=list[ShiftResponse])
def my_shifts(
    limit: int = Query(50, ge=1, le=500),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [shift_response(s) for s in ShiftService(db, user.employee_id).my_shifts(user.employee_id, limit)]


@router.post("/clock-in", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
def clock_in(
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    shift = ShiftService(db, user.employee_id, client_ip(request)).clock_in(user)
    db.commit()
    return shift_response(shift)


@router.post("/clock-out", response_model=ShiftResponse)
def clock_out(
    payload: ClockOutRequest,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    shift = ShiftService(db, user.employee_id, client_ip(request)).clock_out(user, payload.report)
    db.commit()
    return shift_response(shift)


# Admin

@router.get("", response_model=list[ShiftResponse])
def list_shifts(
    employee_id: Optional[int] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    shifts = ShiftService(db, user.employee_id).list_shifts(employee_id, start, end)
    return [shift_response(s) for s in shifts]


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
def create_shift(
    payload: ShiftCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    shift = ShiftService(db, user.employee_id, client_ip(request)).create_shift(**payload.model_dump())
    db.commit()
    return shift_response(shift)


@router.patch("/{shift_id}", response_model=ShiftResponse)
def update_shift(
    shift_id: int,
    payload: ShiftUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    shift = ShiftService(db, user.employee_id, client_ip(request)).update_shift(
        shift_id, **payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return shift_response(shift)


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_shift(
    shift_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ShiftService(db, user.employee_id, client_ip(request)).delete_shift(shift_id)
    db.commit()
