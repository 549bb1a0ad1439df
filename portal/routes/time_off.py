# Hippies Portal - Time Off Routes

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.employee import Employee
from portal.models.time_off import TimeOffRequest
from portal.services.time_off import TimeOffService


router = APIRouter(prefix="/api/time-off", tags=["time_off"])


# Request/Response models

class TimeOffCreate(BaseModel):
    start_date: date
    end_date: date
    reason: str


class AdminTimeOffCreate(TimeOffCreate):
    employee_id: int


class StatusUpdate(BaseModel):
    status: str


class TimeOffResponse(BaseModel):
    request_id: int
    employee_id: int
    employee_name: Optional[str] = None
    start_date: date
    end_date: date
    days: int
    reason: str
    status: str
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


def time_off_response(request: TimeOffRequest) -> TimeOffResponse:
    return TimeOffResponse(
        request_id=request.request_id,
        employee_id=request.employee_id,
        employee_name=request.employee.full_name if request.employee else None,
        start_date=request.start_date,
        end_date=request.end_date,
        days=request.days,
        reason=request.reason,
        status=request.status,
        reviewed_by=request.reviewed_by,
        reviewed_at=request.reviewed_at,
        created_at=request.created_at,
    )


# Employee

@router.get("/me", response_model=list[TimeOffResponse])
def my_requests(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [time_off_response(r) for r in TimeOffService(db, user.employee_id).my_requests(user.employee_id)]


@router.post("/me", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
def request_time_off(
    payload: TimeOffCreate,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    time_off = TimeOffService(db, user.employee_id, client_ip(request)).request_time_off(
        user.employee_id, payload.start_date, payload.end_date, payload.reason
    )
    db.commit()
    return time_off_response(time_off)


@router.delete("/me/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_request(
    request_id: int,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    TimeOffService(db, user.employee_id, client_ip(request)).cancel_request(user.employee_id, request_id)
    db.commit()


# Admin

@router.get("", response_model=list[TimeOffResponse])
def list_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All requests with employee names."""
    return [time_off_response(r) for r in TimeOffService(db, user.employee_id).list_requests(status_filter)]


@router.post("", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
def create_request_for(
    payload: AdminTimeOffCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    time_off = TimeOffService(db, user.employee_id, client_ip(request)).request_time_off(
        payload.employee_id, payload.start_date, payload.end_date, payload.reason
    )
    db.commit()
    return time_off_response(time_off)


@router.patch("/{request_id}/status", response_model=TimeOffResponse)
def set_status(
    request_id: int,
    payload: StatusUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    time_off = TimeOffService(db, user.employee_id, client_ip(request)).set_status(request_id, payload.status)
    db.commit()
    return time_off_response(time_off)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(
    request_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    TimeOffService(db, user.employee_id, client_ip(request)).delete_request(request_id)
    db.commit()
