# Hippies Portal - Security Routes
# Store logbooks and CCTV cameras

from datetime import date, datetime, time
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.inspection import inspect
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.employee import Employee
from portal.services.security import SecurityService


router = APIRouter(prefix="/api/security", tags=["security"])


# Request/Response models

class LogFields(BaseModel):
    """Union of every logbook's fields; each log type accepts its own subset."""
    model_config = ConfigDict(extra="forbid")

    log_date: Optional[date] = None
    log_time: Optional[time] = None
    footage_link: Optional[str] = None
    employee_id: Optional[int] = None
    verifier_id: Optional[int] = None
    number_of_items: Optional[int] = None
    id_verified: Optional[bool] = None
    door_location: Optional[str] = None
    description: Optional[str] = None
    reason_for_entry: Optional[str] = None
    management_contacted: Optional[bool] = None
    police_contacted: Optional[bool] = None
    note: Optional[str] = None
    notes: Optional[str] = None


class CameraFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    camera_name: Optional[str] = None
    battery_type: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    battery_percentage: Optional[float] = None


class BatteryUpdate(BaseModel):
    battery_percentage: float


class CameraResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    camera_id: int
    camera_name: str
    battery_type: Optional[str] = None
    status: str
    notes: Optional[str] = None
    battery_percentage: int
    inputted_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CctvLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    log_id: int
    camera_id: int
    battery_percentage: int
    note: Optional[str] = None
    updated_by: Optional[int] = None
    created_at: datetime


def log_response(log) -> dict[str, Any]:
    """Every mapped attribute of a logbook row, keyed by attribute name."""
    mapper = inspect(type(log))
    row = {attr.key: getattr(log, attr.key) for attr in mapper.column_attrs}
    row["log_time"] = log.log_time.strftime("%H:%M:%S")
    return row


# Logbooks

@router.get("/logs/{kind}")
def list_logs(
    kind: str,
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    """Newest first; kind is sold-out, door, violations, incidents, safe-room or cash-removal."""
    return [log_response(log) for log in SecurityService(db, user.employee_id).list_logs(kind, start, end)]


@router.post("/logs/{kind}", status_code=status.HTTP_201_CREATED)
def create_log(
    kind: str,
    payload: LogFields,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    log = SecurityService(db, user.employee_id, client_ip(request)).create_log(
        kind, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return log_response(log)


@router.patch("/logs/{kind}/{log_id}")
def update_log(
    kind: str,
    log_id: int,
    payload: LogFields,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    log = SecurityService(db, user.employee_id, client_ip(request)).update_log(
        kind, log_id, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return log_response(log)


@router.delete("/logs/{kind}/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_log(
    kind: str,
    log_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    SecurityService(db, user.employee_id, client_ip(request)).delete_log(kind, log_id)
    db.commit()


# CCTV

@router.get("/cameras", response_model=list[CameraResponse])
def list_cameras(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return SecurityService(db, user.employee_id).list_cameras()


@router.post("/cameras", response_model=CameraResponse, status_code=status.HTTP_201_CREATED)
def create_camera(
    payload: CameraFields,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    camera = SecurityService(db, user.employee_id, client_ip(request)).create_camera(
        payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return camera


@router.patch("/cameras/{camera_id}", response_model=CameraResponse)
def update_camera(
    camera_id: int,
    payload: CameraFields,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    camera = SecurityService(db, user.employee_id, client_ip(request)).update_camera(
        camera_id, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return camera


@router.post("/cameras/{camera_id}/battery", response_model=CameraResponse)
def update_battery(
    camera_id: int,
    payload: BatteryUpdate,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Battery slider; the level is clamped to 0-100."""
    camera = SecurityService(db, user.employee_id, client_ip(request)).update_battery(
        camera_id, payload.battery_percentage
    )
    db.commit()
    return camera


@router.delete("/cameras/{camera_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_camera(
    camera_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    SecurityService(db, user.employee_id, client_ip(request)).delete_camera(camera_id)
    db.commit()


@router.get("/cctv-logs", response_model=list[CctvLogResponse])
def list_cctv_logs(
    camera_id: Optional[int] = Query(None),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return SecurityService(db, user.employee_id).list_cctv_logs(camera_id)
