# Hippies Portal - Security Log Service
# CCTV battery tracking and the store logbooks

from datetime import date, datetime, time
from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.models.employee import Employee
from portal.models.security import (
    CAMERA_STATUSES,
    CashRemovalLog,
    CctvCamera,
    CctvLog,
    DoorLog,
    EmployeeViolation,
    IncidentReport,
    SafeRoomLog,
    SoldOutLog,
)
from portal.services.audit import AuditService
from portal.services.errors import NotFoundError
from portal.services.validation import optional_text, require_choice, require_date_order, require_text


logger = logging.getLogger(__name__)


class LogKind:
    """How one logbook's fields are validated."""

    def __init__(
        self,
        model,
        required_text: tuple[str, ...] = (),
        optional_text: tuple[str, ...] = (),
        flags: tuple[str, ...] = (),
        counts: tuple[str, ...] = (),
        employees: tuple[str, ...] = (),
    ):
        self.model = model
        self.required_text = required_text
        self.optional_text = optional_text
        self.flags = flags
        self.counts = counts
        self.employees = employees

    @property
    def fields(self) -> set[str]:
        return (
            {"log_date", "log_time", "footage_link"}
            | set(self.required_text)
            | set(self.optional_text)
            | set(self.flags)
            | set(self.counts)
            | set(self.employees)
        )


# URL segment -> logbook
LOG_KINDS = {
    "sold-out": LogKind(
        SoldOutLog,
        optional_text=("notes",),
        flags=("id_verified",),
        counts=("number_of_items",),
        employees=("employee_id", "verifier_id"),
    ),
    "door": LogKind(
        DoorLog,
        required_text=("door_location",),
        optional_text=("note",),
        employees=("employee_id",),
    ),
    "violations": LogKind(
        EmployeeViolation,
        required_text=("description",),
        optional_text=("notes",),
        employees=("employee_id",),
    ),
    "incidents": LogKind(
        IncidentReport,
        required_text=("description",),
        flags=("management_contacted", "police_contacted"),
    ),
    "safe-room": LogKind(
        SafeRoomLog,
        required_text=("reason_for_entry",),
        employees=("employee_id",),
    ),
    "cash-removal": LogKind(
        CashRemovalLog,
        optional_text=("notes",),
        employees=("employee_id",),
    ),
}

FIELD_LABELS = {
    "door_location": "Door location",
    "description": "Description",
    "reason_for_entry": "Reason for entry",
}


def clamp_battery(value: Any) -> int:
    try:
        level = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        raise ValueError("Battery percentage must be a number")
    return max(0, min(100, level))


def get_log_kind(kind: str) -> LogKind:
    if kind not in LOG_KINDS:
        raise NotFoundError(f"Unknown log type '{kind}'")
    return LOG_KINDS[kind]


class SecurityService:
    """
    Service for the security logbooks and CCTV cameras.

    Usage:
        service = SecurityService(db, user.employee_id, ip)

        log = service.create_log("door", {
            "log_date": date.today(),
            "log_time": time(22, 15),
            "door_location": "Back door",
        })
        logs = service.list_logs("door", start=date(2025, 1, 1))

        camera = service.create_camera({"camera_name": "Register"})
        service.update_battery(camera.camera_id, 35)
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

    # =========================================================================
    # Logbooks
    # =========================================================================

    def get_log(self, kind: str, log_id: int):
        log_kind = get_log_kind(kind)
        log = self.db.get(log_kind.model, log_id)
        if not log:
            raise NotFoundError(f"Log {log_id} not found")
        return log

    def list_logs(
        self,
        kind: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list:
        """Newest first, optionally limited to [start, end]."""
        model = get_log_kind(kind).model
        query = select(model)

        if start is not None and end is not None:
            require_date_order(start, end)
        if start is not None:
            query = query.where(model.log_date >= start)
        if end is not None:
            query = query.where(model.log_date <= end)

        return self.db.execute(
            query.order_by(model.log_date.desc(), model.log_time.desc(), model.log_id.desc())
        ).scalars().all()

    def create_log(self, kind: str, fields: dict[str, Any]):
        log_kind = get_log_kind(kind)
        values = self._clean_log(log_kind, fields, creating=True)

        log = log_kind.model(**values, inputted_by=self.current_user_id)
        self.db.add(log)
        self.db.flush()
        self.audit.log_insert(log)
        return log

    def update_log(self, kind: str, log_id: int, fields: dict[str, Any]):
        log_kind = get_log_kind(kind)
        log = self.get_log(kind, log_id)
        values = self._clean_log(log_kind, fields, creating=False)

        self.audit.update_fields(log, values)
        return log

    def delete_log(self, kind: str, log_id: int) -> None:
        log = self.get_log(kind, log_id)
        self.audit.log_delete(log)
        self.db.delete(log)

    # =========================================================================
    # CCTV
    # =========================================================================

    def get_camera(self, camera_id: int) -> CctvCamera:
        camera = self.db.get(CctvCamera, camera_id)
        if not camera:
            raise NotFoundError(f"Camera {camera_id} not found")
        return camera

    def list_cameras(self) -> list[CctvCamera]:
        return self.db.execute(select(CctvCamera).order_by(CctvCamera.camera_name)).scalars().all()

    def list_cctv_logs(self, camera_id: Optional[int] = None, limit: int = 200) -> list[CctvLog]:
        query = select(CctvLog)
        if camera_id is not None:
            query = query.where(CctvLog.camera_id == camera_id)
        return self.db.execute(
            query.order_by(CctvLog.created_at.desc(), CctvLog.log_id.desc()).limit(limit)
        ).scalars().all()

    def create_camera(self, fields: dict[str, Any]) -> CctvCamera:
        values = self._clean_camera(fields, creating=True)

        camera = CctvCamera(
            **values,
            inputted_by=self.current_user_id,
            updated_by=self.current_user_id,
            updated_at=datetime.utcnow(),
        )
        self.db.add(camera)
        self.db.flush()
        self._write_cctv_log(camera, "Camera created")
        self.audit.log_insert(camera)
        return camera

    def update_camera(self, camera_id: int, fields: dict[str, Any]) -> CctvCamera:
        camera = self.get_camera(camera_id)
        values = self._clean_camera(fields, creating=False)
        battery_changed = (
            "battery_percentage" in values
            and values["battery_percentage"] != camera.battery_percentage
        )

        self.audit.update_fields(camera, values)

        if battery_changed:
            self._write_cctv_log(camera, "Battery updated")
        return camera

    def update_battery(self, camera_id: int, battery_percentage: Any) -> CctvCamera:
        """Battery slider on the camera card; always leaves a log row."""
        camera = self.get_camera(camera_id)
        level = clamp_battery(battery_percentage)

        self.audit.update_fields(camera, {"battery_percentage": level})
        self._write_cctv_log(camera, "Battery updated via slider")
        return camera

    def delete_camera(self, camera_id: int) -> None:
        camera = self.get_camera(camera_id)
        self.audit.log_delete(camera)
        self.db.delete(camera)

    # Validation helpers

    def _write_cctv_log(self, camera: CctvCamera, note: str) -> CctvLog:
        entry = CctvLog(
            camera_id=camera.camera_id,
            battery_percentage=camera.battery_percentage,
            note=note,
            updated_by=self.current_user_id,
        )
        self.db.add(entry)
        return entry

    def _clean_camera(self, fields: dict[str, Any], creating: bool) -> dict[str, Any]:
        allowed = {"camera_name", "battery_type", "status", "notes", "battery_percentage"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        values = {}
        if creating or "camera_name" in fields:
            values["camera_name"] = require_text(fields.get("camera_name"), "Camera name")
        if "battery_type" in fields:
            values["battery_type"] = optional_text(fields.get("battery_type"))
        if "notes" in fields:
            values["notes"] = optional_text(fields.get("notes"))
        if creating or "status" in fields:
            values["status"] = require_choice(fields.get("status") or "active", CAMERA_STATUSES, "Status")
        if creating or "battery_percentage" in fields:
            raw = fields.get("battery_percentage")
            values["battery_percentage"] = 100 if raw is None else clamp_battery(raw)
        return values

    def _clean_log(self, log_kind: LogKind, fields: dict[str, Any], creating: bool) -> dict[str, Any]:
        unknown = set(fields) - log_kind.fields
        if unknown:
            raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        values = {}

        if creating or "log_date" in fields:
            if not isinstance(fields.get("log_date"), date):
                raise ValueError("Date is required")
            values["log_date"] = fields["log_date"]
        if creating or "log_time" in fields:
            log_time = fields.get("log_time")
            if not isinstance(log_time, time):
                raise ValueError("Time is required")
            values["log_time"] = log_time.replace(microsecond=0, tzinfo=None)

        if "footage_link" in fields:
            values["footage_link"] = optional_text(fields.get("footage_link"))

        for key in log_kind.required_text:
            if creating or key in fields:
                values[key] = require_text(fields.get(key), FIELD_LABELS.get(key, key))

        for key in log_kind.optional_text:
            if key in fields:
                values[key] = optional_text(fields.get(key))

        for key in log_kind.flags:
            if key in fields:
                values[key] = bool(fields.get(key))

        for key in log_kind.counts:
            if key in fields:
                try:
                    count = int(fields.get(key) or 0)
                except (TypeError, ValueError):
                    raise ValueError("Number of items must be a whole number")
                if count < 0:
                    raise ValueError("Number of items cannot be negative")
                values[key] = count

        for key in log_kind.employees:
            if key in fields:
                employee_id = fields.get(key)
                if employee_id is not None and self.db.get(Employee, employee_id) is None:
                    raise ValueError(f"Employee {employee_id} not found")
                values[key] = employee_id

        return values
