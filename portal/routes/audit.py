# Hippies Portal - Audit Log Routes
# Read-only change history for admins

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import require_admin
from portal.models.audit_log import AuditLog
from portal.models.employee import Employee
from portal.services.audit import AuditQuery


router = APIRouter(prefix="/api/audit-log", tags=["audit"])


class AuditEntryResponse(BaseModel):
    audit_id: int
    table_name: str
    record_id: int
    action: str
    changed_fields: list[str]
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    performed_by: Optional[int] = None
    performed_at: datetime
    ip_address: Optional[str] = None
    context: Optional[str] = None


def audit_entry_response(entry: AuditLog) -> AuditEntryResponse:
    return AuditEntryResponse(
        audit_id=entry.audit_id,
        table_name=entry.table_name,
        record_id=entry.record_id,
        action=entry.action,
        changed_fields=[f for f in (entry.changed_fields or "").split(",") if f],
        old_values=entry.get_old_values(),
        new_values=entry.get_new_values(),
        performed_by=entry.performed_by,
        performed_at=entry.performed_at,
        ip_address=entry.ip_address,
        context=entry.context,
    )


@router.get("", response_model=list[AuditEntryResponse])
def recent_changes(
    days: int = Query(7, ge=1, le=365),
    table_name: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    performed_by: Optional[int] = Query(None),
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    entries = AuditQuery(db).get_recent_changes(
        days=days,
        table_name=table_name,
        action=action.upper() if action else None,
        performed_by=performed_by,
    )
    return [audit_entry_response(e) for e in entries]


@router.get("/{table_name}/{record_id}", response_model=list[AuditEntryResponse])
def record_history(
    table_name: str,
    record_id: int,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Every change to one record, oldest first."""
    return [audit_entry_response(e) for e in AuditQuery(db).get_record_history(table_name, record_id)]
