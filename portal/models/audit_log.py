# Hippies Portal - Audit Log Model

from datetime import datetime
from typing import Optional, Any
import json

from sqlalchemy import String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AuditLog(Base):
    """
    Change history for admin-maintained records.

    Payroll figures, profiles, schedules and security logs are the
    records people dispute later, so every write to them leaves a row
    here with JSON snapshots of the record.

    Actions:
        - INSERT: new_values holds the created record
        - UPDATE: old_values / new_values hold before and after
        - DELETE: old_values holds the removed record
        - RESTORE: new_values holds the reactivated record

    performed_by is empty for writes made by anonymous visitors
    (job applications).
    """

    __tablename__ = "audit_log"

    audit_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    table_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    record_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Comma-separated list of changed columns (UPDATE only)
    changed_fields: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    old_values: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_values: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    performed_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True,
        index=True
    )
    performed_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    context: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.table_name}:{self.record_id} by {self.performed_by}>"

    def get_old_values(self) -> Optional[dict]:
        return json.loads(self.old_values) if self.old_values else None

    def get_new_values(self) -> Optional[dict]:
        return json.loads(self.new_values) if self.new_values else None

    def get_changes(self) -> dict[str, tuple[Any, Any]]:
        """
        Return {field_name: (old_value, new_value)} for an UPDATE entry.
        """
        if self.action != "UPDATE":
            return {}

        old = self.get_old_values() or {}
        new = self.get_new_values() or {}

        return {
            field: (old.get(field), new.get(field))
            for field in (self.changed_fields or "").split(",")
            if field
        }


def create_audit_entry(
    table_name: str,
    record_id: int,
    action: str,
    performed_by: Optional[int],
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
    changed_fields: Optional[list[str]] = None,
    ip_address: Optional[str] = None,
    context: Optional[str] = None,
) -> AuditLog:
    """Build an AuditLog row (not yet added to the session)."""
    return AuditLog(
        table_name=table_name,
        record_id=record_id,
        action=action,
        performed_by=performed_by,
        old_values=json.dumps(old_values) if old_values else None,
        new_values=json.dumps(new_values) if new_values else None,
        changed_fields=",".join(sorted(changed_fields)) if changed_fields else None,
        ip_address=ip_address,
        context=context,
    )
