# Hippies Portal - Audit Service
# Centralized service for logging data changes on admin-maintained tables

from datetime import datetime, date, time, timedelta
from decimal import Decimal
from typing import Optional, Any

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.inspection import inspect

from portal.models.audit_log import AuditLog, create_audit_entry
from portal.models.base import Base


class AuditService:
    """
    Service for creating audit log entries.

    Usage:
        audit = AuditService(db, current_user_id, client_ip)

        # Inserts - call after flush so the primary key exists
        db.add(schedule)
        db.flush()
        audit.log_insert(schedule)

        # Updates - capture the old state first
        old_state = audit.capture_state(item)
        item.hrs_worked = Decimal("40")
        audit.log_update(item, old_state)

        # Or let the service do both
        audit.update_fields(task, {"status": "Completed"})

        # Deletes - log before db.delete()
        audit.log_delete(log)
        db.delete(log)

    Snapshots are JSON; dates, times and decimals are converted on the
    way in.
    """

    AUDITED_TABLES = {
        "employees",
        "schedules",
        "shift_logs",
        "time_off_requests",
        "payrolls",
        "payroll_items",
        "payroll_invoices",
        "tasks",
        "cctv_cameras",
        "sold_out_logs",
        "door_logs",
        "employee_violations",
        "incident_reports",
        "safe_room_logs",
        "cash_removal_logs",
        "trainings",
        "training_quizzes",
        "agreements",
        "job_openings",
        "applications",
        "announcements",
    }

    # Never copied into snapshots
    EXCLUDED_FIELDS = {
        "password_hash",
        "ssn_last4",
        "account_number",
        "signature_base64",
    }

    # Who/when columns set by stamp(), not by callers
    STAMP_FIELDS = {"modified_at", "modified_by", "updated_at", "updated_by"}

    def __init__(
        self,
        db: Session,
        performed_by: Optional[int],
        ip_address: Optional[str] = None,
        context: Optional[str] = None,
    ):
        self.db = db
        self.performed_by = performed_by
        self.ip_address = ip_address
        self.context = context

    def _serialize_value(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, (int, float, str, bool, list, dict)):
            return value
        return str(value)

    def _get_primary_key(self, instance: Base) -> int:
        identity = inspect(instance).identity
        if identity:
            return identity[0]
        mapper = inspect(type(instance))
        return getattr(instance, mapper.get_property_by_column(mapper.primary_key[0]).key)

    def capture_state(self, instance: Base) -> dict[str, Any]:
        """
        Capture the current column values of a model instance.

        Call this BEFORE making changes to capture the "old" state.
        Keys are database column names.
        """
        mapper = inspect(type(instance))
        state = {}

        for attr in mapper.column_attrs:
            column = attr.columns[0]
            if column.name in self.EXCLUDED_FIELDS:
                continue
            state[column.name] = self._serialize_value(getattr(instance, attr.key))

        return state

    def _diff_states(self, old_state: dict[str, Any], new_state: dict[str, Any]) -> list[str]:
        keys = set(old_state) | set(new_state)
        return [key for key in keys if old_state.get(key) != new_state.get(key)]

    def _write(self, instance: Base, action: str, context: Optional[str] = None, **values) -> Optional[AuditLog]:
        table_name = instance.__tablename__
        if table_name not in self.AUDITED_TABLES:
            return None

        entry = create_audit_entry(
            table_name=table_name,
            record_id=self._get_primary_key(instance),
            action=action,
            performed_by=self.performed_by,
            ip_address=self.ip_address,
            context=context or self.context,
            **values,
        )
        self.db.add(entry)
        return entry

    def log_insert(self, instance: Base, context: Optional[str] = None) -> Optional[AuditLog]:
        """Log an INSERT. The instance must already be flushed."""
        return self._write(instance, "INSERT", context, new_values=self.capture_state(instance))

    def log_update(
        self,
        instance: Base,
        old_state: dict[str, Any],
        context: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """
        Log an UPDATE against a state captured with capture_state().

        Returns None without writing when nothing changed.
        """
        new_state = self.capture_state(instance)
        changed_fields = self._diff_states(old_state, new_state)
        if not changed_fields:
            return None

        return self._write(
            instance,
            "UPDATE",
            context,
            old_values=old_state,
            new_values=new_state,
            changed_fields=changed_fields,
        )

    def log_delete(self, instance: Base, context: Optional[str] = None) -> Optional[AuditLog]:
        """Log a DELETE. Call before the row is removed or deactivated."""
        return self._write(instance, "DELETE", context, old_values=self.capture_state(instance))

    def log_restore(self, instance: Base, context: Optional[str] = None) -> Optional[AuditLog]:
        """Log a RESTORE (reactivating a deactivated record)."""
        return self._write(instance, "RESTORE", context, new_values=self.capture_state(instance))

    def update_fields(
        self,
        instance: Base,
        changes: dict[str, Any],
        context: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """
        Apply attribute changes and log them as one UPDATE.

        Values equal to the current ones are ignored. When nothing is
        left the instance is untouched and None is returned; otherwise
        modified_at / modified_by (or updated_at / updated_by) are
        stamped when the model has them.
        """
        effective = {
            key: value
            for key, value in changes.items()
            if key not in self.STAMP_FIELDS and getattr(instance, key) != value
        }
        if not effective:
            return None

        old_state = self.capture_state(instance)

        for key, value in effective.items():
            setattr(instance, key, value)
        self.stamp(instance)

        return self.log_update(instance, old_state, context)

    def stamp(self, instance: Base) -> None:
        """Set the who/when columns the model carries."""
        now = datetime.utcnow()
        for at_field, by_field in (("modified_at", "modified_by"), ("updated_at", "updated_by")):
            if hasattr(instance, at_field):
                setattr(instance, at_field, now)
            if hasattr(instance, by_field):
                setattr(instance, by_field, self.performed_by)


class AuditQuery:
    """
    Helper class for reading audit logs.

    Usage:
        query = AuditQuery(db)
        history = query.get_record_history("payroll_items", 42)
        recent = query.get_recent_changes(days=7, table_name="employees")
    """

    def __init__(self, db: Session):
        self.db = db

    def get_record_history(self, table_name: str, record_id: int) -> list[AuditLog]:
        """Full history of one record, oldest first."""
        return self.db.execute(
            select(AuditLog)
            .where(AuditLog.table_name == table_name)
            .where(AuditLog.record_id == record_id)
            .order_by(AuditLog.performed_at.asc(), AuditLog.audit_id.asc())
        ).scalars().all()

    def get_recent_changes(
        self,
        days: int = 7,
        table_name: Optional[str] = None,
        action: Optional[str] = None,
        performed_by: Optional[int] = None,
        limit: int = 500,
    ) -> list[AuditLog]:
        """Changes in the last `days` days, newest first."""
        cutoff = datetime.utcnow() - timedelta(days=days)
        query = select(AuditLog).where(AuditLog.performed_at >= cutoff)

        if table_name:
            query = query.where(AuditLog.table_name == table_name)
        if action:
            query = query.where(AuditLog.action == action)
        if performed_by:
            query = query.where(AuditLog.performed_by == performed_by)

        return self.db.execute(
            query.order_by(AuditLog.performed_at.desc(), AuditLog.audit_id.desc()).limit(limit)
        ).scalars().all()
