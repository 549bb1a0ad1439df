# Hippies Portal - Agreement Service
# Agreements by employee type and their e-signatures

import base64
import binascii
from datetime import datetime
from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal.models.agreement import Agreement, AgreementTracker
from portal.models.employee import Employee, EMPLOYEE_TYPES
from portal.services.audit import AuditService
from portal.services.auth import AuthorizationError
from portal.services.errors import NotFoundError
from portal.services.validation import optional_text, require_text


logger = logging.getLogger(__name__)


def clean_allowed_types(values: Any) -> list[str]:
    if not isinstance(values, (list, tuple)) or not values:
        raise ValueError("Select at least one employee type")
    cleaned = []
    for value in values:
        if value not in EMPLOYEE_TYPES:
            raise ValueError(f"Employee type must be one of: {', '.join(EMPLOYEE_TYPES)}")
        if value not in cleaned:
            cleaned.append(value)
    return cleaned


def clean_doc_links(values: Any) -> list[str]:
    if values is None:
        return []
    if not isinstance(values, (list, tuple)):
        raise ValueError("Document links must be a list")
    return [link.strip() for link in values if isinstance(link, str) and link.strip()]


def clean_signature(signature: Optional[str]) -> str:
    """Accept a data URL or bare base64 string from the signature pad."""
    value = require_text(signature, "Signature")
    payload = value.split(",", 1)[1] if value.startswith("data:") and "," in value else value
    payload = payload.strip()
    if not payload:
        raise ValueError("Signature is required")
    try:
        base64.b64decode(payload, validate=True)
    except binascii.Error:
        raise ValueError("Signature is not valid base64")
    return value


class AgreementService:
    """
    Service for agreements and signatures.

    Usage:
        service = AgreementService(db, admin.employee_id, ip)
        agreement = service.create_agreement({
            "title": "Contractor terms",
            "allowed_types": ["VA"],
        })

        # employee side
        AgreementService(db, 7).sign(employee, agreement.agreement_id, "data:image/png;base64,...")
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

    def get_agreement(self, agreement_id: int) -> Agreement:
        agreement = self.db.get(Agreement, agreement_id)
        if not agreement:
            raise NotFoundError(f"Agreement {agreement_id} not found")
        return agreement

    def list_agreements(self) -> list[Agreement]:
        return self.db.execute(select(Agreement).order_by(Agreement.title)).scalars().all()

    def create_agreement(self, fields: dict[str, Any]) -> Agreement:
        agreement = Agreement(
            title=require_text(fields.get("title"), "Title"),
            description=optional_text(fields.get("description")),
            doc_links=clean_doc_links(fields.get("doc_links")),
            allowed_types=clean_allowed_types(fields.get("allowed_types")),
            created_by=self.current_user_id,
        )
        self.db.add(agreement)
        self.db.flush()
        self.audit.log_insert(agreement)
        return agreement

    def update_agreement(self, agreement_id: int, fields: dict[str, Any]) -> Agreement:
        agreement = self.get_agreement(agreement_id)
        changes = {}
        if "title" in fields:
            changes["title"] = require_text(fields.get("title"), "Title")
        if "description" in fields:
            changes["description"] = optional_text(fields.get("description"))
        if "doc_links" in fields:
            changes["doc_links"] = clean_doc_links(fields.get("doc_links"))
        if "allowed_types" in fields:
            changes["allowed_types"] = clean_allowed_types(fields.get("allowed_types"))

        self.audit.update_fields(agreement, changes)
        return agreement

    def delete_agreement(self, agreement_id: int) -> None:
        agreement = self.get_agreement(agreement_id)
        self.audit.log_delete(agreement)
        self.db.delete(agreement)

    def get_signature(self, employee_id: int, agreement_id: int) -> Optional[AgreementTracker]:
        return self.db.execute(
            select(AgreementTracker)
            .where(AgreementTracker.employee_id == employee_id)
            .where(AgreementTracker.agreement_id == agreement_id)
        ).scalars().first()

    def list_for_me(self, employee: Employee) -> list[dict[str, Any]]:
        """Agreements for the employee's type with their own signing state."""
        signed = {
            row.agreement_id: row
            for row in self.db.execute(
                select(AgreementTracker).where(AgreementTracker.employee_id == employee.employee_id)
            ).scalars().all()
        }

        result = []
        for agreement in self.list_agreements():
            if not agreement.applies_to(employee.employee_type):
                continue
            tracker = signed.get(agreement.agreement_id)
            result.append({
                "agreement_id": agreement.agreement_id,
                "title": agreement.title,
                "description": agreement.description,
                "doc_links": agreement.doc_links,
                "status": tracker.status if tracker else "pending",
                "signed_at": tracker.signed_at if tracker else None,
            })
        return result

    def sign(self, employee: Employee, agreement_id: int, signature: Optional[str]) -> AgreementTracker:
        """
        Record (or replace) the employee's signature.

        Raises:
            AuthorizationError: If the agreement is not for this employee type
        """
        agreement = self.get_agreement(agreement_id)
        if not agreement.applies_to(employee.employee_type):
            raise AuthorizationError("This agreement does not apply to your employee type")

        signature_value = clean_signature(signature)
        tracker = self.get_signature(employee.employee_id, agreement_id)
        if tracker is None:
            tracker = AgreementTracker(employee_id=employee.employee_id, agreement_id=agreement_id)
            self.db.add(tracker)

        tracker.signature_base64 = signature_value
        tracker.signed_at = datetime.utcnow()
        tracker.status = "signed"
        self.db.flush()

        logger.info("Employee %s signed agreement %s", employee.employee_id, agreement_id)
        return tracker

    def tracker_summary(self) -> list[dict[str, Any]]:
        """Signed or pending for every agreement and eligible active employee."""
        employees = self.db.execute(
            select(Employee).where(Employee.is_active == True).order_by(Employee.full_name)
        ).scalars().all()
        signatures = {
            (row.employee_id, row.agreement_id): row
            for row in self.db.execute(select(AgreementTracker)).scalars().all()
        }

        rows = []
        for agreement in self.list_agreements():
            for employee in employees:
                if not agreement.applies_to(employee.employee_type):
                    continue
                tracker = signatures.get((employee.employee_id, agreement.agreement_id))
                rows.append({
                    "agreement_id": agreement.agreement_id,
                    "agreement_title": agreement.title,
                    "employee_id": employee.employee_id,
                    "employee_name": employee.full_name,
                    "employee_type": employee.employee_type,
                    "status": tracker.status if tracker else "pending",
                    "signed_at": tracker.signed_at if tracker else None,
                })
        return rows
