# Hippies Portal - Employee Service
# Profile management, onboarding, and account lifecycle

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from portal.config import get_settings
from portal.models.employee import Employee, ROLES, EMPLOYEE_TYPES, APPAREL_SIZES
from portal.services.audit import AuditService
from portal.services.auth import AuthService
from portal.services.errors import NotFoundError
from portal.services.mail import MailError, MailService
from portal.services.validation import (
    generate_temp_password,
    is_valid_email,
    optional_text,
    require_choice,
    require_text,
)


settings = get_settings()
logger = logging.getLogger(__name__)


# Columns an admin may set on a profile
PROFILE_FIELDS = {
    "full_name",
    "email",
    "role",
    "employee_type",
    "position",
    "acronym",
    "nickname",
    "contact_number",
    "address",
    "emergency_contact",
    "emergency_contact_phone",
    "ssn_last4",
    "driver_license_no",
    "start_date",
    "pay_rate",
    "shirt_size",
    "hoodie_size",
    "wise_tag",
    "wise_email",
    "bank_name",
    "account_number",
    "wecard_certified",
    "wecard_certificate_url",
}

# Columns employees may change on their own profile
SELF_EDITABLE_FIELDS = {
    "full_name",
    "contact_number",
    "emergency_contact",
    "address",
}


class EmployeeService:
    """
    Service for staff accounts with built-in audit logging.

    Usage:
        service = EmployeeService(db, admin.employee_id, request.client.host, mail=mail)

        employee, temp_password = service.create_employee({
            "full_name": "Sam Rivera",
            "email": "sam@hippiesheaven.com",
            "employee_type": "Store",
        })
        db.commit()
        service.send_welcome(employee, temp_password)

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(
        self,
        db: Session,
        current_user_id: Optional[int],
        ip_address: Optional[str] = None,
        mail: Optional[MailService] = None,
    ):
        self.db = db
        self.current_user_id = current_user_id
        self.audit = AuditService(db, current_user_id, ip_address)
        self.auth = AuthService(db)
        self.mail = mail

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def list_employees(
        self,
        search: Optional[str] = None,
        employee_type: Optional[str] = None,
        include_inactive: bool = False,
    ) -> list[Employee]:
        query = select(Employee)

        if not include_inactive:
            query = query.where(Employee.is_active == True)

        if employee_type:
            query = query.where(Employee.employee_type == employee_type)

        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.where(
                or_(
                    func.lower(Employee.full_name).like(pattern),
                    func.lower(Employee.email).like(pattern),
                    func.lower(Employee.nickname).like(pattern),
                )
            )

        return self.db.execute(query.order_by(Employee.full_name)).scalars().all()

    def directory(self, viewer: Employee) -> list[Employee]:
        """Active colleagues other than the viewer, for starting a chat."""
        return self.db.execute(
            select(Employee)
            .where(Employee.is_active == True)
            .where(Employee.employee_id != viewer.employee_id)
            .order_by(Employee.full_name)
        ).scalars().all()

    def create_employee(self, fields: dict[str, Any]) -> tuple[Employee, str]:
        """
        Create an employee with a random temporary password.

        Returns (employee, temp_password). The password is only ever
        returned here; call send_welcome() after committing.

        Raises:
            ValueError: If validation fails
        """
        values = self._clean_profile(fields, creating=True)

        employee = Employee(
            **values,
            is_active=True,
            created_at=datetime.utcnow(),
            created_by=self.current_user_id,
        )

        temp_password = generate_temp_password(settings.temp_password_length)
        self.auth.set_password(employee, temp_password, commit=False)

        self.db.add(employee)
        self.db.flush()
        self.audit.log_insert(employee)

        logger.info("Created employee %s (%s)", employee.employee_id, employee.email)
        return employee, temp_password

    def update_employee(self, employee_id: int, fields: dict[str, Any]) -> Employee:
        employee = self.get_employee(employee_id)
        values = self._clean_profile(fields, creating=False, existing=employee)

        if employee.employee_id == self.current_user_id and values.get("role", employee.role) != employee.role:
            raise ValueError("You cannot change your own role")

        self.audit.update_fields(employee, values)
        return employee

    def deactivate_employee(self, employee_id: int) -> Employee:
        employee = self.get_employee(employee_id)

        if employee.employee_id == self.current_user_id:
            raise ValueError("You cannot deactivate your own account")
        if not employee.is_active:
            raise ValueError("Employee is already inactive")

        self.audit.log_delete(employee)
        employee.is_active = False
        self.audit.stamp(employee)

        ended = self.auth.logout_all_sessions(employee.employee_id, commit=False)
        logger.info("Deactivated employee %s, ended %s sessions", employee_id, ended)
        return employee

    def reactivate_employee(self, employee_id: int) -> Employee:
        employee = self.get_employee(employee_id)
        if employee.is_active:
            raise ValueError("Employee is already active")

        employee.is_active = True
        self.audit.stamp(employee)
        self.audit.log_restore(employee)
        return employee

    def reset_password(self, employee_id: int) -> tuple[Employee, str]:
        """Issue a new temporary password and end every session."""
        employee = self.get_employee(employee_id)
        if not employee.is_active:
            raise ValueError("Cannot reset password for an inactive employee")

        temp_password = generate_temp_password(settings.temp_password_length)
        self.auth.set_password(employee, temp_password, commit=False)
        self.auth.logout_all_sessions(employee.employee_id, commit=False)

        self.audit.stamp(employee)
        return employee, temp_password

    def update_own_profile(self, employee: Employee, fields: dict[str, Any]) -> Employee:
        """
        Self-service profile edit, limited to SELF_EDITABLE_FIELDS.

        Raises:
            ValueError: If any other field is present or full_name is blank
        """
        not_allowed = set(fields) - SELF_EDITABLE_FIELDS
        if not_allowed:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(not_allowed))}")

        values = {}
        for key, value in fields.items():
            if key == "full_name":
                values[key] = require_text(value, "Full name")
            else:
                values[key] = optional_text(value, key.replace("_", " ").capitalize())

        self.audit.update_fields(employee, values, context="self-service")
        return employee

    def send_welcome(self, employee: Employee, temp_password: str) -> bool:
        """
        Email the temporary password. Returns False if the relay failed;
        the account stays valid either way.
        """
        if self.mail is None:
            return False
        try:
            self.mail.send_welcome(employee.full_name, employee.email, temp_password)
            return True
        except MailError as e:
            logger.warning("Welcome email to %s failed: %s", employee.email, e)
            return False

    # Validation helpers

    def _clean_profile(
        self,
        fields: dict[str, Any],
        creating: bool,
        existing: Optional[Employee] = None,
    ) -> dict[str, Any]:
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        values = dict(fields)

        if creating or "full_name" in values:
            values["full_name"] = require_text(values.get("full_name"), "Full name")

        if creating or "email" in values:
            email = (values.get("email") or "").strip().lower()
            if not is_valid_email(email):
                raise ValueError("Please enter a valid email address")
            self._validate_email_unique(email, existing)
            values["email"] = email

        if "role" in values or creating:
            values["role"] = require_choice(values.get("role", "employee"), ROLES, "Role")

        if "employee_type" in values or creating:
            values["employee_type"] = require_choice(values.get("employee_type", "VA"), EMPLOYEE_TYPES, "Employee type")

        for size_field in ("shirt_size", "hoodie_size"):
            if size_field in values or creating:
                values[size_field] = require_choice(values.get(size_field) or "XXS", APPAREL_SIZES, "Size")

        if values.get("ssn_last4"):
            ssn = str(values["ssn_last4"]).strip()
            if len(ssn) != 4 or not ssn.isdigit():
                raise ValueError("SSN last 4 must be exactly 4 digits")
            values["ssn_last4"] = ssn

        if values.get("pay_rate") is not None:
            try:
                rate = Decimal(str(values["pay_rate"]))
            except InvalidOperation:
                raise ValueError("Pay rate must be a number")
            if rate < 0:
                raise ValueError("Pay rate cannot be negative")
            values["pay_rate"] = rate

        if values.get("wise_email") and not is_valid_email(values["wise_email"]):
            raise ValueError("Wise email is not a valid email address")

        if "wecard_certified" in values:
            values["wecard_certified"] = bool(values["wecard_certified"])

        for key in ("position", "acronym", "nickname", "contact_number", "address",
                    "emergency_contact", "emergency_contact_phone", "driver_license_no",
                    "wise_tag", "wise_email", "bank_name", "account_number",
                    "wecard_certificate_url"):
            if key in values and isinstance(values[key], str):
                values[key] = optional_text(values[key])

        return values

    def _validate_email_unique(self, email: str, existing: Optional[Employee]) -> None:
        query = select(Employee.employee_id).where(func.lower(Employee.email) == email)
        if existing is not None:
            query = query.where(Employee.employee_id != existing.employee_id)
        if self.db.execute(query).first():
            raise ValueError(f"Email '{email}' is already registered")
