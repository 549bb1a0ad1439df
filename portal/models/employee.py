# Hippies Portal - Employee Model
# Staff profiles, login identity, and role claims

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, Integer, DateTime, Date, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


ROLES = ("admin", "employee")
EMPLOYEE_TYPES = ("VA", "Store")
APPAREL_SIZES = ("XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL")


class Employee(Base):
    """
    A staff member's profile and login identity.

    Roles:
        - admin: manages staff, payroll, schedules, content
        - employee: sees own schedule, shifts, payroll, tasks

    Employee type decides which agreements apply:
        - VA: virtual assistant working remotely
        - Store: on-site retail staff

    Employees are never hard-deleted; deactivating one ends every
    session and hides them from directories.
    """

    __tablename__ = "employees"

    employee_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # Login identity
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Personal info
    full_name: Mapped[str] = mapped_column(String(150), nullable=False)
    nickname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    acronym: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    emergency_contact: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ssn_last4: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    driver_license_no: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Employment details
    employee_type: Mapped[str] = mapped_column(String(10), nullable=False, default="VA")
    position: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    pay_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    shirt_size: Mapped[str] = mapped_column(String(5), nullable=False, default="XXS")
    hoodie_size: Mapped[str] = mapped_column(String(5), nullable=False, default="XXS")

    # Payout details
    wise_tag: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    wise_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    account_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # WeCard age-verification certification
    wecard_certified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    wecard_certificate_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Audit fields (self-referencing, so declared here rather than via AuditMixin)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    modified_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<Employee {self.employee_id} {self.email} ({self.role})>"

    @property
    def display_name(self) -> str:
        """Nickname when set, otherwise the full name."""
        return self.nickname or self.full_name

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def dashboard_url(self) -> str:
        """Landing page for this user's role."""
        return "/admin-dashboard" if self.is_admin else "/employee-dashboard"

    def can_view_employee(self, employee_id: int) -> bool:
        """Admins see everyone; employees only themselves."""
        return self.is_admin or self.employee_id == employee_id
