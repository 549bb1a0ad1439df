# Hippies Portal - Payroll Models
# Pay periods, per-employee line items, and invoices

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Integer, Date, DateTime, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, AuditMixin

if TYPE_CHECKING:
    from .employee import Employee


CENT = Decimal("0.01")


class PayrollPeriod(AuditMixin, Base):
    """
    A pay period.

    Items belong to exactly one period and are removed with it.
    """

    __tablename__ = "payrolls"

    payroll_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date_started: Mapped[date] = mapped_column(Date, nullable=False)
    date_ended: Mapped[date] = mapped_column(Date, nullable=False)
    release_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    items: Mapped[list["PayrollItem"]] = relationship(
        "PayrollItem",
        back_populates="period",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<PayrollPeriod {self.payroll_id} {self.date_started}..{self.date_ended}>"

    @property
    def label(self) -> str:
        return f"{self.date_started:%b %d} - {self.date_ended:%b %d, %Y}"


class PayrollItem(Base):
    """
    Hours and rate for one employee in one period.

    subtotal and total are both hrs_worked x rate; there are no
    deductions in this business, the two columns stay separate so the
    invoice layout can show them independently.
    """

    __tablename__ = "payroll_items"

    __table_args__ = (
        UniqueConstraint("payroll_id", "employee_id", name="uq_payroll_items_period_employee"),
    )

    item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    payroll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payrolls.payroll_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False,
        index=True
    )

    hrs_worked: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=0)
    rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    period: Mapped["PayrollPeriod"] = relationship("PayrollPeriod", back_populates="items")
    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])
    invoice: Mapped[Optional["PayrollInvoice"]] = relationship(
        "PayrollInvoice",
        back_populates="item",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<PayrollItem {self.item_id} employee={self.employee_id} {self.hrs_worked}h x {self.rate}>"

    def compute_totals(self) -> None:
        amount = (Decimal(self.hrs_worked) * Decimal(self.rate)).quantize(CENT, rounding=ROUND_HALF_UP)
        self.subtotal = amount
        self.total = amount


class PayrollInvoice(Base):
    """
    Invoice an employee raises against their payroll item.

    Flow:
        created -> confirmed by employee -> verified by admin -> released
    An employee may decline (un-confirm) until the invoice is released.
    """

    __tablename__ = "payroll_invoices"

    invoice_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False,
        index=True
    )
    payroll_item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payroll_items.item_id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    released: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    date_issued: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    verified_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=True
    )
    released_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    item: Mapped["PayrollItem"] = relationship("PayrollItem", back_populates="invoice")
    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])

    def __repr__(self) -> str:
        return f"<PayrollInvoice {self.invoice_id} item={self.payroll_item_id} {self.status}>"

    @property
    def status(self) -> str:
        if self.released:
            return "released"
        if self.admin_verified:
            return "verified"
        if self.confirmed:
            return "confirmed"
        return "pending"

    @property
    def invoice_no(self) -> str:
        period_end = self.item.period.date_ended if self.item and self.item.period else self.date_issued
        return f"INV-{period_end:%Y%m%d}-{self.invoice_id:05d}"
