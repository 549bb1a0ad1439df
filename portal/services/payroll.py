# Hippies Portal - Payroll Service
# Pay periods, line items (hours x rate), and the invoice approval flow

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from portal.models.employee import Employee
from portal.models.payroll import PayrollInvoice, PayrollItem, PayrollPeriod
from portal.services.audit import AuditService
from portal.services.auth import AuthorizationError
from portal.services.errors import NotFoundError
from portal.services.shift import ShiftService
from portal.services.validation import require_date_order


logger = logging.getLogger(__name__)


def to_decimal(value: Any, label: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"{label} must be a number")
    if amount < 0:
        raise ValueError(f"{label} cannot be negative")
    return amount


class PayrollService:
    """
    Service for payroll periods, items and invoices.

    Usage:
        service = PayrollService(db, admin.employee_id, request.client.host)

        period = service.create_period(date(2025, 3, 1), date(2025, 3, 15), date(2025, 3, 20))
        service.save_items(period.payroll_id, [
            {"employee_id": 5, "hrs_worked": "40", "rate": "6.50"},
        ])

        # employee side
        invoice = PayrollService(db, 5).create_invoice(employee, item_id)
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
    # Periods
    # =========================================================================

    def get_period(self, payroll_id: int) -> PayrollPeriod:
        period = self.db.get(PayrollPeriod, payroll_id)
        if not period:
            raise NotFoundError(f"Payroll period {payroll_id} not found")
        return period

    def list_periods(self) -> list[PayrollPeriod]:
        return self.db.execute(
            select(PayrollPeriod).order_by(PayrollPeriod.date_ended.desc(), PayrollPeriod.payroll_id.desc())
        ).scalars().all()

    def create_period(
        self,
        date_started: date,
        date_ended: date,
        release_date: Optional[date] = None,
    ) -> PayrollPeriod:
        self._validate_period_dates(date_started, date_ended, release_date)

        period = PayrollPeriod(
            date_started=date_started,
            date_ended=date_ended,
            release_date=release_date,
            created_by=self.current_user_id,
        )
        self.db.add(period)
        self.db.flush()
        self.audit.log_insert(period)
        return period

    def update_period(
        self,
        payroll_id: int,
        date_started: Optional[date] = None,
        date_ended: Optional[date] = None,
        release_date: Optional[date] = None,
    ) -> PayrollPeriod:
        period = self.get_period(payroll_id)
        new_start = date_started or period.date_started
        new_end = date_ended or period.date_ended
        new_release = release_date if release_date is not None else period.release_date
        self._validate_period_dates(new_start, new_end, new_release)

        self.audit.update_fields(
            period,
            {"date_started": new_start, "date_ended": new_end, "release_date": new_release},
        )
        return period

    def delete_period(self, payroll_id: int) -> None:
        """Delete a period with its items and their invoices."""
        period = self.get_period(payroll_id)
        released = [item for item in period.items if item.invoice and item.invoice.released]
        if released:
            raise ValueError("Cannot delete a period with released invoices")

        self.audit.log_delete(period)
        self.db.delete(period)

    # =========================================================================
    # Items
    # =========================================================================

    def list_items(self, payroll_id: int) -> list[PayrollItem]:
        self.get_period(payroll_id)
        return self.db.execute(
            select(PayrollItem)
            .options(joinedload(PayrollItem.employee), joinedload(PayrollItem.invoice))
            .where(PayrollItem.payroll_id == payroll_id)
            .order_by(PayrollItem.item_id)
        ).scalars().all()

    def save_items(self, payroll_id: int, items: Iterable[dict[str, Any]]) -> list[PayrollItem]:
        """
        Replace every item of a period with the given rows.

        Each row needs employee_id, hrs_worked and rate; subtotal and
        total are computed. Items whose invoice was already released
        cannot be replaced.

        Raises:
            ValueError: On duplicate employees, negative numbers or
                        unknown employees
        """
        period = self.get_period(payroll_id)

        rows = []
        seen = set()
        for raw in items:
            employee_id = int(raw["employee_id"])
            if employee_id in seen:
                raise ValueError(f"Employee {employee_id} appears more than once")
            seen.add(employee_id)
            rows.append((
                employee_id,
                to_decimal(raw.get("hrs_worked", 0), "Hours worked"),
                to_decimal(raw.get("rate", 0), "Rate"),
            ))

        if seen:
            found = set(self.db.execute(
                select(Employee.employee_id).where(Employee.employee_id.in_(seen))
            ).scalars().all())
            missing = seen - found
            if missing:
                raise ValueError(f"Unknown employee(s): {', '.join(str(m) for m in sorted(missing))}")

        for item in list(period.items):
            if item.invoice and item.invoice.released:
                raise ValueError("Cannot replace items that have released invoices")
            self.audit.log_delete(item, context="payroll items replaced")
            period.items.remove(item)
        self.db.flush()

        saved = []
        for employee_id, hrs_worked, rate in rows:
            item = PayrollItem(employee_id=employee_id, hrs_worked=hrs_worked, rate=rate)
            item.compute_totals()
            period.items.append(item)
            saved.append(item)

        self.db.flush()
        for item in saved:
            self.audit.log_insert(item, context="payroll items replaced")

        logger.info("Saved %s payroll items for period %s", len(saved), payroll_id)
        return saved

    def suggest_items(self, payroll_id: int) -> list[dict[str, Any]]:
        """
        Prefill rows from closed shifts in the period and profile pay
        rates. Nothing is saved.
        """
        period = self.get_period(payroll_id)
        hours = ShiftService(self.db, self.current_user_id).hours_by_employee(
            period.date_started, period.date_ended
        )

        employees = self.db.execute(
            select(Employee).where(Employee.is_active == True).order_by(Employee.full_name)
        ).scalars().all()

        suggestions = []
        for employee in employees:
            hrs = hours.get(employee.employee_id, Decimal("0"))
            if hrs <= 0:
                continue
            rate = employee.pay_rate or Decimal("0")
            item = PayrollItem(employee_id=employee.employee_id, hrs_worked=hrs, rate=rate)
            item.compute_totals()
            suggestions.append({
                "employee_id": employee.employee_id,
                "full_name": employee.full_name,
                "hrs_worked": item.hrs_worked,
                "rate": item.rate,
                "total": item.total,
            })
        return suggestions

    def my_items(self, employee_id: int) -> list[PayrollItem]:
        return self.db.execute(
            select(PayrollItem)
            .join(PayrollItem.period)
            .options(joinedload(PayrollItem.period), joinedload(PayrollItem.invoice))
            .where(PayrollItem.employee_id == employee_id)
            .order_by(PayrollPeriod.date_ended.desc())
        ).scalars().all()

    # =========================================================================
    # Invoices
    # =========================================================================

    def get_invoice(self, invoice_id: int) -> PayrollInvoice:
        invoice = self.db.get(PayrollInvoice, invoice_id)
        if not invoice:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def create_invoice(self, employee: Employee, item_id: int) -> PayrollInvoice:
        """
        Raise an invoice for one of the employee's own payroll items.

        Raises:
            AuthorizationError: If the item belongs to someone else
            ValueError: If the item already has an invoice
        """
        item = self.db.get(PayrollItem, item_id)
        if not item:
            raise NotFoundError(f"Payroll item {item_id} not found")
        if item.employee_id != employee.employee_id:
            raise AuthorizationError("You can only invoice your own payroll items")
        if item.invoice is not None:
            raise ValueError("An invoice already exists for this payroll item")

        invoice = PayrollInvoice(
            employee_id=employee.employee_id,
            payroll_item_id=item.item_id,
            date_issued=date.today(),
        )
        item.invoice = invoice
        self.db.flush()
        self.audit.log_insert(invoice)
        return invoice

    def confirm_invoice(self, employee: Employee, invoice_id: int) -> PayrollInvoice:
        invoice = self._own_invoice(employee, invoice_id)
        if invoice.released:
            raise ValueError("Invoice has already been released")

        self.audit.update_fields(invoice, {"confirmed": True, "confirmed_at": datetime.utcnow()})
        return invoice

    def decline_invoice(self, employee: Employee, invoice_id: int) -> PayrollInvoice:
        """Employee disputes the figures; clears any admin verification."""
        invoice = self._own_invoice(employee, invoice_id)
        if invoice.released:
            raise ValueError("Invoice has already been released")

        self.audit.update_fields(
            invoice,
            {
                "confirmed": False,
                "confirmed_at": None,
                "admin_verified": False,
                "verified_at": None,
                "verified_by": None,
            },
        )
        return invoice

    def verify_invoice(self, invoice_id: int) -> PayrollInvoice:
        invoice = self.get_invoice(invoice_id)
        if not invoice.confirmed:
            raise ValueError("Invoice must be confirmed by the employee before verification")
        if invoice.released:
            raise ValueError("Invoice has already been released")

        self.audit.update_fields(
            invoice,
            {
                "admin_verified": True,
                "verified_at": datetime.utcnow(),
                "verified_by": self.current_user_id,
            },
        )
        return invoice

    def release_invoices(self, invoice_ids: Iterable[int]) -> int:
        """
        Release the given invoices that are verified and not yet
        released. Others are skipped. Returns the number released.
        """
        ids = list(set(invoice_ids))
        if not ids:
            return 0

        invoices = self.db.execute(
            select(PayrollInvoice)
            .where(PayrollInvoice.invoice_id.in_(ids))
            .where(PayrollInvoice.admin_verified == True)
            .where(PayrollInvoice.released == False)
        ).scalars().all()

        now = datetime.utcnow()
        for invoice in invoices:
            self.audit.update_fields(invoice, {"released": True, "released_at": now}, context="payroll release")

        logger.info("Released %s of %s requested invoices", len(invoices), len(ids))
        return len(invoices)

    def list_invoices(
        self,
        payroll_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> list[PayrollInvoice]:
        query = (
            select(PayrollInvoice)
            .join(PayrollInvoice.item)
            .join(PayrollItem.period)
            .options(
                joinedload(PayrollInvoice.item).joinedload(PayrollItem.period),
                joinedload(PayrollInvoice.employee),
            )
        )
        if payroll_id is not None:
            query = query.where(PayrollItem.payroll_id == payroll_id)
        if employee_id is not None:
            query = query.where(PayrollInvoice.employee_id == employee_id)

        return self.db.execute(
            query.order_by(PayrollPeriod.date_ended.desc(), PayrollInvoice.invoice_id.desc())
        ).scalars().all()

    def invoice_data(self, invoice_id: int, viewer: Employee) -> dict[str, Any]:
        """
        Everything the printable invoice shows.

        Employees may only open their own invoices.
        """
        invoice = self.get_invoice(invoice_id)
        if not viewer.can_view_employee(invoice.employee_id):
            raise AuthorizationError("You can only view your own invoices")

        item = invoice.item
        period = item.period
        employee = invoice.employee

        return {
            "invoice_id": invoice.invoice_id,
            "invoice_no": invoice.invoice_no,
            "employee_id": employee.employee_id,
            "payroll_item_id": item.item_id,
            "full_name": employee.full_name,
            "position": employee.position,
            "description": f"Services rendered {period.label}",
            "date_issued": invoice.date_issued,
            "date_started": period.date_started,
            "date_ended": period.date_ended,
            "hrs_worked": item.hrs_worked,
            "rate": item.rate,
            "subtotal": item.subtotal,
            "total": item.total,
            "confirmed": invoice.confirmed,
            "admin_verified": invoice.admin_verified,
            "released": invoice.released,
            "wise_tag": employee.wise_tag,
            "wise_email": employee.wise_email,
            "bank_name": employee.bank_name,
            "account_number": employee.account_number,
        }

    # Validation helpers

    def _own_invoice(self, employee: Employee, invoice_id: int) -> PayrollInvoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.employee_id != employee.employee_id:
            raise AuthorizationError("You can only act on your own invoices")
        return invoice

    def _validate_period_dates(
        self,
        date_started: date,
        date_ended: date,
        release_date: Optional[date],
    ) -> None:
        require_date_order(date_started, date_ended, "Period end must be on or after period start")
        if release_date is not None and release_date < date_ended:
            raise ValueError("Release date cannot be before the period ends")
