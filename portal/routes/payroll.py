# Hippies Portal - Payroll Routes
# Periods and items for admins, invoices for both sides

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.employee import Employee
from portal.models.payroll import PayrollInvoice, PayrollItem, PayrollPeriod
from portal.services.payroll import PayrollService


router = APIRouter(prefix="/api/payroll", tags=["payroll"])


# Request/Response models

class PeriodCreate(BaseModel):
    date_started: date
    date_ended: date
    release_date: Optional[date] = None


class PeriodUpdate(BaseModel):
    date_started: Optional[date] = None
    date_ended: Optional[date] = None
    release_date: Optional[date] = None


class ItemIn(BaseModel):
    employee_id: int
    hrs_worked: Decimal
    rate: Decimal


class ItemsReplace(BaseModel):
    items: list[ItemIn]


class InvoiceCreate(BaseModel):
    item_id: int


class ReleaseRequest(BaseModel):
    invoice_ids: list[int]


class PeriodResponse(BaseModel):
    payroll_id: int
    date_started: date
    date_ended: date
    release_date: Optional[date] = None
    label: str


class InvoiceResponse(BaseModel):
    invoice_id: int
    invoice_no: str
    employee_id: int
    employee_name: Optional[str] = None
    payroll_item_id: int
    status: str
    confirmed: bool
    admin_verified: bool
    released: bool
    date_issued: date
    confirmed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    released_at: Optional[datetime] = None
    total: Decimal


class ItemResponse(BaseModel):
    item_id: int
    payroll_id: int
    employee_id: int
    employee_name: Optional[str] = None
    hrs_worked: Decimal
    rate: Decimal
    subtotal: Decimal
    total: Decimal
    period: Optional[PeriodResponse] = None
    invoice: Optional[InvoiceResponse] = None


def period_response(period: PayrollPeriod) -> PeriodResponse:
    return PeriodResponse(
        payroll_id=period.payroll_id,
        date_started=period.date_started,
        date_ended=period.date_ended,
        release_date=period.release_date,
        label=period.label,
    )


def invoice_response(invoice: PayrollInvoice) -> InvoiceResponse:
    return InvoiceResponse(
        invoice_id=invoice.invoice_id,
        invoice_no=invoice.invoice_no,
        employee_id=invoice.employee_id,
        employee_name=invoice.employee.full_name if invoice.employee else None,
        payroll_item_id=invoice.payroll_item_id,
        status=invoice.status,
        confirmed=invoice.confirmed,
        admin_verified=invoice.admin_verified,
        released=invoice.released,
        date_issued=invoice.date_issued,
        confirmed_at=invoice.confirmed_at,
        verified_at=invoice.verified_at,
        released_at=invoice.released_at,
        total=invoice.item.total,
    )


def item_response(item: PayrollItem, with_period: bool = False) -> ItemResponse:
    return ItemResponse(
        item_id=item.item_id,
        payroll_id=item.payroll_id,
        employee_id=item.employee_id,
        employee_name=item.employee.full_name if item.employee else None,
        hrs_worked=item.hrs_worked,
        rate=item.rate,
        subtotal=item.subtotal,
        total=item.total,
        period=period_response(item.period) if with_period else None,
        invoice=invoice_response(item.invoice) if item.invoice else None,
    )


# Periods (admin)

@router.get("/periods", response_model=list[PeriodResponse])
def list_periods(
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [period_response(p) for p in PayrollService(db, user.employee_id).list_periods()]


@router.post("/periods", response_model=PeriodResponse, status_code=status.HTTP_201_CREATED)
def create_period(
    payload: PeriodCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    period = PayrollService(db, user.employee_id, client_ip(request)).create_period(
        payload.date_started, payload.date_ended, payload.release_date
    )
    db.commit()
    return period_response(period)


@router.patch("/periods/{payroll_id}", response_model=PeriodResponse)
def update_period(
    payroll_id: int,
    payload: PeriodUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    period = PayrollService(db, user.employee_id, client_ip(request)).update_period(
        payroll_id, **payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return period_response(period)


@router.delete("/periods/{payroll_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_period(
    payroll_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    PayrollService(db, user.employee_id, client_ip(request)).delete_period(payroll_id)
    db.commit()


# Items (admin)

@router.get("/periods/{payroll_id}/items", response_model=list[ItemResponse])
def list_items(
    payroll_id: int,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [item_response(i) for i in PayrollService(db, user.employee_id).list_items(payroll_id)]


@router.put("/periods/{payroll_id}/items", response_model=list[ItemResponse])
def save_items(
    payroll_id: int,
    payload: ItemsReplace,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Replace every item of the period."""
    service = PayrollService(db, user.employee_id, client_ip(request))
    service.save_items(payroll_id, [item.model_dump() for item in payload.items])
    db.commit()
    return [item_response(i) for i in service.list_items(payroll_id)]


@router.get("/periods/{payroll_id}/suggestions")
def suggest_items(
    payroll_id: int,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    """Hours from closed shifts in the period, rates from profiles."""
    return PayrollService(db, user.employee_id).suggest_items(payroll_id)


# Invoices

@router.get("/me", response_model=list[ItemResponse])
def my_items(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [item_response(i, with_period=True) for i in PayrollService(db, user.employee_id).my_items(user.employee_id)]


@router.post("/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    invoice = PayrollService(db, user.employee_id, client_ip(request)).create_invoice(user, payload.item_id)
    db.commit()
    return invoice_response(invoice)


@router.get("/invoices", response_model=list[InvoiceResponse])
def list_invoices(
    payroll_id: Optional[int] = Query(None),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Admins see every invoice; employees their own."""
    employee_id = None if user.is_admin else user.employee_id
    invoices = PayrollService(db, user.employee_id).list_invoices(payroll_id, employee_id)
    return [invoice_response(i) for i in invoices]


@router.get("/invoices/{invoice_id}")
def invoice_data(
    invoice_id: int,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Everything the printable invoice shows."""
    return PayrollService(db, user.employee_id).invoice_data(invoice_id, user)


@router.post("/invoices/{invoice_id}/confirm", response_model=InvoiceResponse)
def confirm_invoice(
    invoice_id: int,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    invoice = PayrollService(db, user.employee_id, client_ip(request)).confirm_invoice(user, invoice_id)
    db.commit()
    return invoice_response(invoice)


@router.post("/invoices/{invoice_id}/decline", response_model=InvoiceResponse)
def decline_invoice(
    invoice_id: int,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    invoice = PayrollService(db, user.employee_id, client_ip(request)).decline_invoice(user, invoice_id)
    db.commit()
    return invoice_response(invoice)


@router.post("/invoices/{invoice_id}/verify", response_model=InvoiceResponse)
def verify_invoice(
    invoice_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    invoice = PayrollService(db, user.employee_id, client_ip(request)).verify_invoice(invoice_id)
    db.commit()
    return invoice_response(invoice)


@router.post("/invoices/release")
def release_invoices(
    payload: ReleaseRequest,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Release the verified ones among the given invoices."""
    released = PayrollService(db, user.employee_id, client_ip(request)).release_invoices(payload.invoice_ids)
    db.commit()
    return {"released": released}
