# Hippies Portal - Employee Routes
# Admin staff management, the messaging directory and self-service profile

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, get_mail_service, require_admin
from portal.models.employee import Employee
from portal.services.employee import EmployeeService
from portal.services.mail import MailService


router = APIRouter(prefix="/api", tags=["employees"])


# Request/Response models

class EmployeeFields(BaseModel):
    """Every profile field an admin may set; all optional for PATCH."""
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    employee_type: Optional[str] = None
    position: Optional[str] = None
    acronym: Optional[str] = None
    nickname: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    ssn_last4: Optional[str] = None
    driver_license_no: Optional[str] = None
    start_date: Optional[date] = None
    pay_rate: Optional[Decimal] = None
    shirt_size: Optional[str] = None
    hoodie_size: Optional[str] = None
    wise_tag: Optional[str] = None
    wise_email: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    wecard_certified: Optional[bool] = None
    wecard_certificate_url: Optional[str] = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    full_name: str
    email: str
    role: str
    employee_type: str
    is_active: bool
    position: Optional[str] = None
    acronym: Optional[str] = None
    nickname: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    ssn_last4: Optional[str] = None
    driver_license_no: Optional[str] = None
    start_date: Optional[date] = None
    pay_rate: Optional[Decimal] = None
    shirt_size: str
    hoodie_size: str
    wise_tag: Optional[str] = None
    wise_email: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    wecard_certified: bool
    wecard_certificate_url: Optional[str] = None
    created_at: datetime


class DirectoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    full_name: str
    nickname: Optional[str] = None
    role: str
    employee_type: str


class CreatedEmployeeResponse(BaseModel):
    employee: EmployeeResponse
    email_sent: bool
    temp_password: Optional[str] = None


def onboarding_response(employee: Employee, temp_password: str, email_sent: bool) -> CreatedEmployeeResponse:
    """The temporary password is only returned when the email did not go out."""
    return CreatedEmployeeResponse(
        employee=EmployeeResponse.model_validate(employee),
        email_sent=email_sent,
        temp_password=None if email_sent else temp_password,
    )


# Admin

@router.get("/employees", response_model=list[EmployeeResponse])
def list_employees(
    search: Optional[str] = Query(None),
    employee_type: Optional[str] = Query(None),
    include_inactive: bool = Query(False),
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return EmployeeService(db, user.employee_id).list_employees(search, employee_type, include_inactive)


@router.post("/employees", response_model=CreatedEmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeFields,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
    mail: MailService = Depends(get_mail_service),
):
    """Create the account, then send the welcome email with the temporary password."""
    service = EmployeeService(db, user.employee_id, client_ip(request), mail=mail)
    employee, temp_password = service.create_employee(payload.model_dump(exclude_unset=True))
    db.commit()

    email_sent = service.send_welcome(employee, temp_password)
    return onboarding_response(employee, temp_password, email_sent)


@router.get("/employees/directory", response_model=list[DirectoryEntry])
def directory(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active colleagues to start a conversation with."""
    return EmployeeService(db, user.employee_id).directory(user)


@router.get("/employees/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: int,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return EmployeeService(db, user.employee_id).get_employee(employee_id)


@router.patch("/employees/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: int,
    payload: EmployeeFields,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    employee = EmployeeService(db, user.employee_id, client_ip(request)).update_employee(
        employee_id, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return employee


@router.delete("/employees/{employee_id}", response_model=EmployeeResponse)
def deactivate_employee(
    employee_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Employees are deactivated, never removed."""
    employee = EmployeeService(db, user.employee_id, client_ip(request)).deactivate_employee(employee_id)
    db.commit()
    return employee


@router.post("/employees/{employee_id}/reactivate", response_model=EmployeeResponse)
def reactivate_employee(
    employee_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    employee = EmployeeService(db, user.employee_id, client_ip(request)).reactivate_employee(employee_id)
    db.commit()
    return employee


@router.post("/employees/{employee_id}/reset-password", response_model=CreatedEmployeeResponse)
def reset_password(
    employee_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
    mail: MailService = Depends(get_mail_service),
):
    service = EmployeeService(db, user.employee_id, client_ip(request), mail=mail)
    employee, temp_password = service.reset_password(employee_id)
    db.commit()

    email_sent = service.send_welcome(employee, temp_password)
    return onboarding_response(employee, temp_password, email_sent)


# Self-service

@router.get("/profile", response_model=EmployeeResponse)
def get_profile(user: Employee = Depends(get_current_user)):
    return user


@router.patch("/profile", response_model=EmployeeResponse)
def update_profile(
    request: Request,
    payload: dict[str, Any] = Body(...),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Only name, contact number, emergency contact and address."""
    employee = EmployeeService(db, user.employee_id, client_ip(request)).update_own_profile(
        user, payload
    )
    db.commit()
    return employee
