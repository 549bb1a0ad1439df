# Hippies Portal - Agreement Routes

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import client_ip, get_current_user, require_admin
from portal.models.agreement import Agreement
from portal.models.employee import Employee
from portal.services.agreement import AgreementService


router = APIRouter(prefix="/api/agreements", tags=["agreements"])


# Request/Response models

class AgreementCreate(BaseModel):
    title: str
    description: Optional[str] = None
    doc_links: list[str] = []
    allowed_types: list[str]


class AgreementUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    doc_links: Optional[list[str]] = None
    allowed_types: Optional[list[str]] = None


class SignRequest(BaseModel):
    signature_base64: str


class AgreementResponse(BaseModel):
    agreement_id: int
    title: str
    description: Optional[str] = None
    doc_links: list[str]
    allowed_types: list[str]
    created_at: datetime


class SignatureResponse(BaseModel):
    tracker_id: int
    agreement_id: int
    employee_id: int
    status: str
    signed_at: datetime


def agreement_response(agreement: Agreement) -> AgreementResponse:
    return AgreementResponse(
        agreement_id=agreement.agreement_id,
        title=agreement.title,
        description=agreement.description,
        doc_links=agreement.doc_links,
        allowed_types=agreement.allowed_types,
        created_at=agreement.created_at,
    )


# Employee

@router.get("/me")
def my_agreements(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    """Agreements for the caller's employee type, signed or pending."""
    return AgreementService(db, user.employee_id).list_for_me(user)


@router.post("/{agreement_id}/sign", response_model=SignatureResponse)
def sign_agreement(
    agreement_id: int,
    payload: SignRequest,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tracker = AgreementService(db, user.employee_id, client_ip(request)).sign(
        user, agreement_id, payload.signature_base64
    )
    db.commit()
    return SignatureResponse(
        tracker_id=tracker.tracker_id,
        agreement_id=tracker.agreement_id,
        employee_id=tracker.employee_id,
        status=tracker.status,
        signed_at=tracker.signed_at,
    )


# Admin

@router.get("", response_model=list[AgreementResponse])
def list_agreements(
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [agreement_response(a) for a in AgreementService(db, user.employee_id).list_agreements()]


@router.get("/tracker")
def tracker_summary(
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    return AgreementService(db, user.employee_id).tracker_summary()


@router.get("/{agreement_id}", response_model=AgreementResponse)
def get_agreement(
    agreement_id: int,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return agreement_response(AgreementService(db, user.employee_id).get_agreement(agreement_id))


@router.post("", response_model=AgreementResponse, status_code=status.HTTP_201_CREATED)
def create_agreement(
    payload: AgreementCreate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    agreement = AgreementService(db, user.employee_id, client_ip(request)).create_agreement(payload.model_dump())
    db.commit()
    return agreement_response(agreement)


@router.patch("/{agreement_id}", response_model=AgreementResponse)
def update_agreement(
    agreement_id: int,
    payload: AgreementUpdate,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    agreement = AgreementService(db, user.employee_id, client_ip(request)).update_agreement(
        agreement_id, payload.model_dump(exclude_unset=True)
    )
    db.commit()
    return agreement_response(agreement)


@router.delete("/{agreement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_agreement(
    agreement_id: int,
    request: Request,
    user: Employee = Depends(require_admin),
    db: Session = Depends(get_db),
):
    AgreementService(db, user.employee_id, client_ip(request)).delete_agreement(agreement_id)
    db.commit()
