# Hippies Portal - Message Routes
# Direct messages; new and read events go out over /ws after commit

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.dependencies import get_current_user, get_notifier
from portal.models.employee import Employee
from portal.models.message import Message
from portal.services.messaging import MessagingService


router = APIRouter(prefix="/api/messages", tags=["messages"])


class MessageSend(BaseModel):
    receiver_id: int
    message: str


class MessageResponse(BaseModel):
    message_id: int
    sender_id: int
    receiver_id: int
    message: str
    is_read: bool
    created_at: datetime


class ThreadResponse(BaseModel):
    partner_id: int
    partner_name: Optional[str] = None
    last_message: str
    last_message_time: datetime
    unread_count: int


def message_response(message: Message) -> MessageResponse:
    return MessageResponse(
        message_id=message.message_id,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        message=message.message,
        is_read=message.is_read,
        created_at=message.created_at,
    )


@router.get("/threads", response_model=list[ThreadResponse])
def list_threads(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return MessagingService(db).threads(user)


@router.get("/unread-count")
def unread_count(
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"count": MessagingService(db).unread_count(user.employee_id)}


@router.get("/{partner_id}", response_model=list[MessageResponse])
def conversation(
    partner_id: int,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Both directions, oldest first."""
    return [message_response(m) for m in MessagingService(db).conversation(user, partner_id, limit)]


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageSend,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = MessagingService(db, notifier=get_notifier(request))
    message = service.send(user, payload.receiver_id, payload.message)
    db.commit()
    service.push_new(message)
    return message_response(message)


@router.post("/{partner_id}/read")
def mark_read(
    partner_id: int,
    request: Request,
    user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = MessagingService(db, notifier=get_notifier(request))
    count = service.mark_read(user, partner_id)
    db.commit()
    service.push_read(user, partner_id, count)
    return {"marked_read": count}
