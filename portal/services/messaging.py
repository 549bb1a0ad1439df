# Hippies Portal - Messaging Service
# Direct messages between staff, unread counters and thread summaries

from typing import Any, Optional
import logging

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from portal.config import get_settings
from portal.models.employee import Employee
from portal.models.message import Message
from portal.services.realtime import NullNotifier


settings = get_settings()
logger = logging.getLogger(__name__)


def message_payload(message: Message) -> dict[str, Any]:
    return {
        "message_id": message.message_id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "message": message.message,
        "is_read": message.is_read,
        "created_at": message.created_at.isoformat(),
    }


class MessagingService:
    """
    Service for direct messages.

    Usage:
        service = MessagingService(db, notifier=request.app.state.notifier)
        message = service.send(user, 7, "Can you cover Saturday?")
        db.commit()
        service.push_new(message)

    Pushes happen after commit so clients that refetch see the row.
    """

    def __init__(self, db: Session, notifier=None):
        self.db = db
        self.notifier = notifier or NullNotifier()

    def send(self, sender: Employee, receiver_id: int, text: Optional[str]) -> Message:
        """
        Raises:
            ValueError: For blank or too long text, messaging yourself or
                        an unknown / inactive receiver
        """
        body = (text or "").strip()
        if not body:
            raise ValueError("Message cannot be empty")
        if len(body) > settings.max_message_length:
            raise ValueError(f"Message cannot exceed {settings.max_message_length} characters")
        if receiver_id == sender.employee_id:
            raise ValueError("You cannot message yourself")

        receiver = self.db.get(Employee, receiver_id)
        if receiver is None or not receiver.is_active:
            raise ValueError("Recipient not found")

        message = Message(sender_id=sender.employee_id, receiver_id=receiver_id, message=body, is_read=False)
        self.db.add(message)
        self.db.flush()
        return message

    def conversation(self, me: Employee, partner_id: int, limit: Optional[int] = None) -> list[Message]:
        """Both directions between me and partner, oldest first."""
        query = (
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == me.employee_id, Message.receiver_id == partner_id),
                    and_(Message.sender_id == partner_id, Message.receiver_id == me.employee_id),
                )
            )
            .order_by(Message.created_at.asc(), Message.message_id.asc())
        )
        messages = self.db.execute(query).scalars().all()
        if limit is not None:
            messages = messages[-limit:]
        return messages

    def mark_read(self, me: Employee, partner_id: int) -> int:
        """Mark partner's messages to me as read. Returns how many changed."""
        result = self.db.execute(
            update(Message)
            .where(Message.receiver_id == me.employee_id)
            .where(Message.sender_id == partner_id)
            .where(Message.is_read == False)
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    def unread_count(self, me_id: int) -> int:
        return self.db.execute(
            select(func.count(Message.message_id))
            .where(Message.receiver_id == me_id)
            .where(Message.is_read == False)
        ).scalar_one()

    def threads(self, me: Employee) -> list[dict[str, Any]]:
        """
        One summary row per conversation partner, most recent first:
        partner_id, partner_name, last_message, last_message_time,
        unread_count.
        """
        my_id = me.employee_id
        messages = self.db.execute(
            select(Message)
            .where(or_(Message.sender_id == my_id, Message.receiver_id == my_id))
            .order_by(Message.created_at.desc(), Message.message_id.desc())
        ).scalars().all()

        threads: dict[int, dict[str, Any]] = {}
        for message in messages:
            partner_id = message.partner_of(my_id)
            thread = threads.get(partner_id)
            if thread is None:
                thread = threads[partner_id] = {
                    "partner_id": partner_id,
                    "partner_name": None,
                    "last_message": message.message,
                    "last_message_time": message.created_at,
                    "unread_count": 0,
                }
            if message.receiver_id == my_id and not message.is_read:
                thread["unread_count"] += 1

        if threads:
            names = dict(self.db.execute(
                select(Employee.employee_id, Employee.full_name)
                .where(Employee.employee_id.in_(threads))
            ).all())
            for partner_id, thread in threads.items():
                thread["partner_name"] = names.get(partner_id)

        return list(threads.values())

    # =========================================================================
    # Realtime
    # =========================================================================

    def push_new(self, message: Message) -> None:
        payload = message_payload(message)
        self.notifier.publish([message.sender_id, message.receiver_id], "message.new", payload)
        self.notifier.publish(
            [message.receiver_id],
            "unread.count",
            {"count": self.unread_count(message.receiver_id)},
        )

    def push_read(self, me: Employee, partner_id: int, count: int) -> None:
        if not count:
            return
        self.notifier.publish([partner_id], "message.read", {"reader_id": me.employee_id, "count": count})
        self.notifier.publish([me.employee_id], "unread.count", {"count": self.unread_count(me.employee_id)})
