# Hippies Portal - Direct Message Model

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Integer, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .employee import Employee


class Message(Base):
    """
    One direct message between two staff members.

    Messages are immutable apart from is_read, which only the receiver
    flips.
    """

    __tablename__ = "messages"

    __table_args__ = (
        Index("ix_messages_receiver_read", "receiver_id", "is_read"),
        Index("ix_messages_pair_created", "sender_id", "receiver_id", "created_at"),
    )

    message_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False
    )
    receiver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    sender: Mapped["Employee"] = relationship("Employee", foreign_keys=[sender_id])
    receiver: Mapped["Employee"] = relationship("Employee", foreign_keys=[receiver_id])

    def __repr__(self) -> str:
        return f"<Message {self.message_id} {self.sender_id}->{self.receiver_id}>"

    def partner_of(self, employee_id: int) -> int:
        """The other participant from employee_id's point of view."""
        return self.receiver_id if self.sender_id == employee_id else self.sender_id
