# Hippies Portal - Agreement Models
# Documents employees must sign, and their signatures

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Integer, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, AuditMixin

if TYPE_CHECKING:
    from .employee import Employee


class Agreement(AuditMixin, Base):
    """
    An agreement (NDA, handbook acknowledgement, contractor terms...).

    allowed_types lists the employee types that must sign it.
    """

    __tablename__ = "agreements"

    agreement_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_links: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    allowed_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    signatures: Mapped[list["AgreementTracker"]] = relationship(
        "AgreementTracker",
        back_populates="agreement",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Agreement {self.agreement_id} '{self.title}' for {self.allowed_types}>"

    def applies_to(self, employee_type: str) -> bool:
        return employee_type in (self.allowed_types or [])


class AgreementTracker(Base):
    """Signature of one employee on one agreement."""

    __tablename__ = "agreement_tracker"

    __table_args__ = (
        UniqueConstraint("employee_id", "agreement_id", name="uq_agreement_tracker_employee_agreement"),
    )

    tracker_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.employee_id"),
        nullable=False,
        index=True
    )
    agreement_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("agreements.agreement_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    signature_base64: Mapped[str] = mapped_column(Text, nullable=False)
    signed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="signed")

    agreement: Mapped["Agreement"] = relationship("Agreement", back_populates="signatures")
    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])

    def __repr__(self) -> str:
        return f"<AgreementTracker employee={self.employee_id} agreement={self.agreement_id} {self.status}>"
