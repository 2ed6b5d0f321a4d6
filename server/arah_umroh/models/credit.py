"""Package credit balance and credit ledger model definitions."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin


class CreditTransactionType(str, Enum):
    PURCHASE = "purchase"
    USAGE = "usage"
    BONUS = "bonus"
    REFUND = "refund"


class CreditTransactionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class PackageCredits(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Credit balance of a travel, spent on featured placements."""

    __tablename__ = "package_credits"

    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    credits_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credits_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_purchase_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("credits_remaining >= 0", name="ck_package_credits_remaining_non_negative"),
        CheckConstraint("credits_used >= 0", name="ck_package_credits_used_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<PackageCredits(travel_id={self.travel_id}, remaining={self.credits_remaining}, "
            f"used={self.credits_used})>"
        )


class CreditTransaction(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Ledger row for every change (or requested change) to a credit balance."""

    __tablename__ = "credit_transactions"

    travel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("travels.id", ondelete="CASCADE"), nullable=False, index=True
    )
    package_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("packages.id", ondelete="SET NULL"), nullable=True
    )
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # Signed: negative for usage
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CreditTransactionStatus.COMPLETED.value, index=True
    )
    price: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    payment_proof_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("amount <> 0", name="ck_credit_transaction_amount_non_zero"),
    )

    def __repr__(self) -> str:
        return (
            f"<CreditTransaction(id={self.id}, type={self.transaction_type}, "
            f"amount={self.amount}, status={self.status})>"
        )
