"""Idempotency record model definition."""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import UUIDPrimaryKeyMixin


class IdempotencyRecord(UUIDPrimaryKeyMixin, Base):
    """Cached response of a money-moving operation, keyed by caller key and operation."""

    __tablename__ = "idempotency_records"

    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # Operation name, e.g. "booking/create"
    method: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # SHA-256 of the normalized request body
    request_body_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    response_status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    response_body: Mapped[str] = mapped_column(Text, nullable=False)

    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        CheckConstraint("length(idempotency_key) > 0", name="ck_idempotency_key_not_empty"),
        CheckConstraint("length(request_body_hash) = 64", name="ck_idempotency_hash_length"),
        CheckConstraint(
            "response_status_code >= 100 AND response_status_code <= 599",
            name="ck_idempotency_status_code_valid",
        ),
        UniqueConstraint("user_id", "idempotency_key", "method", name="uq_idempotency_user_key_method"),
    )

    def __repr__(self) -> str:
        return (
            f"<IdempotencyRecord(key='{self.idempotency_key}', method='{self.method}', "
            f"status={self.response_status_code}, expires_at={self.expires_at})>"
        )
