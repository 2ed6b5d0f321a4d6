"""Feedback and content rating model definitions."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin


class FeedbackType(str, Enum):
    BUG = "bug"
    SUGGESTION = "suggestion"
    RATING = "rating"
    OTHER = "other"


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Feedback(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """User-submitted bug report, suggestion or app rating."""

    __tablename__ = "feedback"

    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    feedback_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    screenshot_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    device_info: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    app_version: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FeedbackStatus.PENDING.value, index=True
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_feedback_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, type={self.feedback_type}, status={self.status})>"


class ContentRating(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user's 1-5 rating of a piece of content (prayer, guide, ...)."""

    __tablename__ = "content_ratings"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    content_type: Mapped[str] = mapped_column(String(50), nullable=False)
    content_id: Mapped[str] = mapped_column(String(64), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_content_rating_range"),
        UniqueConstraint("user_id", "content_type", "content_id", name="uq_content_rating_user_content"),
    )

    def __repr__(self) -> str:
        return f"<ContentRating({self.content_type}:{self.content_id} rating={self.rating})>"
