"""Devotional content model definitions: prayers, checklists and manasik guides."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin


class ChecklistCategory(str, Enum):
    DOKUMEN = "dokumen"
    PERLENGKAPAN = "perlengkapan"
    KESEHATAN = "kesehatan"
    MENTAL = "mental"


class ManasikCategory(str, Enum):
    UMROH = "umroh"
    HAJI = "haji"


class PrayerCategory(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "prayer_categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_arabic: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Prayer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A du'a with Arabic text, transliteration and translation."""

    __tablename__ = "prayers"

    category_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("prayer_categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    title_arabic: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    arabic_text: Mapped[str] = mapped_column(Text, nullable=False)
    transliteration: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    translation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    benefits: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    audio_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Prayer(id={self.id}, title='{self.title}')>"


class Checklist(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A preparation task shown to pilgrims before departure."""

    __tablename__ = "checklists"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # e.g. "H-30", "H-7"
    phase: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class UserChecklist(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user's check state for one checklist item."""

    __tablename__ = "user_checklists"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    checklist_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("checklists.id", ondelete="CASCADE"), nullable=False
    )
    is_checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    checked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "checklist_id", name="uq_user_checklist_user_item"),
    )


class ManasikGuide(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A step of the umroh or haji ritual walkthrough."""

    __tablename__ = "manasik_guides"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    title_arabic: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<ManasikGuide({self.category} #{self.order_index} '{self.title}')>"
