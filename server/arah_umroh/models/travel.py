"""Travel agency (tenant) model definition."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .package import Package


class Travel(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A travel agency that publishes packages on the marketplace."""

    __tablename__ = "travels"

    # One travel per agent account
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    whatsapp: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_travel_rating_range"),
        CheckConstraint("review_count >= 0", name="ck_travel_review_count_non_negative"),
        CheckConstraint("length(slug) > 0", name="ck_travel_slug_not_empty"),
    )

    packages: Mapped[list["Package"]] = relationship("Package", back_populates="travel")

    def __repr__(self) -> str:
        return f"<Travel(id={self.id}, slug='{self.slug}', verified={self.verified})>"
