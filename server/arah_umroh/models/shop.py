"""Seller shop model definitions: sellers, categories, products and orders."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin


class SellerStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class ShopOrderStatus(str, Enum):
    """Shop order lifecycle status."""
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ShopSeller(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user registered to sell goods in the shop."""

    __tablename__ = "shop_sellers"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    shop_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SellerStatus.PENDING.value, index=True
    )

    def __repr__(self) -> str:
        return f"<ShopSeller(id={self.id}, shop_name='{self.shop_name}', status={self.status})>"


class ShopCategory(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "shop_categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<ShopCategory(slug='{self.slug}')>"


class ShopProduct(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A product listed by an approved seller."""

    __tablename__ = "shop_products"

    seller_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("shop_sellers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("shop_categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    compare_price: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weight_gram: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_shop_product_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_shop_product_stock_non_negative"),
    )

    seller: Mapped["ShopSeller"] = relationship("ShopSeller")
    category: Mapped[Optional["ShopCategory"]] = relationship("ShopCategory")

    def __repr__(self) -> str:
        return f"<ShopProduct(id={self.id}, name='{self.name}', stock={self.stock})>"


class ShopOrder(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A customer order spanning one or more sellers' products."""

    __tablename__ = "shop_orders"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    order_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ShopOrderStatus.PENDING.value, index=True
    )
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    shipping_name: Mapped[str] = mapped_column(String(255), nullable=False)
    shipping_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    shipping_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shipping_postal_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    payment_proof_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    courier: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_shop_order_total_non_negative"),
    )

    items: Mapped[list["ShopOrderItem"]] = relationship(
        "ShopOrderItem", back_populates="order", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ShopOrder(code='{self.order_code}', status={self.status}, total={self.total_amount})>"


class ShopOrderItem(UUIDPrimaryKeyMixin, Base):
    """Order line with the product name and price captured at checkout."""

    __tablename__ = "shop_order_items"

    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("shop_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("shop_products.id", ondelete="SET NULL"), nullable=True, index=True
    )
    seller_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("shop_sellers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_shop_order_item_quantity_positive"),
    )

    order: Mapped["ShopOrder"] = relationship("ShopOrder", back_populates="items")

    def __repr__(self) -> str:
        return f"<ShopOrderItem(product='{self.product_name}', qty={self.quantity})>"
