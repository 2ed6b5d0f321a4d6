"""Seller shop Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.shop import SellerStatus, ShopOrderStatus
from .common import PageInfo, PageRequest, reject_null

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# Sellers

class ApplySellerRequest(BaseModel):
    shop_name: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = Field(None, max_length=1000)
    city: Optional[str] = Field(None, max_length=100)


class ReviewSellerRequest(BaseModel):
    seller_id: UUID
    status: SellerStatus = Field(..., description="approved, rejected or suspended")


class ListSellersRequest(PageRequest):
    status: Optional[SellerStatus] = None


class ShopSeller(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    shop_name: str
    description: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    status: SellerStatus
    created_at: datetime


class ShopSellerList(PageInfo):
    items: list[ShopSeller]


# Categories

class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    slug: str = Field(..., min_length=2, max_length=255, pattern=SLUG_PATTERN)
    sort_order: int = 0
    is_active: bool = True


class UpdateCategoryRequest(BaseModel):
    category_id: UUID
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("name", "sort_order", "is_active")
    @classmethod
    def fields_not_null(cls, value):
        return reject_null(value)


class ShopCategory(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    sort_order: int
    is_active: bool


class ShopCategoryList(BaseModel):
    items: list[ShopCategory]


# Products

class CreateProductRequest(BaseModel):
    """Request schema for listing a new product."""

    category_id: Optional[UUID] = None
    name: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: int = Field(..., ge=0)
    compare_price: Optional[int] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    weight_gram: Optional[int] = Field(None, ge=0)
    thumbnail_url: Optional[str] = Field(None, max_length=1024)
    images: list[str] = Field(default_factory=list, max_length=10)
    is_featured: bool = False


class UpdateProductRequest(BaseModel):
    product_id: UUID
    category_id: Optional[UUID] = None
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[int] = Field(None, ge=0)
    compare_price: Optional[int] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    weight_gram: Optional[int] = Field(None, ge=0)
    thumbnail_url: Optional[str] = Field(None, max_length=1024)
    images: Optional[list[str]] = Field(None, max_length=10)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None

    @field_validator("name", "price", "stock", "images", "is_active", "is_featured")
    @classmethod
    def fields_not_null(cls, value):
        return reject_null(value)


class ProductIdRequest(BaseModel):
    product_id: UUID


class ListProductsRequest(PageRequest):
    category_id: Optional[UUID] = None
    search: Optional[str] = Field(None, max_length=100)
    featured_only: bool = False
    seller_id: Optional[UUID] = None


class ShopProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    seller_id: UUID
    category_id: Optional[UUID] = None
    name: str
    slug: str
    description: Optional[str] = None
    price: int
    compare_price: Optional[int] = None
    stock: int
    weight_gram: Optional[int] = None
    thumbnail_url: Optional[str] = None
    images: list[str]
    is_active: bool
    is_featured: bool
    created_at: datetime


class ShopProductList(PageInfo):
    items: list[ShopProduct]


# Orders

class OrderItemInput(BaseModel):
    product_id: UUID
    quantity: int = Field(..., ge=1, le=100)


class CreateOrderRequest(BaseModel):
    """Request schema for checking out a cart."""

    items: list[OrderItemInput] = Field(..., min_length=1, max_length=50)
    shipping_name: str = Field(..., min_length=2, max_length=255)
    shipping_phone: str = Field(..., min_length=8, max_length=32)
    shipping_address: str = Field(..., min_length=5, max_length=1000)
    shipping_city: Optional[str] = Field(None, max_length=100)
    shipping_postal_code: Optional[str] = Field(None, max_length=10)
    notes: Optional[str] = Field(None, max_length=1000)


class UploadPaymentProofRequest(BaseModel):
    order_id: UUID
    payment_proof_url: str = Field(..., min_length=1, max_length=1024)


class UpdateOrderStatusRequest(BaseModel):
    order_id: UUID
    status: ShopOrderStatus
    courier: Optional[str] = Field(None, max_length=50)
    tracking_number: Optional[str] = Field(None, max_length=100)


class OrderIdRequest(BaseModel):
    order_id: UUID


class ListOrdersRequest(PageRequest):
    status: Optional[ShopOrderStatus] = None


class ShopOrderItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: Optional[UUID] = None
    seller_id: UUID
    product_name: str
    product_price: int
    quantity: int
    subtotal: int


class ShopOrder(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    order_code: str
    status: ShopOrderStatus
    total_amount: int
    shipping_name: str
    shipping_phone: str
    shipping_address: str
    shipping_city: Optional[str] = None
    shipping_postal_code: Optional[str] = None
    notes: Optional[str] = None
    payment_proof_url: Optional[str] = None
    paid_at: Optional[datetime] = None
    tracking_number: Optional[str] = None
    courier: Optional[str] = None
    created_at: datetime
    items: list[ShopOrderItem]


class ShopOrderList(PageInfo):
    items: list[ShopOrder]


class TopProduct(BaseModel):
    product_id: Optional[UUID] = None
    product_name: str
    units_sold: int
    revenue: int


class SellerStats(BaseModel):
    seller_id: UUID
    total_revenue: int
    units_sold: int
    order_count: int
    active_products: int
    top_products: list[TopProduct]


class ShopDashboard(BaseModel):
    orders_by_status: dict[str, int]
    total_orders: int
    gross_revenue: int
    pending_sellers: int
    active_products: int


class SellerStatsRequest(BaseModel):
    seller_id: Optional[UUID] = Field(None, description="Admins only; defaults to the caller's shop")
