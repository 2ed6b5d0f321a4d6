"""Shop order service: checkout, payment proof and fulfilment."""

import logging
import secrets
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import distinct, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import acquire_advisory_lock
from ..core.dependencies import CurrentUser
from ..core.exceptions import (
    AuthorizationError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.shop import SellerStatus, ShopOrder, ShopOrderItem, ShopOrderStatus, ShopProduct, ShopSeller
from ..schemas.shop import CreateOrderRequest, ListOrdersRequest, UpdateOrderStatusRequest, UploadPaymentProofRequest
from .booking_service import BOOKING_CODE_ALPHABET
from .shop_service import ShopService

logger = logging.getLogger(__name__)

ORDER_CODE_PREFIX = "ORD-"
ORDER_CODE_LENGTH = 8

ORDER_TRANSITIONS: dict[ShopOrderStatus, set[ShopOrderStatus]] = {
    ShopOrderStatus.PENDING: {ShopOrderStatus.PAID, ShopOrderStatus.CANCELLED},
    ShopOrderStatus.PAID: {ShopOrderStatus.PROCESSING, ShopOrderStatus.CANCELLED},
    ShopOrderStatus.PROCESSING: {ShopOrderStatus.SHIPPED, ShopOrderStatus.CANCELLED},
    ShopOrderStatus.SHIPPED: {ShopOrderStatus.DELIVERED},
    ShopOrderStatus.DELIVERED: set(),
    ShopOrderStatus.CANCELLED: set(),
}

# Orders whose items count as sold
REVENUE_STATUSES = (
    ShopOrderStatus.PAID.value,
    ShopOrderStatus.PROCESSING.value,
    ShopOrderStatus.SHIPPED.value,
    ShopOrderStatus.DELIVERED.value,
)

TOP_PRODUCTS_LIMIT = 5


def generate_order_code() -> str:
    return ORDER_CODE_PREFIX + "".join(secrets.choice(BOOKING_CODE_ALPHABET) for _ in range(ORDER_CODE_LENGTH))


class ShopOrderService:
    """Service for shop orders."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.shop_service = ShopService(db)

    def _select_order(self):
        return (
            select(ShopOrder)
            .options(selectinload(ShopOrder.items))
            .execution_options(populate_existing=True)
        )

    async def get_order_or_raise(self, order_id: UUID, for_update: bool = False) -> ShopOrder:
        stmt = self._select_order().where(ShopOrder.id == order_id)
        if for_update:
            await acquire_advisory_lock(self.db, f"shop_order:{order_id}")
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError(resource_type="order", resource_id=str(order_id))
        return order

    async def _lock_product(self, product_id: UUID) -> ShopProduct:
        return await self.shop_service.get_product_or_raise(product_id, for_update=True)

    async def _new_order_code(self) -> str:
        while True:
            code = generate_order_code()
            taken = await self.db.scalar(
                select(func.count()).select_from(ShopOrder).where(ShopOrder.order_code == code)
            )
            if not taken:
                return code

    async def create_order(self, user: CurrentUser, request: CreateOrderRequest) -> ShopOrder:
        """
        Check out a cart.

        Prices are taken from the products at checkout and stock is decremented
        under row locks. Products are locked in id order so concurrent
        checkouts cannot deadlock.

        Raises:
            ValidationError: If a product is not for sale
            InsufficientStockError: If a product has less stock than requested
        """
        quantities: dict[UUID, int] = {}
        for item in request.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        products: dict[UUID, ShopProduct] = {}
        for product_id in sorted(quantities, key=str):
            product = await self._lock_product(product_id)
            seller = await self.db.get(ShopSeller, product.seller_id)
            if not product.is_active or seller is None or seller.status != SellerStatus.APPROVED.value:
                raise ValidationError(
                    detail=f"Product '{product.name}' is not available",
                    errors={"items": f"Product {product_id} is not for sale"},
                )
            if product.stock < quantities[product_id]:
                logger.warning(
                    "Order rejected - insufficient stock",
                    extra={
                        "product_id": str(product_id),
                        "requested": quantities[product_id],
                        "stock": product.stock,
                    }
                )
                raise InsufficientStockError(
                    product_id=str(product_id),
                    requested_quantity=quantities[product_id],
                    available_quantity=product.stock,
                )
            products[product_id] = product

        items = []
        for product_id, quantity in quantities.items():
            product = products[product_id]
            product.stock -= quantity
            items.append(
                ShopOrderItem(
                    product_id=product.id,
                    seller_id=product.seller_id,
                    product_name=product.name,
                    product_price=product.price,
                    quantity=quantity,
                    subtotal=product.price * quantity,
                )
            )

        order = ShopOrder(
            user_id=user.user_id,
            order_code=await self._new_order_code(),
            status=ShopOrderStatus.PENDING.value,
            total_amount=sum(item.subtotal for item in items),
            shipping_name=request.shipping_name,
            shipping_phone=request.shipping_phone,
            shipping_address=request.shipping_address,
            shipping_city=request.shipping_city,
            shipping_postal_code=request.shipping_postal_code,
            notes=request.notes,
            items=items,
        )
        self.db.add(order)
        await self.db.commit()

        metrics_collector.record_shop_order_created()
        logger.info(
            "Shop order created",
            extra={
                "order_id": str(order.id),
                "order_code": order.order_code,
                "items": len(items),
                "total_amount": order.total_amount,
            }
        )
        return await self.get_order_or_raise(order.id)

    async def upload_payment_proof(self, user: CurrentUser, request: UploadPaymentProofRequest) -> ShopOrder:
        """Attach a transfer receipt to a pending order, marking it paid."""
        order = await self.get_order_or_raise(request.order_id, for_update=True)
        if order.user_id != user.user_id:
            raise AuthorizationError(detail="You can only pay for your own orders")

        if order.status != ShopOrderStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                resource_type="order",
                current_status=order.status,
                requested_status=ShopOrderStatus.PAID.value,
                allowed=[],
            )

        order.payment_proof_url = request.payment_proof_url
        order.status = ShopOrderStatus.PAID.value
        order.paid_at = datetime.utcnow()
        await self.db.commit()

        logger.info("Order payment proof uploaded", extra={"order_id": str(order.id)})
        return await self.get_order_or_raise(order.id)

    async def _is_order_seller(self, user: CurrentUser, order: ShopOrder) -> bool:
        seller = await self.shop_service.get_seller_by_user(user.user_id)
        return seller is not None and any(item.seller_id == seller.id for item in order.items)

    async def update_order_status(self, user: CurrentUser, request: UpdateOrderStatusRequest) -> ShopOrder:
        """
        Move an order through fulfilment. Cancelling puts the stock back.

        The order row is locked first, so two cancels cannot both restock it.

        Raises:
            AuthorizationError: If the user sells none of the order's items
            InvalidStatusTransitionError: If the transition is not allowed
            ValidationError: If shipping without courier and tracking number
        """
        order = await self.get_order_or_raise(request.order_id, for_update=True)
        if not user.is_admin and not await self._is_order_seller(user, order):
            raise AuthorizationError(detail="Only sellers in this order can update it")

        current = ShopOrderStatus(order.status)
        allowed = ORDER_TRANSITIONS[current]
        if request.status not in allowed:
            raise InvalidStatusTransitionError(
                resource_type="order",
                current_status=current.value,
                requested_status=request.status.value,
                allowed=sorted(s.value for s in allowed),
            )

        if request.courier is not None:
            order.courier = request.courier
        if request.tracking_number is not None:
            order.tracking_number = request.tracking_number

        if request.status == ShopOrderStatus.SHIPPED and not (order.courier and order.tracking_number):
            raise ValidationError(
                detail="Courier and tracking number are required to ship an order",
                errors={"tracking_number": "Required when status is shipped"},
            )

        if request.status == ShopOrderStatus.PAID and order.paid_at is None:
            order.paid_at = datetime.utcnow()

        if request.status == ShopOrderStatus.CANCELLED:
            for item in sorted(order.items, key=lambda i: str(i.product_id)):
                if item.product_id is None:
                    continue
                product = await self._lock_product(item.product_id)
                product.stock += item.quantity

        order.status = request.status.value
        await self.db.commit()

        logger.info(
            "Order status updated",
            extra={
                "order_id": str(order.id),
                "from_status": current.value,
                "to_status": order.status,
                "updated_by": user.user_id,
            }
        )
        return await self.get_order_or_raise(order.id)

    async def get_order(self, user: CurrentUser, order_id: UUID) -> ShopOrder:
        order = await self.get_order_or_raise(order_id)
        if order.user_id != user.user_id and not user.is_admin and not await self._is_order_seller(user, order):
            raise NotFoundError(resource_type="order", resource_id=str(order_id))
        return order

    async def _list(self, conditions: list, request: ListOrdersRequest) -> tuple[list[ShopOrder], int]:
        if request.status:
            conditions = conditions + [ShopOrder.status == request.status.value]
        total = await self.db.scalar(select(func.count()).select_from(ShopOrder).where(*conditions))
        result = await self.db.execute(
            self._select_order()
            .where(*conditions)
            .order_by(ShopOrder.created_at.desc())
            .limit(request.limit)
            .offset(request.offset)
        )
        return list(result.scalars().all()), total or 0

    async def list_my_orders(self, user: CurrentUser, request: ListOrdersRequest) -> tuple[list[ShopOrder], int]:
        return await self._list([ShopOrder.user_id == user.user_id], request)

    async def list_seller_orders(self, user: CurrentUser, request: ListOrdersRequest) -> tuple[list[ShopOrder], int]:
        seller = await self.shop_service.get_approved_seller(user)
        has_item = exists().where(ShopOrderItem.order_id == ShopOrder.id, ShopOrderItem.seller_id == seller.id)
        return await self._list([has_item], request)

    async def seller_stats(self, seller_id: UUID) -> dict:
        """Revenue, units, order count and best sellers over paid-or-later orders."""
        sold = (
            ShopOrderItem.seller_id == seller_id,
            ShopOrder.status.in_(REVENUE_STATUSES),
        )
        totals = (
            await self.db.execute(
                select(
                    func.coalesce(func.sum(ShopOrderItem.subtotal), 0),
                    func.coalesce(func.sum(ShopOrderItem.quantity), 0),
                    func.count(distinct(ShopOrderItem.order_id)),
                )
                .join(ShopOrder, ShopOrderItem.order_id == ShopOrder.id)
                .where(*sold)
            )
        ).one()

        revenue = func.sum(ShopOrderItem.subtotal)
        top_rows = await self.db.execute(
            select(
                ShopOrderItem.product_id,
                ShopOrderItem.product_name,
                func.sum(ShopOrderItem.quantity),
                revenue,
            )
            .join(ShopOrder, ShopOrderItem.order_id == ShopOrder.id)
            .where(*sold)
            .group_by(ShopOrderItem.product_id, ShopOrderItem.product_name)
            .order_by(revenue.desc())
            .limit(TOP_PRODUCTS_LIMIT)
        )

        active_products = await self.db.scalar(
            select(func.count())
            .select_from(ShopProduct)
            .where(ShopProduct.seller_id == seller_id, ShopProduct.is_active.is_(True))
        )

        return {
            "seller_id": seller_id,
            "total_revenue": int(totals[0]),
            "units_sold": int(totals[1]),
            "order_count": totals[2],
            "active_products": active_products or 0,
            "top_products": [
                {
                    "product_id": product_id,
                    "product_name": name,
                    "units_sold": int(units),
                    "revenue": int(product_revenue),
                }
                for product_id, name, units, product_revenue in top_rows.all()
            ],
        }

    async def shop_dashboard(self) -> dict:
        rows = await self.db.execute(select(ShopOrder.status, func.count()).group_by(ShopOrder.status))
        by_status = {status.value: 0 for status in ShopOrderStatus}
        by_status.update({status: count for status, count in rows.all()})

        gross = await self.db.scalar(
            select(func.coalesce(func.sum(ShopOrder.total_amount), 0))
            .where(ShopOrder.status.in_(REVENUE_STATUSES))
        )
        pending_sellers = await self.db.scalar(
            select(func.count()).select_from(ShopSeller).where(ShopSeller.status == SellerStatus.PENDING.value)
        )
        active_products = await self.db.scalar(
            select(func.count()).select_from(ShopProduct).where(ShopProduct.is_active.is_(True))
        )

        return {
            "orders_by_status": by_status,
            "total_orders": sum(by_status.values()),
            "gross_revenue": int(gross or 0),
            "pending_sellers": pending_sellers or 0,
            "active_products": active_products or 0,
        }

    async def get_seller_id_for(self, user: CurrentUser, seller_id: Optional[UUID]) -> UUID:
        """Seller whose stats the caller may see: their own, or any for admins."""
        if seller_id is not None and user.is_admin:
            await self.shop_service.get_seller_or_raise(seller_id)
            return seller_id
        seller = await self.shop_service.get_approved_seller(user)
        return seller.id
