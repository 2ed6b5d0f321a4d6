"""Shop catalogue service: sellers, categories and products."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import acquire_advisory_lock
from ..core.dependencies import CurrentUser
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from ..models.shop import SellerStatus, ShopCategory, ShopProduct, ShopSeller
from ..schemas.shop import (
    ApplySellerRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    ListProductsRequest,
    ReviewSellerRequest,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from .travel_service import slugify

logger = logging.getLogger(__name__)

SELLER_TRANSITIONS: dict[SellerStatus, set[SellerStatus]] = {
    SellerStatus.PENDING: {SellerStatus.APPROVED, SellerStatus.REJECTED},
    SellerStatus.APPROVED: {SellerStatus.SUSPENDED},
    SellerStatus.SUSPENDED: {SellerStatus.APPROVED},
    SellerStatus.REJECTED: {SellerStatus.APPROVED},
}


class ShopService:
    """Service for the seller catalogue."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Sellers

    async def get_seller_by_user(self, user_id: str) -> Optional[ShopSeller]:
        result = await self.db.execute(select(ShopSeller).where(ShopSeller.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_seller_or_raise(self, seller_id: UUID) -> ShopSeller:
        seller = await self.db.get(ShopSeller, seller_id)
        if seller is None:
            raise NotFoundError(resource_type="seller", resource_id=str(seller_id))
        return seller

    async def get_approved_seller(self, user: CurrentUser) -> ShopSeller:
        """
        The caller's seller profile, which must be approved.

        Raises:
            AuthorizationError: If the user is not an approved seller
        """
        seller = await self.get_seller_by_user(user.user_id)
        if seller is None or seller.status != SellerStatus.APPROVED.value:
            raise AuthorizationError(detail="An approved seller account is required")
        return seller

    async def apply_seller(self, user: CurrentUser, request: ApplySellerRequest) -> ShopSeller:
        """
        Register the user as a seller pending review. Rejected applicants may re-apply.

        Raises:
            ConflictError: If the user already has a pending or active seller account
        """
        seller = await self.get_seller_by_user(user.user_id)
        if seller is not None and seller.status != SellerStatus.REJECTED.value:
            raise ConflictError(
                detail="You already have a seller account",
                conflicting_resource={"seller_id": str(seller.id), "status": seller.status},
            )

        if seller is None:
            seller = ShopSeller(user_id=user.user_id)
            self.db.add(seller)

        for field, value in request.model_dump().items():
            setattr(seller, field, value)
        seller.status = SellerStatus.PENDING.value

        await self.db.commit()

        logger.info("Seller application submitted", extra={"seller_id": str(seller.id), "user_id": user.user_id})
        return seller

    async def review_seller(self, request: ReviewSellerRequest) -> ShopSeller:
        seller = await self.get_seller_or_raise(request.seller_id)
        current = SellerStatus(seller.status)
        allowed = SELLER_TRANSITIONS[current]

        if request.status not in allowed:
            raise InvalidStatusTransitionError(
                resource_type="seller",
                current_status=current.value,
                requested_status=request.status.value,
                allowed=sorted(s.value for s in allowed),
            )

        seller.status = request.status.value
        await self.db.commit()

        logger.info(
            "Seller reviewed",
            extra={"seller_id": str(seller.id), "from_status": current.value, "to_status": seller.status}
        )
        return seller

    async def list_sellers(
        self, status: Optional[str] = None, limit: int = 20, offset: int = 0
    ) -> tuple[list[ShopSeller], int]:
        conditions = [ShopSeller.status == status] if status else []
        total = await self.db.scalar(select(func.count()).select_from(ShopSeller).where(*conditions))
        result = await self.db.execute(
            select(ShopSeller)
            .where(*conditions)
            .order_by(ShopSeller.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total or 0

    # Categories

    async def get_category_or_raise(self, category_id: UUID) -> ShopCategory:
        category = await self.db.get(ShopCategory, category_id)
        if category is None:
            raise NotFoundError(resource_type="shop_category", resource_id=str(category_id))
        return category

    async def create_category(self, request: CreateCategoryRequest) -> ShopCategory:
        existing = await self.db.scalar(
            select(func.count()).select_from(ShopCategory).where(ShopCategory.slug == request.slug)
        )
        if existing:
            raise ConflictError(
                detail=f"Category slug '{request.slug}' is already in use",
                conflicting_resource={"slug": request.slug},
            )

        category = ShopCategory(**request.model_dump())
        self.db.add(category)
        await self.db.commit()

        logger.info("Shop category created", extra={"category_id": str(category.id), "slug": category.slug})
        return category

    async def update_category(self, request: UpdateCategoryRequest) -> ShopCategory:
        category = await self.get_category_or_raise(request.category_id)
        for field, value in request.model_dump(exclude_unset=True, exclude={"category_id"}).items():
            setattr(category, field, value)
        await self.db.commit()
        return category

    async def list_categories(self, include_inactive: bool = False) -> list[ShopCategory]:
        stmt = select(ShopCategory).order_by(ShopCategory.sort_order, ShopCategory.name)
        if not include_inactive:
            stmt = stmt.where(ShopCategory.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # Products

    async def get_product_or_raise(self, product_id: UUID, for_update: bool = False) -> ShopProduct:
        stmt = select(ShopProduct).where(ShopProduct.id == product_id)
        if for_update:
            await acquire_advisory_lock(self.db, f"shop_product:{product_id}")
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError(resource_type="product", resource_id=str(product_id))
        return product

    async def get_public_product(self, product_id: UUID) -> ShopProduct:
        product = await self.get_product_or_raise(product_id)
        if not product.is_active:
            raise NotFoundError(resource_type="product", resource_id=str(product_id))
        return product

    async def _get_own_product(self, user: CurrentUser, product_id: UUID) -> ShopProduct:
        product = await self.get_product_or_raise(product_id)
        if user.is_admin:
            return product
        seller = await self.get_approved_seller(user)
        if product.seller_id != seller.id:
            raise AuthorizationError(detail="You can only manage your own products")
        return product

    async def _check_category(self, category_id: Optional[UUID]) -> None:
        if category_id is None:
            return
        category = await self.db.get(ShopCategory, category_id)
        if category is None or not category.is_active:
            raise ValidationError(
                detail="Unknown or inactive category",
                errors={"category_id": "Must be an active shop category"},
            )

    async def create_product(self, user: CurrentUser, request: CreateProductRequest) -> ShopProduct:
        seller = await self.get_approved_seller(user)
        await self._check_category(request.category_id)

        product = ShopProduct(
            seller_id=seller.id,
            slug=slugify(request.name),
            is_active=True,
            **request.model_dump(),
        )
        self.db.add(product)
        await self.db.commit()

        logger.info(
            "Product created",
            extra={"product_id": str(product.id), "seller_id": str(seller.id), "stock": product.stock}
        )
        return product

    async def update_product(self, user: CurrentUser, request: UpdateProductRequest) -> ShopProduct:
        product = await self._get_own_product(user, request.product_id)

        changes = request.model_dump(exclude_unset=True, exclude={"product_id"})
        if "category_id" in changes:
            await self._check_category(changes["category_id"])
        if "name" in changes:
            product.slug = slugify(changes["name"])

        for field, value in changes.items():
            setattr(product, field, value)
        await self.db.commit()

        logger.info("Product updated", extra={"product_id": str(product.id), "fields": sorted(changes)})
        return product

    async def deactivate_product(self, user: CurrentUser, product_id: UUID) -> ShopProduct:
        product = await self._get_own_product(user, product_id)
        product.is_active = False
        await self.db.commit()

        logger.info("Product deactivated", extra={"product_id": str(product_id)})
        return product

    async def list_products(self, request: ListProductsRequest) -> tuple[list[ShopProduct], int]:
        """Public catalogue: active products of approved sellers."""
        conditions = [
            ShopProduct.is_active.is_(True),
            ShopSeller.status == SellerStatus.APPROVED.value,
        ]
        if request.category_id:
            conditions.append(ShopProduct.category_id == request.category_id)
        if request.seller_id:
            conditions.append(ShopProduct.seller_id == request.seller_id)
        if request.featured_only:
            conditions.append(ShopProduct.is_featured.is_(True))
        if request.search:
            pattern = f"%{request.search}%"
            conditions.append(or_(ShopProduct.name.ilike(pattern), ShopProduct.description.ilike(pattern)))

        base = select(ShopProduct).join(ShopSeller, ShopProduct.seller_id == ShopSeller.id).where(*conditions)
        total = await self.db.scalar(select(func.count()).select_from(base.subquery()))
        result = await self.db.execute(
            base.order_by(ShopProduct.is_featured.desc(), ShopProduct.created_at.desc())
            .limit(request.limit)
            .offset(request.offset)
        )
        return list(result.scalars().all()), total or 0

    async def list_seller_products(self, user: CurrentUser) -> list[ShopProduct]:
        seller = await self.get_approved_seller(user)
        result = await self.db.execute(
            select(ShopProduct).where(ShopProduct.seller_id == seller.id).order_by(ShopProduct.created_at.desc())
        )
        return list(result.scalars().all())
