"""Featured package placements bought with credits."""

import logging
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import acquire_advisory_lock
from ..core.dependencies import CurrentUser
from ..core.exceptions import FeaturedLimitError, InvalidStatusTransitionError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.featured import FeaturedDuration, FeaturedPackage, FeaturedPosition, FeaturedStatus
from ..models.package import Package
from ..models.travel import Travel
from ..schemas.featured import ListTravelFeaturedRequest, PurchaseFeaturedRequest
from ..schemas.setting import FeaturedLimits, FeaturedPricing
from .credit_service import CreditService
from .package_service import lowest_bookable_price
from .settings_service import SettingsService
from .travel_service import TravelService

logger = logging.getLogger(__name__)

DURATION_DAYS = {
    FeaturedDuration.DAILY: 1,
    FeaturedDuration.WEEKLY: 7,
    FeaturedDuration.MONTHLY: 30,
}

DEFAULT_PRIORITY = 10


def base_credits(pricing: FeaturedPricing, duration: FeaturedDuration) -> int:
    return {
        FeaturedDuration.DAILY: pricing.daily_credits,
        FeaturedDuration.WEEKLY: pricing.weekly_credits,
        FeaturedDuration.MONTHLY: pricing.monthly_credits,
    }[duration]


def position_multiplier(pricing: FeaturedPricing, position: FeaturedPosition) -> float:
    return getattr(pricing.positions, position.value)


def calculate_featured_cost(pricing: FeaturedPricing, position: FeaturedPosition, duration: FeaturedDuration) -> int:
    """Credits for a placement: ``ceil(base_credits * multiplier)``."""
    # Decimal keeps e.g. 25 * 1.2 at exactly 30
    cost = Decimal(base_credits(pricing, duration)) * Decimal(str(position_multiplier(pricing, position)))
    return math.ceil(cost)


def position_limit(limits: FeaturedLimits, position: FeaturedPosition) -> Optional[int]:
    """Platform-wide cap for a position; search placements are uncapped."""
    if position == FeaturedPosition.HOME:
        return limits.max_home_total
    if position == FeaturedPosition.CATEGORY:
        return limits.max_category_total
    return None


class FeaturedService:
    """Service for buying, listing and expiring featured placements."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings_service = SettingsService(db)
        self.travel_service = TravelService(db)

    async def quote(self, position: FeaturedPosition, duration: FeaturedDuration) -> dict:
        pricing = await self.settings_service.get_featured_pricing()
        return {
            "position": position,
            "duration": duration,
            "duration_days": DURATION_DAYS[duration],
            "base_credits": base_credits(pricing, duration),
            "multiplier": position_multiplier(pricing, position),
            "credits": calculate_featured_cost(pricing, position, duration),
        }

    async def get_featured_or_raise(self, featured_id: UUID) -> FeaturedPackage:
        featured = await self.db.get(FeaturedPackage, featured_id)
        if featured is None:
            raise NotFoundError(resource_type="featured_package", resource_id=str(featured_id))
        return featured

    async def _count_active(self, now: datetime, **filters) -> int:
        conditions = [
            FeaturedPackage.status == FeaturedStatus.ACTIVE.value,
            FeaturedPackage.end_date > now,
        ]
        for column, value in filters.items():
            conditions.append(getattr(FeaturedPackage, column) == value)
        count = await self.db.scalar(select(func.count()).select_from(FeaturedPackage).where(*conditions))
        return count or 0

    async def purchase(self, user: CurrentUser, request: PurchaseFeaturedRequest) -> FeaturedPackage:
        """
        Spend credits on a featured placement for one of the travel's packages.

        Limits are checked under a lock so concurrent purchases cannot exceed them.

        Raises:
            ValidationError: If the package is not an active package of the travel
            FeaturedLimitError: If the travel or position is at its limit
            InsufficientCreditsError: If the travel cannot afford the placement
        """
        travel = await self.travel_service.get_managed_travel(user, request.travel_id)

        package = await self.db.get(Package, request.package_id)
        if package is None:
            raise NotFoundError(resource_type="package", resource_id=str(request.package_id))
        if package.travel_id != travel.id or not package.is_active:
            raise ValidationError(
                detail="Only active packages of this travel can be featured",
                errors={"package_id": "Must be an active package of the travel"},
            )

        await acquire_advisory_lock(self.db, "featured_packages")

        now = datetime.utcnow()
        limits = await self.settings_service.get_featured_limits()

        travel_active = await self._count_active(now, travel_id=travel.id)
        if travel_active >= limits.max_per_travel:
            raise FeaturedLimitError(limit_name="max_per_travel", limit=limits.max_per_travel, current=travel_active)

        cap = position_limit(limits, request.position)
        if cap is not None:
            position_active = await self._count_active(now, position=request.position.value)
            if position_active >= cap:
                raise FeaturedLimitError(
                    limit_name=f"max_{request.position.value}_total", limit=cap, current=position_active
                )

        pricing = await self.settings_service.get_featured_pricing()
        cost = calculate_featured_cost(pricing, request.position, request.duration)

        await CreditService(self.db).spend(
            travel.id,
            cost,
            package_id=package.id,
            notes=f"Featured {request.position.value} placement ({request.duration.value})",
            commit=False,
        )

        featured = FeaturedPackage(
            package_id=package.id,
            travel_id=travel.id,
            position=request.position.value,
            priority=DEFAULT_PRIORITY,
            credits_used=cost,
            start_date=now,
            end_date=now + timedelta(days=DURATION_DAYS[request.duration]),
            status=FeaturedStatus.ACTIVE.value,
        )
        self.db.add(featured)
        await self.db.commit()

        metrics_collector.record_featured_purchased(request.position.value)
        logger.info(
            "Featured placement purchased",
            extra={
                "featured_id": str(featured.id),
                "travel_id": str(travel.id),
                "package_id": str(package.id),
                "position": featured.position,
                "credits": cost,
                "end_date": featured.end_date.isoformat(),
            }
        )
        return featured

    async def cancel(self, user: CurrentUser, featured_id: UUID) -> FeaturedPackage:
        """Cancel an active placement. Spent credits are not refunded."""
        featured = await self.get_featured_or_raise(featured_id)
        await self.travel_service.get_managed_travel(user, featured.travel_id)

        if featured.status != FeaturedStatus.ACTIVE.value:
            raise InvalidStatusTransitionError(
                resource_type="featured_package",
                current_status=featured.status,
                requested_status=FeaturedStatus.CANCELLED.value,
                allowed=[],
            )

        featured.status = FeaturedStatus.CANCELLED.value
        await self.db.commit()

        logger.info("Featured placement cancelled", extra={"featured_id": str(featured.id)})
        return featured

    async def list_display(self, position: FeaturedPosition, limit: int = 10) -> list[dict]:
        """Storefront placements: live, active package, verified active travel."""
        now = datetime.utcnow()
        stmt = (
            select(FeaturedPackage)
            .join(Package, FeaturedPackage.package_id == Package.id)
            .join(Travel, FeaturedPackage.travel_id == Travel.id)
            .where(
                FeaturedPackage.position == position.value,
                FeaturedPackage.status == FeaturedStatus.ACTIVE.value,
                FeaturedPackage.end_date > now,
                Package.is_active.is_(True),
                Travel.verified.is_(True),
                Travel.is_active.is_(True),
            )
            .options(
                selectinload(FeaturedPackage.package).selectinload(Package.departures),
                selectinload(FeaturedPackage.travel),
            )
            .order_by(FeaturedPackage.priority.desc(), FeaturedPackage.start_date)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)

        today = date.today()
        items = []
        for featured in result.scalars().all():
            package = featured.package
            items.append({
                "id": featured.id,
                "package_id": featured.package_id,
                "travel_id": featured.travel_id,
                "position": featured.position,
                "priority": featured.priority,
                "credits_used": featured.credits_used,
                "start_date": featured.start_date,
                "end_date": featured.end_date,
                "status": featured.status,
                "created_at": featured.created_at,
                "package_name": package.name,
                "package_type": package.package_type,
                "duration_days": package.duration_days,
                "hotel_star": package.hotel_star,
                "lowest_price": lowest_bookable_price(package.departures, today),
                "travel": featured.travel,
            })
        return items

    async def list_travel_featured(self, user: CurrentUser, request: ListTravelFeaturedRequest) -> list[FeaturedPackage]:
        await self.travel_service.get_managed_travel(user, request.travel_id)

        conditions = [FeaturedPackage.travel_id == request.travel_id]
        if request.status:
            conditions.append(FeaturedPackage.status == request.status.value)

        result = await self.db.execute(
            select(FeaturedPackage).where(*conditions).order_by(FeaturedPackage.created_at.desc())
        )
        return list(result.scalars().all())

    async def expire_due(self, now: Optional[datetime] = None) -> int:
        """Mark active placements whose end date has passed as expired."""
        now = now or datetime.utcnow()
        result = await self.db.execute(
            update(FeaturedPackage)
            .where(
                FeaturedPackage.status == FeaturedStatus.ACTIVE.value,
                FeaturedPackage.end_date <= now,
            )
            .values(status=FeaturedStatus.EXPIRED.value, updated_at=now)
        )
        await self.db.commit()

        expired = result.rowcount or 0
        if expired:
            metrics_collector.record_featured_expired(expired)

        for position in FeaturedPosition:
            metrics_collector.set_featured_active(
                position.value, await self._count_active(now, position=position.value)
            )
        return expired

    async def stats(self) -> dict:
        now = datetime.utcnow()
        total = await self.db.scalar(select(func.count()).select_from(FeaturedPackage))
        credits = await self.db.scalar(select(func.coalesce(func.sum(FeaturedPackage.credits_used), 0)))

        by_position = {
            position.value: await self._count_active(now, position=position.value)
            for position in FeaturedPosition
        }
        return {
            "total": total or 0,
            "active": sum(by_position.values()),
            "active_by_position": by_position,
            "total_credits_used": int(credits or 0),
        }
