"""Agent membership plans and membership lifecycle service."""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import lock_row
from ..core.exceptions import ConflictError, InvalidStatusTransitionError, NotFoundError, ValidationError
from ..models.membership import Membership, MembershipStatus
from ..models.package import Package
from ..schemas.membership import MembershipPlan, PlanId
from .credit_service import CreditService

logger = logging.getLogger(__name__)

PRO_FEATURES = [
    "website",
    "priority_search",
    "chat",
    "lead_stats",
]

PREMIUM_FEATURES = PRO_FEATURES + [
    "verified_badge",
    "top_listing",
    "jamaah_data",
    "priority_support",
    "advanced_analytics",
]

MEMBERSHIP_PLANS: dict[PlanId, MembershipPlan] = {
    PlanId.FREE: MembershipPlan(
        id=PlanId.FREE, name="Free", price=0, max_packages=3, monthly_credits=0, features=[]
    ),
    PlanId.PRO: MembershipPlan(
        id=PlanId.PRO, name="Pro", price=2_000_000, max_packages=5, monthly_credits=4,
        features=PRO_FEATURES,
    ),
    PlanId.PREMIUM: MembershipPlan(
        id=PlanId.PREMIUM, name="Premium", price=7_500_000, max_packages=10, monthly_credits=10,
        features=PREMIUM_FEATURES,
    ),
}

DEFAULT_MEMBERSHIP_DAYS = 30


def get_plan(plan_id: Optional[str]) -> MembershipPlan:
    """Look up a plan by id; unknown ids resolve to the free plan."""
    try:
        return MEMBERSHIP_PLANS[PlanId(plan_id)]
    except ValueError:
        return MEMBERSHIP_PLANS[PlanId.FREE]


def days_remaining(end_date: Optional[datetime], now: datetime) -> int:
    """Whole days left until ``end_date``, rounded up and never negative."""
    if end_date is None:
        return 0
    seconds = (end_date - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


class MembershipService:
    """Service for agent membership operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def list_plans(self) -> list[MembershipPlan]:
        return list(MEMBERSHIP_PLANS.values())

    async def get_membership_or_raise(self, membership_id: UUID, for_update: bool = False) -> Membership:
        if for_update:
            membership = await lock_row(self.db, Membership, membership_id)
        else:
            membership = await self.db.get(Membership, membership_id)
        if membership is None:
            raise NotFoundError(resource_type="membership", resource_id=str(membership_id))
        return membership

    async def get_latest_membership(self, travel_id: UUID) -> Optional[Membership]:
        stmt = (
            select(Membership)
            .where(Membership.travel_id == travel_id)
            .order_by(Membership.created_at.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_membership(self, travel_id: UUID, now: Optional[datetime] = None) -> Optional[Membership]:
        now = now or datetime.utcnow()
        stmt = (
            select(Membership)
            .where(
                Membership.travel_id == travel_id,
                Membership.status == MembershipStatus.ACTIVE.value,
                Membership.end_date > now,
            )
            .order_by(Membership.end_date.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_effective_plan(self, travel_id: UUID) -> MembershipPlan:
        active = await self.get_active_membership(travel_id)
        return get_plan(active.plan_type if active else None)

    async def count_active_packages(self, travel_id: UUID) -> int:
        count = await self.db.scalar(
            select(func.count())
            .select_from(Package)
            .where(Package.travel_id == travel_id, Package.is_active.is_(True))
        )
        return count or 0

    async def current_membership(self, travel_id: UUID) -> dict:
        """Effective plan, latest request and remaining days for a travel."""
        now = datetime.utcnow()
        active = await self.get_active_membership(travel_id, now)
        latest = await self.get_latest_membership(travel_id)
        plan = get_plan(active.plan_type if active else None)

        return {
            "travel_id": travel_id,
            "plan": plan,
            "latest": latest,
            "is_pro": plan.id in (PlanId.PRO, PlanId.PREMIUM),
            "is_premium": plan.id == PlanId.PREMIUM,
            "days_remaining": days_remaining(active.end_date, now) if active else 0,
            "active_packages": await self.count_active_packages(travel_id),
        }

    async def request_membership(
        self,
        travel_id: UUID,
        plan_id: PlanId,
        payment_proof_url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Membership:
        """
        Submit a paid plan upgrade request for admin review.

        Raises:
            ValidationError: If the free plan is requested
            ConflictError: If the travel already has a pending request
        """
        plan = MEMBERSHIP_PLANS[plan_id]
        if plan.price == 0:
            raise ValidationError(detail="The free plan does not need to be requested")

        pending = await self.db.scalar(
            select(func.count())
            .select_from(Membership)
            .where(Membership.travel_id == travel_id, Membership.status == MembershipStatus.PENDING.value)
        )
        if pending:
            raise ConflictError(detail="A membership request is already awaiting review")

        membership = Membership(
            travel_id=travel_id,
            plan_type=plan.id.value,
            status=MembershipStatus.PENDING.value,
            amount=plan.price,
            payment_proof_url=payment_proof_url,
            notes=notes,
        )
        self.db.add(membership)
        await self.db.commit()

        logger.info(
            "Membership requested",
            extra={"membership_id": str(membership.id), "travel_id": str(travel_id), "plan": plan.id.value}
        )
        return membership

    async def review_membership(
        self,
        membership_id: UUID,
        approve: bool,
        reviewer_id: str,
        notes: Optional[str] = None,
        duration_days: int = DEFAULT_MEMBERSHIP_DAYS,
    ) -> Membership:
        """
        Approve or reject a pending membership.

        Approval activates the plan from now for ``duration_days``, expires any
        other active membership of the travel and grants the plan's monthly
        credits as a bonus.

        Raises:
            InvalidStatusTransitionError: If the membership is not pending
        """
        membership = await self.get_membership_or_raise(membership_id, for_update=True)
        target = MembershipStatus.ACTIVE if approve else MembershipStatus.REJECTED

        if membership.status != MembershipStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                resource_type="membership",
                current_status=membership.status,
                requested_status=target.value,
                allowed=[],
            )

        membership.status = target.value
        membership.reviewed_by = reviewer_id
        if notes is not None:
            membership.notes = notes

        if approve:
            now = datetime.utcnow()
            await self.db.execute(
                update(Membership)
                .where(
                    Membership.travel_id == membership.travel_id,
                    Membership.status == MembershipStatus.ACTIVE.value,
                    Membership.id != membership.id,
                )
                .values(status=MembershipStatus.EXPIRED.value, updated_at=now)
            )
            membership.start_date = now
            membership.end_date = now + timedelta(days=duration_days)

            plan = get_plan(membership.plan_type)
            if plan.monthly_credits > 0:
                await CreditService(self.db).grant_bonus(
                    membership.travel_id,
                    plan.monthly_credits,
                    notes=f"{plan.name} membership credits",
                    granted_by=reviewer_id,
                    commit=False,
                )

        await self.db.commit()

        logger.info(
            "Membership reviewed",
            extra={
                "membership_id": str(membership.id),
                "travel_id": str(membership.travel_id),
                "status": membership.status,
                "reviewer": reviewer_id,
            }
        )
        return membership

    async def list_memberships(
        self, status: Optional[str] = None, limit: int = 20, offset: int = 0
    ) -> tuple[list[Membership], int]:
        conditions = [Membership.status == status] if status else []
        total = await self.db.scalar(select(func.count()).select_from(Membership).where(*conditions))
        stmt = (
            select(Membership)
            .where(*conditions)
            .order_by(Membership.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def expire_due(self, now: Optional[datetime] = None) -> int:
        """Mark active memberships whose end date has passed as expired."""
        now = now or datetime.utcnow()
        result = await self.db.execute(
            update(Membership)
            .where(Membership.status == MembershipStatus.ACTIVE.value, Membership.end_date <= now)
            .values(status=MembershipStatus.EXPIRED.value, updated_at=now)
        )
        await self.db.commit()
        return result.rowcount or 0
