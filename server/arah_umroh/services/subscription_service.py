"""Pilgrim premium subscription service."""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import acquire_advisory_lock
from ..core.exceptions import ConflictError, InvalidStatusTransitionError, NotFoundError, ValidationError
from ..models.subscription import SubscriptionPlan, SubscriptionStatus, UserSubscription
from ..schemas.subscription import (
    CreateSubscriptionPlanRequest,
    RequestSubscriptionRequest,
    UpdateSubscriptionPlanRequest,
    VerifySubscriptionRequest,
)

logger = logging.getLogger(__name__)

SUBSCRIPTION_DAYS = 365


def is_subscription_active(subscription: Optional[UserSubscription], now: Optional[datetime] = None) -> bool:
    if subscription is None or subscription.status != SubscriptionStatus.ACTIVE.value:
        return False
    now = now or datetime.utcnow()
    return subscription.end_date is not None and subscription.end_date > now


class SubscriptionService:
    """Service for premium plans and pilgrim subscriptions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_plans(self, include_inactive: bool = False) -> list[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).order_by(SubscriptionPlan.price_yearly, SubscriptionPlan.name)
        if not include_inactive:
            stmt = stmt.where(SubscriptionPlan.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_plan_or_raise(self, plan_id: UUID) -> SubscriptionPlan:
        plan = await self.db.get(SubscriptionPlan, plan_id)
        if plan is None:
            raise NotFoundError(resource_type="subscription_plan", resource_id=str(plan_id))
        return plan

    async def create_plan(self, request: CreateSubscriptionPlanRequest) -> SubscriptionPlan:
        plan = SubscriptionPlan(**request.model_dump())
        self.db.add(plan)
        await self.db.commit()

        logger.info("Subscription plan created", extra={"plan_id": str(plan.id), "name": plan.name})
        return plan

    async def update_plan(self, request: UpdateSubscriptionPlanRequest) -> SubscriptionPlan:
        plan = await self.get_plan_or_raise(request.plan_id)
        changes = request.model_dump(exclude_unset=True, exclude={"plan_id"})
        for field, value in changes.items():
            setattr(plan, field, value)
        await self.db.commit()

        logger.info("Subscription plan updated", extra={"plan_id": str(plan.id), "fields": sorted(changes)})
        return plan

    def _select_subscription(self):
        return (
            select(UserSubscription)
            .options(selectinload(UserSubscription.plan))
            .execution_options(populate_existing=True)
        )

    async def get_user_subscription(self, user_id: str) -> Optional[UserSubscription]:
        result = await self.db.execute(self._select_subscription().where(UserSubscription.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_subscription_or_raise(self, subscription_id: UUID, for_update: bool = False) -> UserSubscription:
        stmt = self._select_subscription().where(UserSubscription.id == subscription_id)
        if for_update:
            await acquire_advisory_lock(self.db, f"{UserSubscription.__tablename__}:{subscription_id}")
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        subscription = result.scalar_one_or_none()
        if subscription is None:
            raise NotFoundError(resource_type="subscription", resource_id=str(subscription_id))
        return subscription

    async def is_premium(self, user_id: str) -> bool:
        return is_subscription_active(await self.get_user_subscription(user_id))

    async def request_subscription(self, user_id: str, request: RequestSubscriptionRequest) -> UserSubscription:
        """
        Create or replace the user's subscription request, leaving it pending review.

        Raises:
            ValidationError: If the plan is not on sale
            ConflictError: If the user already has premium in effect
        """
        plan = await self.get_plan_or_raise(request.plan_id)
        if not plan.is_active:
            raise ValidationError(detail="This plan is no longer available")

        subscription = await self.get_user_subscription(user_id)
        if is_subscription_active(subscription):
            raise ConflictError(
                detail="Premium is already active until the current period ends",
                conflicting_resource={"subscription_id": str(subscription.id)},
            )

        amount = request.payment_amount if request.payment_amount is not None else plan.price_yearly
        if subscription is None:
            subscription = UserSubscription(user_id=user_id)
            self.db.add(subscription)

        subscription.plan_id = plan.id
        subscription.status = SubscriptionStatus.PENDING.value
        subscription.payment_proof_url = request.payment_proof_url
        subscription.payment_amount = amount
        subscription.payment_date = datetime.utcnow()
        subscription.verified_by = None
        subscription.verified_at = None
        subscription.start_date = None
        subscription.end_date = None
        subscription.admin_notes = None

        await self.db.commit()

        logger.info(
            "Subscription requested",
            extra={"subscription_id": str(subscription.id), "user_id": user_id, "plan_id": str(plan.id)}
        )
        return await self.get_subscription_or_raise(subscription.id)

    async def verify_subscription(self, request: VerifySubscriptionRequest, admin_id: str) -> UserSubscription:
        """
        Approve or reject a pending subscription. Approval starts a one-year period.

        Raises:
            InvalidStatusTransitionError: If the subscription is not pending
        """
        subscription = await self.get_subscription_or_raise(request.subscription_id, for_update=True)
        target = SubscriptionStatus.ACTIVE if request.approve else SubscriptionStatus.REJECTED

        if subscription.status != SubscriptionStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                resource_type="subscription",
                current_status=subscription.status,
                requested_status=target.value,
                allowed=[],
            )

        now = datetime.utcnow()
        subscription.status = target.value
        subscription.verified_by = admin_id
        subscription.verified_at = now
        subscription.admin_notes = request.admin_notes
        if request.approve:
            subscription.start_date = now
            subscription.end_date = now + timedelta(days=SUBSCRIPTION_DAYS)

        await self.db.commit()

        logger.info(
            "Subscription verified",
            extra={
                "subscription_id": str(subscription.id),
                "user_id": subscription.user_id,
                "status": subscription.status,
                "verified_by": admin_id,
            }
        )
        return subscription

    async def list_subscriptions(
        self, status: Optional[str] = None, limit: int = 20, offset: int = 0
    ) -> tuple[list[UserSubscription], int]:
        conditions = [UserSubscription.status == status] if status else []
        total = await self.db.scalar(select(func.count()).select_from(UserSubscription).where(*conditions))
        stmt = (
            select(UserSubscription)
            .where(*conditions)
            .options(selectinload(UserSubscription.plan))
            .order_by(UserSubscription.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def expire_due(self, now: Optional[datetime] = None) -> int:
        """Mark active subscriptions whose end date has passed as expired."""
        now = now or datetime.utcnow()
        result = await self.db.execute(
            update(UserSubscription)
            .where(
                UserSubscription.status == SubscriptionStatus.ACTIVE.value,
                UserSubscription.end_date <= now,
            )
            .values(status=SubscriptionStatus.EXPIRED.value, updated_at=now)
        )
        await self.db.commit()
        return result.rowcount or 0
