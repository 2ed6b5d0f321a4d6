"""Platform-wide statistics for the admin dashboard."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.booking import Booking
from ..models.credit import CreditTransaction, CreditTransactionStatus, CreditTransactionType
from ..models.feedback import Feedback, FeedbackStatus
from ..models.membership import Membership, MembershipStatus
from ..models.package import Package
from ..models.subscription import SubscriptionStatus, UserSubscription
from ..models.travel import Travel


class AdminService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        count = await self.db.scalar(select(func.count()).select_from(model).where(*conditions))
        return count or 0

    async def platform_stats(self) -> dict:
        membership_revenue = await self.db.scalar(
            select(func.coalesce(func.sum(Membership.amount), 0))
            .where(Membership.status == MembershipStatus.ACTIVE.value)
        )

        return {
            "total_travels": await self._count(Travel),
            "verified_travels": await self._count(Travel, Travel.verified.is_(True)),
            "total_packages": await self._count(Package),
            "active_packages": await self._count(Package, Package.is_active.is_(True)),
            "total_bookings": await self._count(Booking),
            "active_memberships": await self._count(
                Membership, Membership.status == MembershipStatus.ACTIVE.value
            ),
            "pending_memberships": await self._count(
                Membership, Membership.status == MembershipStatus.PENDING.value
            ),
            "membership_revenue": int(membership_revenue or 0),
            "pending_credit_purchases": await self._count(
                CreditTransaction,
                CreditTransaction.transaction_type == CreditTransactionType.PURCHASE.value,
                CreditTransaction.status == CreditTransactionStatus.PENDING.value,
            ),
            "pending_feedback": await self._count(Feedback, Feedback.status == FeedbackStatus.PENDING.value),
            "pending_subscriptions": await self._count(
                UserSubscription, UserSubscription.status == SubscriptionStatus.PENDING.value
            ),
        }
