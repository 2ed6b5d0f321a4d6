"""Credit balance and ledger service."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import acquire_advisory_lock, lock_row
from ..core.exceptions import (
    InsufficientCreditsError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.credit import (
    CreditTransaction,
    CreditTransactionStatus,
    CreditTransactionType,
    PackageCredits,
)
from .settings_service import SettingsService

logger = logging.getLogger(__name__)


class CreditService:
    """Service for travel credit balances and the credit ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings_service = SettingsService(db)

    async def get_credits_row(self, travel_id: UUID, for_update: bool = False) -> Optional[PackageCredits]:
        stmt = select(PackageCredits).where(PackageCredits.travel_id == travel_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _lock_credits(self, travel_id: UUID) -> PackageCredits:
        """Lock and return the balance row of a travel, creating an empty one if needed."""
        await acquire_advisory_lock(self.db, f"package_credits:{travel_id}")

        credits = await self.get_credits_row(travel_id, for_update=True)
        if credits is None:
            credits = PackageCredits(travel_id=travel_id, credits_remaining=0, credits_used=0)
            self.db.add(credits)
            await self.db.flush()
        return credits

    async def get_balance(self, travel_id: UUID) -> dict:
        """Balance of a travel; zero when it never had credits."""
        credits = await self.get_credits_row(travel_id)
        if credits is None:
            return {
                "travel_id": travel_id,
                "credits_remaining": 0,
                "credits_used": 0,
                "last_purchase_date": None,
            }
        return {
            "travel_id": credits.travel_id,
            "credits_remaining": credits.credits_remaining,
            "credits_used": credits.credits_used,
            "last_purchase_date": credits.last_purchase_date,
        }

    async def credit_price_list(self) -> list[dict]:
        prices = await self.settings_service.get_credit_prices()
        return [{"credits": credits, "price": price} for credits, price in prices.items()]

    async def request_purchase(
        self,
        travel_id: UUID,
        credits: int,
        payment_proof_url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CreditTransaction:
        """
        Record a pending credit pack purchase awaiting admin review.

        Raises:
            ValidationError: If ``credits`` is not one of the listed packs
        """
        prices = await self.settings_service.get_credit_prices()
        if credits not in prices:
            raise ValidationError(
                detail=f"No credit pack of {credits} credits is offered",
                errors={"credits": f"Must be one of {sorted(prices)}"},
            )

        transaction = CreditTransaction(
            travel_id=travel_id,
            transaction_type=CreditTransactionType.PURCHASE.value,
            amount=credits,
            status=CreditTransactionStatus.PENDING.value,
            price=prices[credits],
            payment_proof_url=payment_proof_url,
            notes=notes,
        )
        self.db.add(transaction)
        await self.db.commit()

        logger.info(
            "Credit purchase requested",
            extra={
                "transaction_id": str(transaction.id),
                "travel_id": str(travel_id),
                "credits": credits,
                "price": prices[credits],
            }
        )
        return transaction

    async def get_transaction_or_raise(self, transaction_id: UUID, for_update: bool = False) -> CreditTransaction:
        if for_update:
            transaction = await lock_row(self.db, CreditTransaction, transaction_id)
        else:
            transaction = await self.db.get(CreditTransaction, transaction_id)
        if transaction is None:
            raise NotFoundError(resource_type="credit_transaction", resource_id=str(transaction_id))
        return transaction

    async def review_purchase(
        self,
        transaction_id: UUID,
        approve: bool,
        reviewer_id: str,
        notes: Optional[str] = None,
    ) -> CreditTransaction:
        """
        Approve or reject a pending purchase.

        Approval adds the purchased credits to the balance in the same transaction.
        The purchase row is locked before its status is checked, so it is credited once.

        Raises:
            NotFoundError: If the transaction does not exist
            InvalidStatusTransitionError: If it is not a pending purchase
        """
        transaction = await self.get_transaction_or_raise(transaction_id, for_update=True)
        target = CreditTransactionStatus.APPROVED if approve else CreditTransactionStatus.REJECTED

        if (
            transaction.transaction_type != CreditTransactionType.PURCHASE.value
            or transaction.status != CreditTransactionStatus.PENDING.value
        ):
            raise InvalidStatusTransitionError(
                resource_type="credit_transaction",
                current_status=transaction.status,
                requested_status=target.value,
                allowed=[],
            )

        now = datetime.utcnow()
        if approve:
            credits = await self._lock_credits(transaction.travel_id)
            credits.credits_remaining += transaction.amount
            credits.last_purchase_date = now
            metrics_collector.record_credits_added(CreditTransactionType.PURCHASE.value, transaction.amount)

        transaction.status = target.value
        transaction.reviewed_by = reviewer_id
        transaction.reviewed_at = now
        if notes is not None:
            transaction.notes = notes

        await self.db.commit()

        logger.info(
            "Credit purchase reviewed",
            extra={
                "transaction_id": str(transaction.id),
                "travel_id": str(transaction.travel_id),
                "status": transaction.status,
                "reviewer": reviewer_id,
            }
        )
        return transaction

    async def add_credits(
        self,
        travel_id: UUID,
        amount: int,
        transaction_type: CreditTransactionType,
        notes: Optional[str] = None,
        package_id: Optional[UUID] = None,
        granted_by: Optional[str] = None,
        commit: bool = True,
    ) -> CreditTransaction:
        """Add credits immediately (bonus or refund) and write the ledger row."""
        if amount <= 0:
            raise ValidationError(detail="Credit amount must be positive")

        credits = await self._lock_credits(travel_id)
        credits.credits_remaining += amount

        transaction = CreditTransaction(
            travel_id=travel_id,
            package_id=package_id,
            transaction_type=transaction_type.value,
            amount=amount,
            status=CreditTransactionStatus.COMPLETED.value,
            notes=notes,
            reviewed_by=granted_by,
            reviewed_at=datetime.utcnow() if granted_by else None,
        )
        self.db.add(transaction)

        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

        metrics_collector.record_credits_added(transaction_type.value, amount)
        logger.info(
            "Credits added",
            extra={
                "travel_id": str(travel_id),
                "amount": amount,
                "transaction_type": transaction_type.value,
                "credits_remaining": credits.credits_remaining,
            }
        )
        return transaction

    async def grant_bonus(self, travel_id: UUID, amount: int, notes: Optional[str] = None,
                          granted_by: Optional[str] = None, commit: bool = True) -> CreditTransaction:
        return await self.add_credits(
            travel_id, amount, CreditTransactionType.BONUS,
            notes=notes, granted_by=granted_by, commit=commit,
        )

    async def refund(self, travel_id: UUID, amount: int, package_id: Optional[UUID] = None,
                     notes: Optional[str] = None, granted_by: Optional[str] = None) -> CreditTransaction:
        return await self.add_credits(
            travel_id, amount, CreditTransactionType.REFUND,
            notes=notes, package_id=package_id, granted_by=granted_by,
        )

    async def spend(
        self,
        travel_id: UUID,
        amount: int,
        package_id: Optional[UUID] = None,
        notes: Optional[str] = None,
        commit: bool = True,
    ) -> CreditTransaction:
        """
        Atomically deduct credits and record a usage transaction.

        The balance row is locked for the rest of the database transaction so
        concurrent purchases cannot overdraw it.

        Raises:
            InsufficientCreditsError: If the balance is lower than ``amount``
        """
        if amount <= 0:
            raise ValidationError(detail="Credit amount must be positive")

        credits = await self._lock_credits(travel_id)

        if credits.credits_remaining < amount:
            logger.warning(
                "Credit spend rejected - insufficient balance",
                extra={
                    "travel_id": str(travel_id),
                    "required": amount,
                    "available": credits.credits_remaining,
                }
            )
            raise InsufficientCreditsError(
                travel_id=str(travel_id),
                required=amount,
                available=credits.credits_remaining,
            )

        credits.credits_remaining -= amount
        credits.credits_used += amount

        transaction = CreditTransaction(
            travel_id=travel_id,
            package_id=package_id,
            transaction_type=CreditTransactionType.USAGE.value,
            amount=-amount,
            status=CreditTransactionStatus.COMPLETED.value,
            notes=notes,
        )
        self.db.add(transaction)

        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

        metrics_collector.record_credits_spent(amount)
        logger.info(
            "Credits spent",
            extra={
                "travel_id": str(travel_id),
                "amount": amount,
                "package_id": str(package_id) if package_id else None,
                "credits_remaining": credits.credits_remaining,
            }
        )
        return transaction

    async def list_transactions(
        self,
        travel_id: Optional[UUID] = None,
        status: Optional[str] = None,
        transaction_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[CreditTransaction], int]:
        """Ledger rows, newest first, with the total matching count."""
        conditions = []
        if travel_id is not None:
            conditions.append(CreditTransaction.travel_id == travel_id)
        if status is not None:
            conditions.append(CreditTransaction.status == status)
        if transaction_type is not None:
            conditions.append(CreditTransaction.transaction_type == transaction_type)

        total = await self.db.scalar(
            select(func.count()).select_from(CreditTransaction).where(*conditions)
        )
        stmt = (
            select(CreditTransaction)
            .where(*conditions)
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def list_balances(self, limit: int = 20, offset: int = 0) -> tuple[list[PackageCredits], int]:
        total = await self.db.scalar(select(func.count()).select_from(PackageCredits))
        stmt = (
            select(PackageCredits)
            .order_by(PackageCredits.credits_remaining.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0
