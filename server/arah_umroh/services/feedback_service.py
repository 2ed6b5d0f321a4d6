"""Feedback triage and content rating service."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.feedback import ContentRating, Feedback, FeedbackStatus, FeedbackType
from ..schemas.feedback import ListFeedbackRequest, RateContentRequest, SubmitFeedbackRequest, UpdateFeedbackRequest

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (FeedbackStatus.RESOLVED.value, FeedbackStatus.REJECTED.value)


class FeedbackService:
    """Service for user feedback and content ratings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit_feedback(self, request: SubmitFeedbackRequest, user_id: Optional[str] = None) -> Feedback:
        feedback = Feedback(
            user_id=user_id,
            feedback_type=request.feedback_type.value,
            title=request.title,
            description=request.description,
            rating=request.rating,
            category=request.category,
            screenshot_url=request.screenshot_url,
            # Device details only help reproduce bugs
            device_info=request.device_info if request.feedback_type == FeedbackType.BUG else None,
            app_version=request.app_version,
            status=FeedbackStatus.PENDING.value,
        )
        self.db.add(feedback)
        await self.db.commit()

        logger.info(
            "Feedback submitted",
            extra={"feedback_id": str(feedback.id), "type": feedback.feedback_type, "user_id": user_id}
        )
        return feedback

    async def get_feedback_or_raise(self, feedback_id: UUID) -> Feedback:
        feedback = await self.db.get(Feedback, feedback_id)
        if feedback is None:
            raise NotFoundError(resource_type="feedback", resource_id=str(feedback_id))
        return feedback

    async def list_user_feedback(self, user_id: str) -> list[Feedback]:
        result = await self.db.execute(
            select(Feedback).where(Feedback.user_id == user_id).order_by(Feedback.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_feedback(self, request: ListFeedbackRequest) -> tuple[list[Feedback], int]:
        conditions = []
        if request.feedback_type:
            conditions.append(Feedback.feedback_type == request.feedback_type.value)
        if request.status:
            conditions.append(Feedback.status == request.status.value)

        total = await self.db.scalar(select(func.count()).select_from(Feedback).where(*conditions))
        stmt = (
            select(Feedback)
            .where(*conditions)
            .order_by(Feedback.created_at.desc())
            .limit(request.limit)
            .offset(request.offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def update_feedback(self, request: UpdateFeedbackRequest, admin_id: str) -> Feedback:
        """
        Set the triage status of a feedback item.

        Closing (resolved or rejected) stamps who closed it and when; reopening clears both.
        """
        feedback = await self.get_feedback_or_raise(request.feedback_id)

        previous = feedback.status
        feedback.status = request.status.value
        if request.admin_notes is not None:
            feedback.admin_notes = request.admin_notes

        if feedback.status in CLOSED_STATUSES:
            if previous not in CLOSED_STATUSES or feedback.resolved_at is None:
                feedback.resolved_at = datetime.utcnow()
            feedback.resolved_by = admin_id
        else:
            feedback.resolved_at = None
            feedback.resolved_by = None

        await self.db.commit()

        logger.info(
            "Feedback updated",
            extra={"feedback_id": str(feedback.id), "from_status": previous, "to_status": feedback.status}
        )
        return feedback

    async def feedback_stats(self) -> dict:
        status_rows = await self.db.execute(
            select(Feedback.status, func.count()).group_by(Feedback.status)
        )
        type_rows = await self.db.execute(
            select(Feedback.feedback_type, func.count()).group_by(Feedback.feedback_type)
        )
        average = await self.db.scalar(
            select(func.avg(Feedback.rating)).where(Feedback.rating.is_not(None))
        )

        by_status = {status.value: 0 for status in FeedbackStatus}
        by_status.update({status: count for status, count in status_rows.all()})
        by_type = {feedback_type.value: 0 for feedback_type in FeedbackType}
        by_type.update({feedback_type: count for feedback_type, count in type_rows.all()})

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_type": by_type,
            "average_rating": round(float(average), 2) if average is not None else None,
        }

    # Content ratings

    async def rate_content(self, user_id: str, request: RateContentRequest) -> ContentRating:
        """Create or replace the user's rating of a content item."""
        result = await self.db.execute(
            select(ContentRating).where(
                ContentRating.user_id == user_id,
                ContentRating.content_type == request.content_type,
                ContentRating.content_id == request.content_id,
            )
        )
        rating = result.scalar_one_or_none()
        if rating is None:
            rating = ContentRating(
                user_id=user_id,
                content_type=request.content_type,
                content_id=request.content_id,
            )
            self.db.add(rating)

        rating.rating = request.rating
        rating.comment = request.comment
        await self.db.commit()

        logger.info(
            "Content rated",
            extra={"content_type": request.content_type, "content_id": request.content_id, "rating": request.rating}
        )
        return rating

    async def content_rating_summary(
        self, content_type: str, content_id: str, user_id: Optional[str] = None
    ) -> dict:
        row = (
            await self.db.execute(
                select(func.avg(ContentRating.rating), func.count()).where(
                    ContentRating.content_type == content_type,
                    ContentRating.content_id == content_id,
                )
            )
        ).one()

        user_rating = None
        if user_id is not None:
            user_rating = await self.db.scalar(
                select(ContentRating.rating).where(
                    ContentRating.user_id == user_id,
                    ContentRating.content_type == content_type,
                    ContentRating.content_id == content_id,
                )
            )

        return {
            "content_type": content_type,
            "content_id": content_id,
            "average_rating": round(float(row[0]), 2) if row[0] is not None else None,
            "rating_count": row[1],
            "user_rating": user_rating,
        }
