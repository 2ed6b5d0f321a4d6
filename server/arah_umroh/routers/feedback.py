"""Feedback router for app feedback triage and content ratings."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession, OptionalAuth, RequiredAuth
from ..schemas.feedback import (
    ContentRating,
    ContentRatingSummary,
    ContentRef,
    Feedback,
    FeedbackList,
    FeedbackStats,
    ListFeedbackRequest,
    RateContentRequest,
    SubmitFeedbackRequest,
    UpdateFeedbackRequest,
)
from ..services.feedback_service import FeedbackService

router = APIRouter(prefix="/v1/feedback", tags=["feedback"])


@router.post("/submit", response_model=Feedback)
async def submit_feedback(
    request: SubmitFeedbackRequest,
    user: Optional[CurrentUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Anyone may report; the caller is attached when a token is supplied."""
    feedback = await FeedbackService(db).submit_feedback(request, user_id=user.user_id if user else None)
    return JSONResponse(
        status_code=200,
        content=Feedback.model_validate(feedback).model_dump(mode="json")
    )


@router.post("/mine", response_model=list[Feedback])
async def list_my_feedback(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    items = await FeedbackService(db).list_user_feedback(user.user_id)
    return JSONResponse(
        status_code=200,
        content=[Feedback.model_validate(f).model_dump(mode="json") for f in items]
    )


@router.post("/list", response_model=FeedbackList)
async def list_feedback(
    request: ListFeedbackRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    items, total = await FeedbackService(db).list_feedback(request)
    response_data = FeedbackList(
        items=[Feedback.model_validate(f) for f in items],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/update", response_model=Feedback)
async def update_feedback(
    request: UpdateFeedbackRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    feedback = await FeedbackService(db).update_feedback(request, admin_id=user.user_id)
    return JSONResponse(
        status_code=200,
        content=Feedback.model_validate(feedback).model_dump(mode="json")
    )


@router.post("/stats", response_model=FeedbackStats)
async def feedback_stats(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    stats = await FeedbackService(db).feedback_stats()
    return JSONResponse(
        status_code=200,
        content=FeedbackStats.model_validate(stats).model_dump(mode="json")
    )


@router.post("/rate-content", response_model=ContentRating)
async def rate_content(
    request: RateContentRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Rate a prayer, guide or other content item; rating again replaces the old one."""
    rating = await FeedbackService(db).rate_content(user.user_id, request)
    return JSONResponse(
        status_code=200,
        content=ContentRating.model_validate(rating).model_dump(mode="json")
    )


@router.post("/content-rating", response_model=ContentRatingSummary)
async def content_rating_summary(
    request: ContentRef,
    user: Optional[CurrentUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    summary = await FeedbackService(db).content_rating_summary(
        request.content_type, request.content_id, user_id=user.user_id if user else None
    )
    return JSONResponse(
        status_code=200,
        content=ContentRatingSummary.model_validate(summary).model_dump(mode="json")
    )
