"""Feedback and content rating Pydantic schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.feedback import FeedbackStatus, FeedbackType
from .common import PageInfo, PageRequest


class SubmitFeedbackRequest(BaseModel):
    """Request schema for submitting feedback; rating is required for ratings."""

    feedback_type: FeedbackType
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=5, max_length=5000)
    rating: Optional[int] = Field(None, ge=1, le=5)
    category: Optional[str] = Field(None, max_length=100)
    screenshot_url: Optional[str] = Field(None, max_length=1024)
    device_info: Optional[dict[str, Any]] = Field(None, description="Kept for bug reports only")
    app_version: Optional[str] = Field(None, max_length=32)

    @model_validator(mode="after")
    def require_rating_for_ratings(self) -> "SubmitFeedbackRequest":
        if self.feedback_type == FeedbackType.RATING and self.rating is None:
            raise ValueError("rating is required for rating feedback")
        return self


class ListFeedbackRequest(PageRequest):
    feedback_type: Optional[FeedbackType] = None
    status: Optional[FeedbackStatus] = None


class UpdateFeedbackRequest(BaseModel):
    feedback_id: UUID
    status: FeedbackStatus
    admin_notes: Optional[str] = Field(None, max_length=2000)


class Feedback(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: Optional[str] = None
    feedback_type: FeedbackType
    title: str
    description: str
    rating: Optional[int] = None
    category: Optional[str] = None
    screenshot_url: Optional[str] = None
    device_info: Optional[dict[str, Any]] = None
    app_version: Optional[str] = None
    status: FeedbackStatus
    admin_notes: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    created_at: datetime


class FeedbackList(PageInfo):
    items: list[Feedback]


class FeedbackStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    average_rating: Optional[float] = None


class RateContentRequest(BaseModel):
    content_type: str = Field(..., min_length=1, max_length=50, description="e.g. prayer, manasik")
    content_id: str = Field(..., min_length=1, max_length=64)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


class ContentRef(BaseModel):
    content_type: str = Field(..., min_length=1, max_length=50)
    content_id: str = Field(..., min_length=1, max_length=64)


class ContentRating(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content_type: str
    content_id: str
    rating: int
    comment: Optional[str] = None
    updated_at: datetime


class ContentRatingSummary(BaseModel):
    content_type: str
    content_id: str
    average_rating: Optional[float] = None
    rating_count: int
    user_rating: Optional[int] = None
