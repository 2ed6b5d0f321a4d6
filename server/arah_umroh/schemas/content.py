"""Devotional content Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.content import ChecklistCategory, ManasikCategory


class IdRequest(BaseModel):
    id: UUID


# Prayers

class PrayerCategoryInput(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    name_arabic: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    icon: Optional[str] = Field(None, max_length=50)
    priority: int = 0
    is_active: bool = True


class UpdatePrayerCategoryRequest(PrayerCategoryInput):
    id: UUID


class PrayerCategory(PrayerCategoryInput):
    model_config = ConfigDict(from_attributes=True)

    id: UUID


class PrayerInput(BaseModel):
    category_id: Optional[UUID] = None
    title: str = Field(..., min_length=2, max_length=255)
    title_arabic: Optional[str] = Field(None, max_length=255)
    arabic_text: str = Field(..., min_length=1)
    transliteration: Optional[str] = None
    translation: Optional[str] = None
    source: Optional[str] = Field(None, max_length=255)
    benefits: Optional[str] = None
    audio_url: Optional[str] = Field(None, max_length=1024)
    priority: int = 0
    is_active: bool = True


class UpdatePrayerRequest(PrayerInput):
    id: UUID


class Prayer(PrayerInput):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime


class ListPrayersRequest(BaseModel):
    category_id: Optional[UUID] = None
    search: Optional[str] = Field(None, max_length=100)


class PrayerCategoryList(BaseModel):
    items: list[PrayerCategory]


class PrayerList(BaseModel):
    items: list[Prayer]


# Checklists

class ChecklistInput(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    category: ChecklistCategory
    phase: str = Field(..., min_length=1, max_length=20, description="e.g. H-30")
    priority: int = 0
    icon: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class UpdateChecklistRequest(ChecklistInput):
    id: UUID


class Checklist(ChecklistInput):
    model_config = ConfigDict(from_attributes=True)

    id: UUID


class ToggleChecklistRequest(BaseModel):
    checklist_id: UUID


class ChecklistNotesRequest(BaseModel):
    checklist_id: UUID
    notes: Optional[str] = Field(None, max_length=1000)


class ChecklistItemProgress(Checklist):
    """Checklist item with the caller's check state."""

    is_checked: bool = False
    checked_at: Optional[datetime] = None
    notes: Optional[str] = None


class ChecklistProgress(BaseModel):
    items: list[ChecklistItemProgress]
    total: int
    completed: int
    percent_complete: int = Field(..., ge=0, le=100)
    by_category: dict[str, dict[str, int]]


# Manasik guides

class ManasikGuideInput(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    title_arabic: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    content: str = Field(..., min_length=1)
    category: ManasikCategory = ManasikCategory.UMROH
    order_index: int = Field(0, ge=0)
    image_url: Optional[str] = Field(None, max_length=1024)
    video_url: Optional[str] = Field(None, max_length=1024)
    is_active: bool = True


class UpdateManasikGuideRequest(ManasikGuideInput):
    id: UUID


class ManasikGuide(ManasikGuideInput):
    model_config = ConfigDict(from_attributes=True)

    id: UUID


class ListManasikGuidesRequest(BaseModel):
    category: ManasikCategory = ManasikCategory.UMROH


class ManasikGuideList(BaseModel):
    category: ManasikCategory
    items: list[ManasikGuide]
