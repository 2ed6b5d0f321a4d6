"""Prayer (du'a) content service."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.content import Prayer, PrayerCategory
from ..schemas.content import (
    ListPrayersRequest,
    PrayerCategoryInput,
    PrayerInput,
    UpdatePrayerCategoryRequest,
    UpdatePrayerRequest,
)

logger = logging.getLogger(__name__)


class PrayerService:
    """Service for prayer categories and prayers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_category_or_raise(self, category_id: UUID) -> PrayerCategory:
        category = await self.db.get(PrayerCategory, category_id)
        if category is None:
            raise NotFoundError(resource_type="prayer_category", resource_id=str(category_id))
        return category

    async def get_prayer_or_raise(self, prayer_id: UUID) -> Prayer:
        prayer = await self.db.get(Prayer, prayer_id)
        if prayer is None:
            raise NotFoundError(resource_type="prayer", resource_id=str(prayer_id))
        return prayer

    async def list_categories(self, include_inactive: bool = False) -> list[PrayerCategory]:
        stmt = select(PrayerCategory).order_by(PrayerCategory.priority, PrayerCategory.name)
        if not include_inactive:
            stmt = stmt.where(PrayerCategory.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_prayers(self, request: ListPrayersRequest, include_inactive: bool = False) -> list[Prayer]:
        stmt = select(Prayer)
        if not include_inactive:
            stmt = stmt.where(Prayer.is_active.is_(True))
        if request.category_id:
            stmt = stmt.where(Prayer.category_id == request.category_id)
        if request.search:
            pattern = f"%{request.search}%"
            stmt = stmt.where(or_(Prayer.title.ilike(pattern), Prayer.translation.ilike(pattern)))
        result = await self.db.execute(stmt.order_by(Prayer.priority, Prayer.title))
        return list(result.scalars().all())

    async def get_prayer(self, prayer_id: UUID) -> Prayer:
        prayer = await self.get_prayer_or_raise(prayer_id)
        if not prayer.is_active:
            raise NotFoundError(resource_type="prayer", resource_id=str(prayer_id))
        return prayer

    async def _check_category(self, category_id: Optional[UUID]) -> None:
        if category_id is not None and await self.db.get(PrayerCategory, category_id) is None:
            raise ValidationError(
                detail="Unknown prayer category",
                errors={"category_id": "Must reference an existing prayer category"},
            )

    # Admin

    async def create_category(self, request: PrayerCategoryInput) -> PrayerCategory:
        category = PrayerCategory(**request.model_dump())
        self.db.add(category)
        await self.db.commit()
        logger.info("Prayer category created", extra={"category_id": str(category.id)})
        return category

    async def update_category(self, request: UpdatePrayerCategoryRequest) -> PrayerCategory:
        category = await self.get_category_or_raise(request.id)
        for field, value in request.model_dump(exclude={"id"}).items():
            setattr(category, field, value)
        await self.db.commit()
        return category

    async def delete_category(self, category_id: UUID) -> None:
        category = await self.get_category_or_raise(category_id)
        await self.db.delete(category)
        await self.db.commit()
        logger.info("Prayer category deleted", extra={"category_id": str(category_id)})

    async def create_prayer(self, request: PrayerInput) -> Prayer:
        await self._check_category(request.category_id)
        prayer = Prayer(**request.model_dump())
        self.db.add(prayer)
        await self.db.commit()
        logger.info("Prayer created", extra={"prayer_id": str(prayer.id)})
        return prayer

    async def update_prayer(self, request: UpdatePrayerRequest) -> Prayer:
        prayer = await self.get_prayer_or_raise(request.id)
        await self._check_category(request.category_id)
        for field, value in request.model_dump(exclude={"id"}).items():
            setattr(prayer, field, value)
        await self.db.commit()
        return prayer

    async def delete_prayer(self, prayer_id: UUID) -> None:
        prayer = await self.get_prayer_or_raise(prayer_id)
        await self.db.delete(prayer)
        await self.db.commit()
        logger.info("Prayer deleted", extra={"prayer_id": str(prayer_id)})
