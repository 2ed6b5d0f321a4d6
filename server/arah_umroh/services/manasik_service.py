"""Manasik (ritual walkthrough) guide service."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.content import ManasikCategory, ManasikGuide
from ..schemas.content import ManasikGuideInput, UpdateManasikGuideRequest

logger = logging.getLogger(__name__)


class ManasikService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_guide_or_raise(self, guide_id: UUID) -> ManasikGuide:
        guide = await self.db.get(ManasikGuide, guide_id)
        if guide is None:
            raise NotFoundError(resource_type="manasik_guide", resource_id=str(guide_id))
        return guide

    async def list_guides(self, category: ManasikCategory, include_inactive: bool = False) -> list[ManasikGuide]:
        """Steps of one ritual in walkthrough order."""
        stmt = select(ManasikGuide).where(ManasikGuide.category == category.value)
        if not include_inactive:
            stmt = stmt.where(ManasikGuide.is_active.is_(True))
        result = await self.db.execute(stmt.order_by(ManasikGuide.order_index, ManasikGuide.title))
        return list(result.scalars().all())

    async def get_guide(self, guide_id: UUID) -> ManasikGuide:
        guide = await self.get_guide_or_raise(guide_id)
        if not guide.is_active:
            raise NotFoundError(resource_type="manasik_guide", resource_id=str(guide_id))
        return guide

    async def create_guide(self, request: ManasikGuideInput) -> ManasikGuide:
        guide = ManasikGuide(**request.model_dump(mode="json"))
        self.db.add(guide)
        await self.db.commit()
        logger.info("Manasik guide created", extra={"guide_id": str(guide.id), "category": guide.category})
        return guide

    async def update_guide(self, request: UpdateManasikGuideRequest) -> ManasikGuide:
        guide = await self.get_guide_or_raise(request.id)
        for field, value in request.model_dump(mode="json", exclude={"id"}).items():
            setattr(guide, field, value)
        await self.db.commit()
        return guide

    async def delete_guide(self, guide_id: UUID) -> None:
        guide = await self.get_guide_or_raise(guide_id)
        await self.db.delete(guide)
        await self.db.commit()
        logger.info("Manasik guide deleted", extra={"guide_id": str(guide_id)})
