"""Travel agency service for business logic operations."""

import logging
import re
import secrets
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentUser
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..models.travel import Travel
from ..schemas.travel import CreateTravelRequest, ListTravelsRequest, UpdateTravelRequest
from .credit_service import CreditService
from .settings_service import SettingsService

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    """Lowercase ``value`` and collapse everything but letters and digits into single dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "travel"


class TravelService:
    """Service for travel-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_travel_by_id(self, travel_id: UUID) -> Optional[Travel]:
        return await self.db.get(Travel, travel_id)

    async def get_travel_by_id_or_raise(self, travel_id: UUID) -> Travel:
        """
        Get travel by ID or raise NotFoundError.

        Raises:
            NotFoundError: If travel not found
        """
        travel = await self.get_travel_by_id(travel_id)
        if not travel:
            raise NotFoundError(resource_type="travel", resource_id=str(travel_id))
        return travel

    async def get_travel_by_slug(self, slug: str) -> Optional[Travel]:
        result = await self.db.execute(select(Travel).where(Travel.slug == slug))
        return result.scalar_one_or_none()

    async def get_travel_by_owner(self, owner_id: str) -> Optional[Travel]:
        result = await self.db.execute(select(Travel).where(Travel.owner_id == owner_id))
        return result.scalar_one_or_none()

    async def get_managed_travel(self, user: CurrentUser, travel_id: UUID) -> Travel:
        """
        Return the travel if ``user`` owns it or is an admin.

        Raises:
            NotFoundError: If travel not found
            AuthorizationError: If the user may not manage the travel
        """
        travel = await self.get_travel_by_id_or_raise(travel_id)
        if not user.is_admin and travel.owner_id != user.user_id:
            logger.warning(
                "Travel access denied",
                extra={"travel_id": str(travel_id), "user_id": user.user_id}
            )
            raise AuthorizationError(detail="You do not manage this travel")
        return travel

    async def _unique_slug(self, base: str) -> str:
        slug = base
        while await self.get_travel_by_slug(slug) is not None:
            slug = f"{base}-{secrets.token_hex(2)}"
        return slug

    async def create_travel(self, owner: CurrentUser, request: CreateTravelRequest) -> Travel:
        """
        Register a travel for an agent and grant the configured free credits.

        Raises:
            ConflictError: If the agent already has a travel or the slug is taken
        """
        existing = await self.get_travel_by_owner(owner.user_id)
        if existing is not None:
            raise ConflictError(
                detail="This account already manages a travel",
                conflicting_resource={"travel_id": str(existing.id)},
            )

        if request.slug:
            if await self.get_travel_by_slug(request.slug) is not None:
                raise ConflictError(
                    detail=f"Slug '{request.slug}' is already in use",
                    conflicting_resource={"slug": request.slug},
                )
            slug = request.slug
        else:
            slug = await self._unique_slug(slugify(request.name))

        travel = Travel(
            owner_id=owner.user_id,
            name=request.name,
            slug=slug,
            description=request.description,
            logo_url=request.logo_url,
            address=request.address,
            phone=request.phone,
            whatsapp=request.whatsapp,
            email=request.email,
        )
        self.db.add(travel)
        await self.db.flush()

        free_credits = await SettingsService(self.db).get_free_credits()
        if free_credits.enabled and free_credits.amount > 0:
            await CreditService(self.db).grant_bonus(
                travel.id, free_credits.amount, notes="Free credits on registration", commit=False
            )

        await self.db.commit()

        logger.info(
            "Travel created successfully",
            extra={
                "travel_id": str(travel.id),
                "slug": travel.slug,
                "owner_id": owner.user_id,
                "free_credits": free_credits.amount if free_credits.enabled else 0,
            }
        )
        return travel

    async def update_travel(self, user: CurrentUser, request: UpdateTravelRequest) -> Travel:
        travel = await self.get_managed_travel(user, request.travel_id)

        changes = request.model_dump(exclude_unset=True, exclude={"travel_id"})
        for field, value in changes.items():
            setattr(travel, field, value)

        await self.db.commit()

        logger.info(
            "Travel updated",
            extra={"travel_id": str(travel.id), "fields": sorted(changes)}
        )
        return travel

    async def list_travels(self, request: ListTravelsRequest, include_inactive: bool = False) -> tuple[list[Travel], int]:
        conditions = []
        if not include_inactive:
            conditions.append(Travel.is_active.is_(True))
        if request.verified_only:
            conditions.append(Travel.verified.is_(True))
        if request.search:
            pattern = f"%{request.search}%"
            conditions.append(or_(Travel.name.ilike(pattern), Travel.slug.ilike(pattern)))

        total = await self.db.scalar(select(func.count()).select_from(Travel).where(*conditions))
        stmt = (
            select(Travel)
            .where(*conditions)
            .order_by(Travel.verified.desc(), Travel.rating.desc(), Travel.name)
            .limit(request.limit)
            .offset(request.offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def set_verified(self, travel_id: UUID, verified: bool) -> Travel:
        travel = await self.get_travel_by_id_or_raise(travel_id)
        travel.verified = verified
        await self.db.commit()

        logger.info("Travel verification changed", extra={"travel_id": str(travel_id), "verified": verified})
        return travel

    async def deactivate_travel(self, travel_id: UUID) -> Travel:
        travel = await self.get_travel_by_id_or_raise(travel_id)
        travel.is_active = False
        await self.db.commit()

        logger.info("Travel deactivated", extra={"travel_id": str(travel_id)})
        return travel
