"""Travel router for agency registration and storefront lookups."""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, AgentAuth, CurrentUser, DatabaseSession, OptionalAuth, RequiredAuth
from ..core.exceptions import NotFoundError
from ..schemas.travel import (
    CreateTravelRequest,
    GetTravelBySlugRequest,
    ListTravelsRequest,
    Travel,
    TravelIdRequest,
    TravelList,
    UpdateTravelRequest,
    VerifyTravelRequest,
)
from ..services.travel_service import TravelService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/travel", tags=["travel"])


def _travel_response(travel) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=Travel.model_validate(travel).model_dump(mode="json")
    )


def _visible(travel, user: Optional[CurrentUser]) -> bool:
    """Deactivated travels are only visible to their owner and admins."""
    if travel.is_active:
        return True
    return user is not None and (user.is_admin or travel.owner_id == user.user_id)


@router.post("/create", response_model=Travel)
async def create_travel(
    request: CreateTravelRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Register the calling agent's travel agency.

    Free starting credits are granted when the platform setting enables them.
    """
    travel = await TravelService(db).create_travel(user, request)
    return _travel_response(travel)


@router.post("/update", response_model=Travel)
async def update_travel(
    request: UpdateTravelRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    travel = await TravelService(db).update_travel(user, request)
    return _travel_response(travel)


@router.post("/get", response_model=Travel)
async def get_travel(
    request: TravelIdRequest,
    user: Optional[CurrentUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    travel = await TravelService(db).get_travel_by_id_or_raise(request.travel_id)
    if not _visible(travel, user):
        raise NotFoundError(resource_type="travel", resource_id=str(request.travel_id))
    return _travel_response(travel)


@router.post("/get-by-slug", response_model=Travel)
async def get_travel_by_slug(
    request: GetTravelBySlugRequest,
    user: Optional[CurrentUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Public storefront lookup."""
    travel = await TravelService(db).get_travel_by_slug(request.slug)
    if travel is None or not _visible(travel, user):
        raise NotFoundError(resource_type="travel", resource_id=request.slug)
    return _travel_response(travel)


@router.post("/mine", response_model=Travel)
async def get_my_travel(
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    travel = await TravelService(db).get_travel_by_owner(user.user_id)
    if travel is None:
        raise NotFoundError(resource_type="travel", resource_id=user.user_id)
    return _travel_response(travel)


@router.post("/list", response_model=TravelList)
async def list_travels(
    request: ListTravelsRequest,
    user: Optional[CurrentUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """List travels; deactivated ones are included only for admins who ask."""
    include_inactive = request.include_inactive and user is not None and user.is_admin
    travels, total = await TravelService(db).list_travels(request, include_inactive=include_inactive)

    response_data = TravelList(
        items=[Travel.model_validate(t) for t in travels],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/verify", response_model=Travel)
async def verify_travel(
    request: VerifyTravelRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    travel = await TravelService(db).set_verified(request.travel_id, request.verified)
    logger.info(
        "Travel verification set by admin",
        extra={"travel_id": str(travel.id), "verified": request.verified, "admin_id": user.user_id}
    )
    return _travel_response(travel)


@router.post("/deactivate", response_model=Travel)
async def deactivate_travel(
    request: TravelIdRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    travel = await TravelService(db).deactivate_travel(request.travel_id)
    return _travel_response(travel)
