"""Featured placement router: quotes, purchases with credits and storefront display."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, AgentAuth, CurrentUser, DatabaseSession, IdempotencyKey
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.featured import (
    FeaturedDisplayItem,
    FeaturedDisplayList,
    FeaturedIdRequest,
    FeaturedList,
    FeaturedPackage,
    FeaturedQuote,
    FeaturedQuoteRequest,
    FeaturedStats,
    ListDisplayRequest,
    ListTravelFeaturedRequest,
    PurchaseFeaturedRequest,
)
from ..services.featured_service import FeaturedService
from ..services.idempotency_service import IdempotencyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/featured", tags=["featured"])


@router.post("/quote", response_model=FeaturedQuote)
async def quote(
    request: FeaturedQuoteRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Credit cost of a placement at the current platform pricing."""
    result = await FeaturedService(db).quote(request.position, request.duration)
    return JSONResponse(
        status_code=200,
        content=FeaturedQuote.model_validate(result).model_dump(mode="json")
    )


@router.post("/purchase", response_model=FeaturedPackage)
async def purchase(
    request: PurchaseFeaturedRequest,
    idempotency_key: str = IdempotencyKey,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Spend travel credits on a featured placement.

    This operation is idempotent based on the Idempotency-Key header, so a
    retried request never spends credits twice.
    """
    featured_service = FeaturedService(db)

    async def purchase_operation():
        featured = await featured_service.purchase(user, request)
        return FeaturedPackage.model_validate(featured).model_dump(mode="json")

    try:
        return await IdempotencyService(db).execute(
            "featured/purchase",
            idempotency_key,
            request.model_dump(mode="json"),
            purchase_operation,
            user_id=user.user_id,
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in featured purchase",
            extra={
                "travel_id": str(request.travel_id),
                "package_id": str(request.package_id),
                "position": request.position.value,
                "error": str(e),
            },
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/cancel", response_model=FeaturedPackage)
async def cancel(
    request: FeaturedIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    featured = await FeaturedService(db).cancel(user, request.featured_id)
    return JSONResponse(
        status_code=200,
        content=FeaturedPackage.model_validate(featured).model_dump(mode="json")
    )


@router.post("/display", response_model=FeaturedDisplayList)
async def list_display(
    request: ListDisplayRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Live placements for one storefront position, highest priority first."""
    items = await FeaturedService(db).list_display(request.position, limit=request.limit)
    response_data = FeaturedDisplayList(
        position=request.position,
        items=[FeaturedDisplayItem.model_validate(item) for item in items],
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/list-travel", response_model=FeaturedList)
async def list_travel_featured(
    request: ListTravelFeaturedRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    placements = await FeaturedService(db).list_travel_featured(user, request)
    response_data = FeaturedList(items=[FeaturedPackage.model_validate(p) for p in placements])
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/stats", response_model=FeaturedStats)
async def stats(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    result = await FeaturedService(db).stats()
    return JSONResponse(
        status_code=200,
        content=FeaturedStats.model_validate(result).model_dump(mode="json")
    )
