"""Recommendation router for preference-based package suggestions."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..schemas.recommendation import RecommendationRequest, RecommendationResponse
from ..services.recommendation_service import RecommendationService

router = APIRouter(prefix="/v1/recommendation", tags=["recommendation"])


@router.post("/recommend", response_model=RecommendationResponse)
async def recommend(
    request: RecommendationRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Rank active umroh packages against budget, duration, hotel and flight preferences.

    Scoring is deterministic: the same catalogue and preferences always give
    the same top three.
    """
    result = await RecommendationService(db).recommend(request)
    return JSONResponse(
        status_code=200,
        content=RecommendationResponse.model_validate(result).model_dump(mode="json")
    )
