"""Membership router for agent plan upgrades."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, AgentAuth, CurrentUser, DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.membership import (
    CurrentMembership,
    ListMembershipsRequest,
    Membership,
    MembershipList,
    MembershipPlanList,
    RequestMembershipRequest,
    ReviewMembershipRequest,
    TravelIdRequest,
)
from ..services.membership_service import MembershipService
from ..services.travel_service import TravelService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/membership", tags=["membership"])


def _membership_response(membership) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=Membership.model_validate(membership).model_dump(mode="json")
    )


@router.post("/plans", response_model=MembershipPlanList)
async def list_plans(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Static plan catalogue with prices and limits."""
    response_data = MembershipPlanList(items=MembershipService(db).list_plans())
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/request", response_model=Membership)
async def request_membership(
    request: RequestMembershipRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await TravelService(db).get_managed_travel(user, request.travel_id)
    membership = await MembershipService(db).request_membership(
        request.travel_id,
        request.plan,
        payment_proof_url=request.payment_proof_url,
        notes=request.notes,
    )
    return _membership_response(membership)


@router.post("/review", response_model=Membership)
async def review_membership(
    request: ReviewMembershipRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Approve or reject a pending membership.

    Approval grants the plan's monthly credits in the same transaction.
    """
    try:
        membership = await MembershipService(db).review_membership(
            request.membership_id,
            request.approve,
            reviewer_id=user.user_id,
            notes=request.notes,
            duration_days=request.duration_days,
        )
        return _membership_response(membership)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error reviewing membership",
            extra={"membership_id": str(request.membership_id), "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/current", response_model=CurrentMembership)
async def current_membership(
    request: TravelIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await TravelService(db).get_managed_travel(user, request.travel_id)
    result = await MembershipService(db).current_membership(request.travel_id)
    return JSONResponse(
        status_code=200,
        content=CurrentMembership.model_validate(result).model_dump(mode="json")
    )


@router.post("/list", response_model=MembershipList)
async def list_memberships(
    request: ListMembershipsRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    memberships, total = await MembershipService(db).list_memberships(
        status=request.status.value if request.status else None,
        limit=request.limit,
        offset=request.offset,
    )
    response_data = MembershipList(
        items=[Membership.model_validate(m) for m in memberships],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
