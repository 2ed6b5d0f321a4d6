"""Subscription router for pilgrim premium plans."""

from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession, RequiredAuth
from ..schemas.subscription import (
    CreateSubscriptionPlanRequest,
    ListSubscriptionsRequest,
    RequestSubscriptionRequest,
    SubscriptionPlan,
    SubscriptionPlanList,
    SubscriptionStatusResponse,
    UpdateSubscriptionPlanRequest,
    UserSubscription,
    UserSubscriptionList,
    VerifySubscriptionRequest,
)
from ..services.subscription_service import SubscriptionService, is_subscription_active

router = APIRouter(prefix="/v1/subscription", tags=["subscription"])


def _subscription_response(subscription) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=UserSubscription.model_validate(subscription).model_dump(mode="json")
    )


@router.post("/plans", response_model=SubscriptionPlanList)
async def list_plans(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Active plans, cheapest first."""
    plans = await SubscriptionService(db).list_plans()
    response_data = SubscriptionPlanList(items=[SubscriptionPlan.model_validate(p) for p in plans])
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/plan/create", response_model=SubscriptionPlan)
async def create_plan(
    request: CreateSubscriptionPlanRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    plan = await SubscriptionService(db).create_plan(request)
    return JSONResponse(
        status_code=200,
        content=SubscriptionPlan.model_validate(plan).model_dump(mode="json")
    )


@router.post("/plan/update", response_model=SubscriptionPlan)
async def update_plan(
    request: UpdateSubscriptionPlanRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    plan = await SubscriptionService(db).update_plan(request)
    return JSONResponse(
        status_code=200,
        content=SubscriptionPlan.model_validate(plan).model_dump(mode="json")
    )


@router.post("/request", response_model=UserSubscription)
async def request_subscription(
    request: RequestSubscriptionRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Submit payment proof for a plan; the request waits for admin verification."""
    subscription = await SubscriptionService(db).request_subscription(user.user_id, request)
    return _subscription_response(subscription)


@router.post("/mine", response_model=SubscriptionStatusResponse)
async def my_subscription(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    subscription = await SubscriptionService(db).get_user_subscription(user.user_id)
    response_data = SubscriptionStatusResponse(
        is_premium=is_subscription_active(subscription, datetime.utcnow()),
        subscription=UserSubscription.model_validate(subscription) if subscription else None,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/verify", response_model=UserSubscription)
async def verify_subscription(
    request: VerifySubscriptionRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    subscription = await SubscriptionService(db).verify_subscription(request, admin_id=user.user_id)
    return _subscription_response(subscription)


@router.post("/list", response_model=UserSubscriptionList)
async def list_subscriptions(
    request: ListSubscriptionsRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    subscriptions, total = await SubscriptionService(db).list_subscriptions(
        status=request.status.value if request.status else None,
        limit=request.limit,
        offset=request.offset,
    )
    response_data = UserSubscriptionList(
        items=[UserSubscription.model_validate(s) for s in subscriptions],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
