"""Inquiry router for package leads."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AgentAuth, CurrentUser, DatabaseSession, OptionalAuth, RequiredAuth
from ..schemas.inquiry import (
    CreateInquiryRequest,
    InquiryStats,
    ListTravelInquiriesRequest,
    PackageInquiry,
    PackageInquiryList,
    TravelIdRequest,
    UpdateInquiryStatusRequest,
)
from ..services.inquiry_service import InquiryService

router = APIRouter(prefix="/v1/inquiry", tags=["inquiry"])


@router.post("/create", response_model=PackageInquiry)
async def create_inquiry(
    request: CreateInquiryRequest,
    user: Optional[CurrentUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Leave contact details for a package; login is optional."""
    inquiry = await InquiryService(db).create_inquiry(request, user_id=user.user_id if user else None)
    return JSONResponse(
        status_code=200,
        content=PackageInquiry.model_validate(inquiry).model_dump(mode="json")
    )


@router.post("/list-travel", response_model=PackageInquiryList)
async def list_travel_inquiries(
    request: ListTravelInquiriesRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    inquiries, total = await InquiryService(db).list_travel_inquiries(user, request)
    response_data = PackageInquiryList(
        items=[PackageInquiry.model_validate(i) for i in inquiries],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/mine", response_model=list[PackageInquiry])
async def list_my_inquiries(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    inquiries = await InquiryService(db).list_user_inquiries(user.user_id)
    return JSONResponse(
        status_code=200,
        content=[PackageInquiry.model_validate(i).model_dump(mode="json") for i in inquiries]
    )


@router.post("/update-status", response_model=PackageInquiry)
async def update_inquiry_status(
    request: UpdateInquiryStatusRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    inquiry = await InquiryService(db).update_inquiry_status(user, request)
    return JSONResponse(
        status_code=200,
        content=PackageInquiry.model_validate(inquiry).model_dump(mode="json")
    )


@router.post("/stats", response_model=InquiryStats)
async def inquiry_stats(
    request: TravelIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    stats = await InquiryService(db).inquiry_stats(user, request.travel_id)
    return JSONResponse(
        status_code=200,
        content=InquiryStats.model_validate(stats).model_dump(mode="json")
    )
