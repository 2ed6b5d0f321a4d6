"""Package router for itineraries, departures and the public catalogue."""

import logging
from datetime import date

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AgentAuth, CurrentUser, DatabaseSession
from ..schemas.package import (
    AddDepartureRequest,
    CreatePackageRequest,
    Departure,
    ListTravelPackagesRequest,
    PackageDetail,
    PackageIdRequest,
    PackageList,
    PackageListItem,
    SearchPackagesRequest,
    UpdateDepartureRequest,
    UpdatePackageRequest,
)
from ..services.package_service import PackageService, is_bookable, lowest_bookable_price

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/package", tags=["package"])


def _detail_response(package) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=PackageDetail.model_validate(package).model_dump(mode="json")
    )


def _to_list_item(package, today: date) -> PackageListItem:
    """Catalogue card: package fields plus the cheapest and next bookable departure."""
    bookable = [d for d in package.departures if is_bookable(d, today)]
    return PackageListItem(
        **PackageDetail.model_validate(package).model_dump(exclude={"departures"}),
        lowest_price=lowest_bookable_price(package.departures, today),
        next_departure_date=bookable[0].departure_date if bookable else None,
    )


def _list_response(packages, total: int, limit: int, offset: int) -> JSONResponse:
    today = date.today()
    response_data = PackageList(
        items=[_to_list_item(p, today) for p in packages],
        total=total,
        limit=limit,
        offset=offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/create", response_model=PackageDetail)
async def create_package(
    request: CreatePackageRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Publish a package for a travel the caller manages.

    Fails with a plan limit problem when the travel's membership allows no
    more active packages.
    """
    package = await PackageService(db).create_package(user, request)
    return _detail_response(package)


@router.post("/update", response_model=PackageDetail)
async def update_package(
    request: UpdatePackageRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    package = await PackageService(db).update_package(user, request)
    return _detail_response(package)


@router.post("/deactivate", response_model=PackageDetail)
async def deactivate_package(
    request: PackageIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    package = await PackageService(db).deactivate_package(user, request.package_id)
    return _detail_response(package)


@router.post("/get", response_model=PackageDetail)
async def get_package(
    request: PackageIdRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Public package page with its travel and departures ordered by date."""
    package = await PackageService(db).get_public_package(request.package_id)
    return _detail_response(package)


@router.post("/search", response_model=PackageList)
async def search_packages(
    request: SearchPackagesRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    packages, total = await PackageService(db).search_packages(request)

    logger.debug(
        "Package search",
        extra={"total": total, "sort": request.sort.value, "search": request.search}
    )
    return _list_response(packages, total, request.limit, request.offset)


@router.post("/list-travel", response_model=PackageList)
async def list_travel_packages(
    request: ListTravelPackagesRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    packages, total = await PackageService(db).list_travel_packages(user, request)
    return _list_response(packages, total, request.limit, request.offset)


@router.post("/departure/add", response_model=Departure)
async def add_departure(
    request: AddDepartureRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    departure = await PackageService(db).add_departure(user, request)
    return JSONResponse(
        status_code=200,
        content=Departure.model_validate(departure).model_dump(mode="json")
    )


@router.post("/departure/update", response_model=Departure)
async def update_departure(
    request: UpdateDepartureRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    departure = await PackageService(db).update_departure(user, request)
    return JSONResponse(
        status_code=200,
        content=Departure.model_validate(departure).model_dump(mode="json")
    )
