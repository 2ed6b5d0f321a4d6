"""Package and departure service for business logic operations."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.database import acquire_advisory_lock
from ..core.dependencies import CurrentUser
from ..core.exceptions import NotFoundError, PlanLimitError, ValidationError
from ..models.package import Departure, DepartureStatus, Package
from ..models.travel import Travel
from ..schemas.package import (
    AddDepartureRequest,
    CreatePackageRequest,
    ListTravelPackagesRequest,
    PackageSort,
    SearchPackagesRequest,
    UpdateDepartureRequest,
    UpdatePackageRequest,
)
from .membership_service import MembershipService
from .travel_service import TravelService

logger = logging.getLogger(__name__)

# Departures that can still take bookings
BOOKABLE_STATUSES = (DepartureStatus.AVAILABLE.value, DepartureStatus.LIMITED.value)

# Statuses an agent sets by hand; seat changes do not override them
MANUAL_STATUSES = (DepartureStatus.WAITLIST.value, DepartureStatus.CANCELLED.value)

LIMITED_SEATS_RATIO = 0.2


def derive_departure_status(available_seats: int, total_seats: int) -> DepartureStatus:
    """Availability status from the seat counts: full, limited (20% or less left) or available."""
    if available_seats <= 0:
        return DepartureStatus.FULL
    if total_seats > 0 and available_seats <= total_seats * LIMITED_SEATS_RATIO:
        return DepartureStatus.LIMITED
    return DepartureStatus.AVAILABLE


def refresh_departure_status(departure: Departure) -> None:
    """Re-derive a departure's status after its seats changed, keeping manual statuses."""
    if departure.status in MANUAL_STATUSES:
        return
    departure.status = derive_departure_status(departure.available_seats, departure.total_seats).value


def is_bookable(departure: Departure, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return (
        departure.status in BOOKABLE_STATUSES
        and departure.available_seats > 0
        and departure.departure_date >= today
    )


def lowest_bookable_price(departures: list[Departure], today: Optional[date] = None) -> Optional[int]:
    prices = [d.price for d in departures if is_bookable(d, today)]
    return min(prices) if prices else None


def month_bounds(month: str) -> tuple[date, date]:
    """First day of a ``YYYY-MM`` month and first day of the following month."""
    year, month_number = (int(part) for part in month.split("-"))
    start = date(year, month_number, 1)
    end = date(year + 1, 1, 1) if month_number == 12 else date(year, month_number + 1, 1)
    return start, end


class PackageService:
    """Service for package and departure operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.travel_service = TravelService(db)
        self.membership_service = MembershipService(db)

    async def get_package_by_id(self, package_id: UUID, with_details: bool = False) -> Optional[Package]:
        stmt = select(Package).where(Package.id == package_id)
        if with_details:
            stmt = stmt.options(
                selectinload(Package.travel),
                selectinload(Package.departures),
            ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_package_by_id_or_raise(self, package_id: UUID, with_details: bool = False) -> Package:
        """
        Get package by ID or raise NotFoundError.

        Raises:
            NotFoundError: If package not found
        """
        package = await self.get_package_by_id(package_id, with_details=with_details)
        if not package:
            raise NotFoundError(resource_type="package", resource_id=str(package_id))
        return package

    async def get_managed_package(self, user: CurrentUser, package_id: UUID) -> Package:
        """Package the user may edit, as owner of its travel or admin."""
        package = await self.get_package_by_id_or_raise(package_id)
        await self.travel_service.get_managed_travel(user, package.travel_id)
        return package

    async def get_departure_or_raise(self, departure_id: UUID, for_update: bool = False) -> Departure:
        stmt = select(Departure).where(Departure.id == departure_id)
        if for_update:
            await acquire_advisory_lock(self.db, f"departure:{departure_id}")
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        departure = result.scalar_one_or_none()
        if not departure:
            raise NotFoundError(resource_type="departure", resource_id=str(departure_id))
        return departure

    async def _check_package_limit(self, travel_id: UUID) -> None:
        plan = await self.membership_service.get_effective_plan(travel_id)
        active = await self.membership_service.count_active_packages(travel_id)
        if active >= plan.max_packages:
            logger.warning(
                "Package creation blocked by plan limit",
                extra={"travel_id": str(travel_id), "plan": plan.id.value, "active_packages": active}
            )
            raise PlanLimitError(plan_id=plan.id.value, limit_name="max_packages", limit=plan.max_packages)

    async def create_package(self, user: CurrentUser, request: CreatePackageRequest) -> Package:
        """
        Create a package for a travel the user manages.

        Raises:
            PlanLimitError: If the travel's plan allows no more active packages
        """
        travel = await self.travel_service.get_managed_travel(user, request.travel_id)
        if not travel.is_active:
            raise ValidationError(detail="Deactivated travels cannot publish packages")

        await self._check_package_limit(travel.id)

        data = request.model_dump(mode="json", exclude={"travel_id"})
        package = Package(travel_id=travel.id, departures=[], **data)
        self.db.add(package)
        await self.db.commit()

        logger.info(
            "Package created successfully",
            extra={
                "package_id": str(package.id),
                "travel_id": str(travel.id),
                "package_type": package.package_type,
            }
        )
        return await self.get_package_by_id_or_raise(package.id, with_details=True)

    async def update_package(self, user: CurrentUser, request: UpdatePackageRequest) -> Package:
        package = await self.get_managed_package(user, request.package_id)

        changes = request.model_dump(mode="json", exclude_unset=True, exclude={"package_id"})
        if changes.get("is_active") and not package.is_active:
            await self._check_package_limit(package.travel_id)

        for field, value in changes.items():
            setattr(package, field, value)

        await self.db.commit()

        logger.info("Package updated", extra={"package_id": str(package.id), "fields": sorted(changes)})
        return await self.get_package_by_id_or_raise(package.id, with_details=True)

    async def deactivate_package(self, user: CurrentUser, package_id: UUID) -> Package:
        package = await self.get_managed_package(user, package_id)
        package.is_active = False
        await self.db.commit()

        logger.info("Package deactivated", extra={"package_id": str(package_id)})
        return await self.get_package_by_id_or_raise(package.id, with_details=True)

    async def add_departure(self, user: CurrentUser, request: AddDepartureRequest) -> Departure:
        """Schedule a departure; status is derived from seats unless given."""
        package = await self.get_managed_package(user, request.package_id)

        available = request.available_seats if request.available_seats is not None else request.total_seats
        status = request.status or derive_departure_status(available, request.total_seats)

        departure = Departure(
            package_id=package.id,
            departure_date=request.departure_date,
            return_date=request.return_date,
            price=request.price,
            original_price=request.original_price,
            total_seats=request.total_seats,
            available_seats=available,
            status=status.value,
        )
        self.db.add(departure)
        await self.db.commit()

        logger.info(
            "Departure created successfully",
            extra={
                "departure_id": str(departure.id),
                "package_id": str(package.id),
                "departure_date": departure.departure_date.isoformat(),
                "total_seats": departure.total_seats,
                "status": departure.status,
            }
        )
        return departure

    async def update_departure(self, user: CurrentUser, request: UpdateDepartureRequest) -> Departure:
        """
        Update a departure, validating dates and seats against the merged values.

        Raises:
            ValidationError: If the result has return before departure or too many seats
        """
        departure = await self.get_departure_or_raise(request.departure_id, for_update=True)
        await self.get_managed_package(user, departure.package_id)

        changes = request.model_dump(exclude_unset=True, exclude={"departure_id", "status"})
        for field, value in changes.items():
            setattr(departure, field, value)

        if departure.return_date <= departure.departure_date:
            raise ValidationError(detail="return_date must be after departure_date")
        if departure.available_seats > departure.total_seats:
            raise ValidationError(detail="available_seats cannot exceed total_seats")

        if request.status is not None and request.status.value in MANUAL_STATUSES:
            departure.status = request.status.value
        elif request.status is not None:
            # Reopening a waitlisted or cancelled departure
            departure.status = derive_departure_status(departure.available_seats, departure.total_seats).value
        else:
            refresh_departure_status(departure)

        await self.db.commit()

        logger.info(
            "Departure updated",
            extra={"departure_id": str(departure.id), "status": departure.status, "fields": sorted(changes)}
        )
        return departure

    async def get_public_package(self, package_id: UUID) -> Package:
        """Active package of an active travel, with its travel and departures."""
        package = await self.get_package_by_id_or_raise(package_id, with_details=True)
        if not package.is_active or not package.travel.is_active:
            raise NotFoundError(resource_type="package", resource_id=str(package_id))
        return package

    async def search_packages(self, request: SearchPackagesRequest) -> tuple[list[Package], int]:
        """
        Public package search over active packages of active travels.

        Price filters and price sorting consider only bookable departures.
        """
        today = date.today()
        bookable = and_(
            Departure.package_id == Package.id,
            Departure.status.in_(BOOKABLE_STATUSES),
            Departure.available_seats > 0,
            Departure.departure_date >= today,
        )

        conditions = [Package.is_active.is_(True), Travel.is_active.is_(True)]

        if request.package_type:
            conditions.append(Package.package_type == request.package_type.value)
        if request.travel_id:
            conditions.append(Package.travel_id == request.travel_id)
        if request.hotel_stars:
            conditions.append(Package.hotel_star.in_(request.hotel_stars))
        if request.flight_type:
            conditions.append(Package.flight_type == request.flight_type.value)
        if request.min_duration is not None:
            conditions.append(Package.duration_days >= request.min_duration)
        if request.max_duration is not None:
            conditions.append(Package.duration_days <= request.max_duration)
        if request.verified_only:
            conditions.append(Travel.verified.is_(True))
        if request.search:
            pattern = f"%{request.search}%"
            conditions.append(or_(Package.name.ilike(pattern), Travel.name.ilike(pattern)))

        if request.min_price is not None or request.max_price is not None:
            price_conditions = [bookable]
            if request.min_price is not None:
                price_conditions.append(Departure.price >= request.min_price)
            if request.max_price is not None:
                price_conditions.append(Departure.price <= request.max_price)
            conditions.append(exists().where(*price_conditions))

        if request.departure_month:
            start, end = month_bounds(request.departure_month)
            conditions.append(
                exists().where(
                    Departure.package_id == Package.id,
                    Departure.departure_date >= start,
                    Departure.departure_date < end,
                    Departure.status != DepartureStatus.CANCELLED.value,
                )
            )

        base = select(Package).join(Travel, Package.travel_id == Travel.id).where(*conditions)

        total = await self.db.scalar(select(func.count()).select_from(base.subquery()))

        min_price = select(func.min(Departure.price)).where(bookable).scalar_subquery()
        if request.sort == PackageSort.PRICE_ASC:
            order = [min_price.is_(None), min_price.asc(), Package.created_at.desc()]
        elif request.sort == PackageSort.PRICE_DESC:
            order = [min_price.is_(None), min_price.desc(), Package.created_at.desc()]
        else:
            order = [Package.created_at.desc()]

        stmt = (
            base.options(selectinload(Package.travel), selectinload(Package.departures))
            .order_by(*order)
            .limit(request.limit)
            .offset(request.offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def list_travel_packages(
        self, user: CurrentUser, request: ListTravelPackagesRequest
    ) -> tuple[list[Package], int]:
        """Agent dashboard listing, including inactive packages by default."""
        await self.travel_service.get_managed_travel(user, request.travel_id)

        conditions = [Package.travel_id == request.travel_id]
        if not request.include_inactive:
            conditions.append(Package.is_active.is_(True))

        total = await self.db.scalar(select(func.count()).select_from(Package).where(*conditions))
        stmt = (
            select(Package)
            .where(*conditions)
            .options(selectinload(Package.travel), selectinload(Package.departures))
            .order_by(Package.created_at.desc())
            .limit(request.limit)
            .offset(request.offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0
