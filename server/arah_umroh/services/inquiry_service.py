"""Package inquiry (lead) service."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentUser
from ..core.exceptions import InvalidStatusTransitionError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.inquiry import InquiryStatus, PackageInquiry
from ..models.package import Departure
from ..schemas.inquiry import CreateInquiryRequest, ListTravelInquiriesRequest, UpdateInquiryStatusRequest
from .package_service import PackageService
from .travel_service import TravelService

logger = logging.getLogger(__name__)

INQUIRY_TRANSITIONS: dict[InquiryStatus, set[InquiryStatus]] = {
    InquiryStatus.PENDING: {InquiryStatus.CONTACTED, InquiryStatus.CONVERTED, InquiryStatus.CANCELLED},
    InquiryStatus.CONTACTED: {InquiryStatus.CONVERTED, InquiryStatus.CANCELLED},
    InquiryStatus.CONVERTED: set(),
    InquiryStatus.CANCELLED: set(),
}


def conversion_rate(converted: int, total: int) -> float:
    """Converted leads as a percentage of all leads, one decimal place."""
    if total <= 0:
        return 0.0
    return round(converted / total * 100, 1)


class InquiryService:
    """Service for package inquiries sent to travels."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.package_service = PackageService(db)
        self.travel_service = TravelService(db)

    async def create_inquiry(self, request: CreateInquiryRequest, user_id: Optional[str] = None) -> PackageInquiry:
        """
        Record a lead for a package; the travel is taken from the package.

        Raises:
            NotFoundError: If the package is not publicly listed
            ValidationError: If the departure belongs to another package
        """
        package = await self.package_service.get_public_package(request.package_id)

        if request.departure_id is not None:
            departure = await self.db.get(Departure, request.departure_id)
            if departure is None or departure.package_id != package.id:
                raise ValidationError(
                    detail="Departure does not belong to the package",
                    errors={"departure_id": "Must be a departure of the package"},
                )

        inquiry = PackageInquiry(
            package_id=package.id,
            departure_id=request.departure_id,
            travel_id=package.travel_id,
            user_id=user_id,
            full_name=request.full_name,
            phone=request.phone,
            email=request.email,
            message=request.message,
            number_of_people=request.number_of_people,
            status=InquiryStatus.PENDING.value,
        )
        self.db.add(inquiry)
        await self.db.commit()

        metrics_collector.record_inquiry_created()
        logger.info(
            "Inquiry created",
            extra={"inquiry_id": str(inquiry.id), "package_id": str(package.id), "travel_id": str(package.travel_id)}
        )
        return inquiry

    async def get_inquiry_or_raise(self, inquiry_id: UUID) -> PackageInquiry:
        inquiry = await self.db.get(PackageInquiry, inquiry_id)
        if inquiry is None:
            raise NotFoundError(resource_type="inquiry", resource_id=str(inquiry_id))
        return inquiry

    async def list_travel_inquiries(
        self, user: CurrentUser, request: ListTravelInquiriesRequest
    ) -> tuple[list[PackageInquiry], int]:
        await self.travel_service.get_managed_travel(user, request.travel_id)

        conditions = [PackageInquiry.travel_id == request.travel_id]
        if request.status:
            conditions.append(PackageInquiry.status == request.status.value)

        total = await self.db.scalar(select(func.count()).select_from(PackageInquiry).where(*conditions))
        stmt = (
            select(PackageInquiry)
            .where(*conditions)
            .order_by(PackageInquiry.created_at.desc())
            .limit(request.limit)
            .offset(request.offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def list_user_inquiries(self, user_id: str) -> list[PackageInquiry]:
        result = await self.db.execute(
            select(PackageInquiry)
            .where(PackageInquiry.user_id == user_id)
            .order_by(PackageInquiry.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_inquiry_status(self, user: CurrentUser, request: UpdateInquiryStatusRequest) -> PackageInquiry:
        """
        Move a lead along its follow-up lifecycle.

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed
        """
        inquiry = await self.get_inquiry_or_raise(request.inquiry_id)
        await self.travel_service.get_managed_travel(user, inquiry.travel_id)

        current = InquiryStatus(inquiry.status)
        allowed = INQUIRY_TRANSITIONS[current]
        if request.status not in allowed:
            raise InvalidStatusTransitionError(
                resource_type="inquiry",
                current_status=current.value,
                requested_status=request.status.value,
                allowed=sorted(s.value for s in allowed),
            )

        inquiry.status = request.status.value
        if request.agent_notes is not None:
            inquiry.agent_notes = request.agent_notes
        if (
            request.status in (InquiryStatus.CONTACTED, InquiryStatus.CONVERTED)
            and inquiry.contacted_at is None
        ):
            inquiry.contacted_at = datetime.utcnow()

        await self.db.commit()

        logger.info(
            "Inquiry status updated",
            extra={"inquiry_id": str(inquiry.id), "from_status": current.value, "to_status": inquiry.status}
        )
        return inquiry

    async def inquiry_stats(self, user: CurrentUser, travel_id: UUID) -> dict:
        await self.travel_service.get_managed_travel(user, travel_id)

        rows = await self.db.execute(
            select(PackageInquiry.status, func.count())
            .where(PackageInquiry.travel_id == travel_id)
            .group_by(PackageInquiry.status)
        )
        by_status = {status.value: 0 for status in InquiryStatus}
        by_status.update({status: count for status, count in rows.all()})
        total = sum(by_status.values())

        return {
            "travel_id": travel_id,
            "total": total,
            "by_status": by_status,
            "conversion_rate": conversion_rate(by_status[InquiryStatus.CONVERTED.value], total),
        }
