"""Package and departure Pydantic schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.package import DepartureStatus, FlightType, MealType, PackageType
from .common import PageInfo, PageRequest, reject_null


class PackageSort(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class CreatePackageRequest(BaseModel):
    """Request schema for creating a package."""

    travel_id: UUID = Field(..., description="Owning travel")
    name: str = Field(..., min_length=3, max_length=255, description="Package name")
    description: Optional[str] = Field(None, max_length=10000)
    package_type: PackageType = Field(PackageType.UMROH, description="Pilgrimage type")
    duration_days: int = Field(..., ge=1, le=60, description="Trip length in days")
    hotel_makkah: Optional[str] = Field(None, max_length=255)
    hotel_madinah: Optional[str] = Field(None, max_length=255)
    hotel_star: int = Field(3, ge=1, le=5, description="Hotel star rating")
    airline: Optional[str] = Field(None, max_length=255)
    flight_type: FlightType = FlightType.DIRECT
    meal_type: MealType = MealType.FULLBOARD
    facilities: list[str] = Field(default_factory=list, max_length=50)
    images: list[str] = Field(default_factory=list, max_length=20)


class UpdatePackageRequest(BaseModel):
    """Partial package update; omitted fields are left untouched."""

    package_id: UUID
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    package_type: Optional[PackageType] = None
    duration_days: Optional[int] = Field(None, ge=1, le=60)
    hotel_makkah: Optional[str] = Field(None, max_length=255)
    hotel_madinah: Optional[str] = Field(None, max_length=255)
    hotel_star: Optional[int] = Field(None, ge=1, le=5)
    airline: Optional[str] = Field(None, max_length=255)
    flight_type: Optional[FlightType] = None
    meal_type: Optional[MealType] = None
    facilities: Optional[list[str]] = Field(None, max_length=50)
    images: Optional[list[str]] = Field(None, max_length=20)
    is_active: Optional[bool] = None

    @field_validator(
        "name", "package_type", "duration_days", "hotel_star", "flight_type",
        "meal_type", "facilities", "images", "is_active",
    )
    @classmethod
    def fields_not_null(cls, value):
        return reject_null(value)


class PackageIdRequest(BaseModel):
    package_id: UUID = Field(..., description="Package ID")


class AddDepartureRequest(BaseModel):
    """Request schema for scheduling a departure."""

    package_id: UUID
    departure_date: date
    return_date: date
    price: int = Field(..., ge=0, description="Price per pilgrim in rupiah")
    original_price: Optional[int] = Field(None, ge=0, description="Pre-discount price in rupiah")
    total_seats: int = Field(..., ge=0, le=1000)
    available_seats: Optional[int] = Field(None, ge=0, description="Defaults to total_seats")
    status: Optional[DepartureStatus] = Field(None, description="Derived from seats when omitted")

    @model_validator(mode="after")
    def check_dates_and_seats(self) -> "AddDepartureRequest":
        if self.return_date <= self.departure_date:
            raise ValueError("return_date must be after departure_date")
        if self.available_seats is not None and self.available_seats > self.total_seats:
            raise ValueError("available_seats cannot exceed total_seats")
        return self


class UpdateDepartureRequest(BaseModel):
    departure_id: UUID
    departure_date: Optional[date] = None
    return_date: Optional[date] = None
    price: Optional[int] = Field(None, ge=0)
    original_price: Optional[int] = Field(None, ge=0)
    total_seats: Optional[int] = Field(None, ge=0, le=1000)
    available_seats: Optional[int] = Field(None, ge=0)
    status: Optional[DepartureStatus] = None

    @field_validator("departure_date", "return_date", "price", "total_seats", "available_seats")
    @classmethod
    def fields_not_null(cls, value):
        return reject_null(value)


class DepartureIdRequest(BaseModel):
    departure_id: UUID


class SearchPackagesRequest(PageRequest):
    """Request schema for the public package search."""

    package_type: Optional[PackageType] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    hotel_stars: list[int] = Field(default_factory=list, description="Accepted hotel star ratings")
    flight_type: Optional[FlightType] = None
    min_duration: Optional[int] = Field(None, ge=1)
    max_duration: Optional[int] = Field(None, ge=1)
    departure_month: Optional[str] = Field(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM")
    verified_only: bool = False
    search: Optional[str] = Field(None, max_length=100, description="Matches package or travel name")
    travel_id: Optional[UUID] = None
    sort: PackageSort = PackageSort.NEWEST


class ListTravelPackagesRequest(PageRequest):
    travel_id: UUID
    include_inactive: bool = True


class Departure(BaseModel):
    """Departure response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    package_id: UUID
    departure_date: date
    return_date: date
    price: int
    original_price: Optional[int] = None
    total_seats: int
    available_seats: int
    status: DepartureStatus


class TravelSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    logo_url: Optional[str] = None
    rating: float
    verified: bool


class Package(BaseModel):
    """Package response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    travel_id: UUID
    name: str
    description: Optional[str] = None
    package_type: PackageType
    duration_days: int
    hotel_makkah: Optional[str] = None
    hotel_madinah: Optional[str] = None
    hotel_star: int
    airline: Optional[str] = None
    flight_type: FlightType
    meal_type: MealType
    facilities: list[str]
    images: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PackageDetail(Package):
    """Package with its travel and departures ordered by date."""

    travel: TravelSummary
    departures: list[Departure]


class PackageListItem(Package):
    """Search result row with the travel and cheapest bookable departure."""

    travel: TravelSummary
    lowest_price: Optional[int] = None
    next_departure_date: Optional[date] = None


class PackageList(PageInfo):
    items: list[PackageListItem]
