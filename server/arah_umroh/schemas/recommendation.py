"""Package recommendation Pydantic schemas."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .package import Departure, Package, TravelSummary


class FlightPreference(str, Enum):
    DIRECT = "direct"
    TRANSIT = "transit"
    ANY = "any"


class Range(BaseModel):
    min: int = Field(0, ge=0)
    max: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "Range":
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class RecommendationRequest(BaseModel):
    """Pilgrim preferences used to rank umroh packages."""

    budget: Range = Field(..., description="Price range per pilgrim in rupiah")
    duration: Range = Field(default_factory=lambda: Range(min=1, max=60), description="Trip length in days")
    hotel_star: int = Field(0, ge=0, le=5, description="Minimum hotel star; 0 for no preference")
    flight_type: FlightPreference = FlightPreference.ANY


class Recommendation(BaseModel):
    package: Package
    travel: TravelSummary
    score: int = Field(..., ge=0, le=100)
    reasoning: str
    lowest_price: Optional[int] = None
    departures: list[Departure]


class RecommendationResponse(BaseModel):
    recommendations: list[Recommendation]
    summary: str
    total_matches: int
