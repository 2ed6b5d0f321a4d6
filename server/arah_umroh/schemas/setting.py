"""Platform setting Pydantic schemas, including the typed shapes of known keys."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FeaturedPositionMultipliers(BaseModel):
    home: float = Field(1.5, gt=0)
    category: float = Field(1.0, gt=0)
    search: float = Field(1.2, gt=0)


class FeaturedPricing(BaseModel):
    """Value of the ``featured_package_pricing`` setting."""

    daily_credits: int = Field(5, ge=0)
    weekly_credits: int = Field(25, ge=0)
    monthly_credits: int = Field(80, ge=0)
    positions: FeaturedPositionMultipliers = Field(default_factory=FeaturedPositionMultipliers)


class FeaturedLimits(BaseModel):
    """Value of the ``featured_package_limits`` setting."""

    max_per_travel: int = Field(3, ge=0)
    max_home_total: int = Field(6, ge=0)
    max_category_total: int = Field(10, ge=0)


class FreeCredits(BaseModel):
    """Value of the ``free_credits_on_register`` setting."""

    enabled: bool = True
    amount: int = Field(3, ge=0)


class SettingKeyRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)


class SetSettingRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: Any = Field(..., description="JSON value")
    description: Optional[str] = Field(None, max_length=500)


class PlatformSetting(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: Any
    description: Optional[str] = None
    is_default: bool = False
    updated_at: Optional[datetime] = None


class PlatformSettingList(BaseModel):
    items: list[PlatformSetting]
