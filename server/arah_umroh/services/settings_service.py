"""Platform settings service with typed accessors for known keys."""

import copy
import logging
from typing import Any, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError
from ..models.setting import PlatformSetting
from ..schemas.setting import FeaturedLimits, FeaturedPricing, FreeCredits

logger = logging.getLogger(__name__)

FEATURED_PACKAGE_PRICING = "featured_package_pricing"
FEATURED_PACKAGE_LIMITS = "featured_package_limits"
CREDIT_PRICES = "credit_prices"
FREE_CREDITS_ON_REGISTER = "free_credits_on_register"

DEFAULT_SETTINGS: dict[str, Any] = {
    FEATURED_PACKAGE_PRICING: FeaturedPricing().model_dump(),
    FEATURED_PACKAGE_LIMITS: FeaturedLimits().model_dump(),
    # Pack size -> price in rupiah
    CREDIT_PRICES: {"1": 50000, "5": 200000, "10": 350000, "25": 750000},
    FREE_CREDITS_ON_REGISTER: FreeCredits().model_dump(),
}

_TYPED_SETTINGS: dict[str, type[BaseModel]] = {
    FEATURED_PACKAGE_PRICING: FeaturedPricing,
    FEATURED_PACKAGE_LIMITS: FeaturedLimits,
    FREE_CREDITS_ON_REGISTER: FreeCredits,
}


def parse_credit_prices(value: Any) -> dict[int, int]:
    """
    Normalize a ``credit_prices`` value to ``{credits: price}``.

    Raises:
        ValueError: If a key or price is not a positive integer
    """
    if not isinstance(value, dict) or not value:
        raise ValueError("credit_prices must be a non-empty object of pack size to price")

    prices: dict[int, int] = {}
    for credits, price in value.items():
        credits_int = int(credits)
        price_int = int(price)
        if credits_int <= 0 or price_int < 0:
            raise ValueError(f"Invalid credit pack {credits!r}: {price!r}")
        prices[credits_int] = price_int
    return dict(sorted(prices.items()))


class SettingsService:
    """Service for reading and writing platform settings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_setting_row(self, key: str) -> Optional[PlatformSetting]:
        stmt = select(PlatformSetting).where(PlatformSetting.key == key)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, key: str) -> Any:
        """Return the stored value for ``key``, falling back to the built-in default."""
        row = await self.get_setting_row(key)
        if row is not None:
            return row.value
        return copy.deepcopy(DEFAULT_SETTINGS.get(key))

    async def set(self, key: str, value: Any, description: Optional[str] = None) -> PlatformSetting:
        """
        Create or replace a setting.

        Known keys are validated against their schema before being stored.

        Raises:
            ValidationError: If the value does not fit the key's schema
        """
        value = self._validate(key, value)

        row = await self.get_setting_row(key)
        if row is None:
            row = PlatformSetting(key=key, value=value, description=description)
            self.db.add(row)
        else:
            row.value = value
            if description is not None:
                row.description = description

        await self.db.commit()

        logger.info("Platform setting updated", extra={"key": key})
        return row

    async def list_settings(self) -> list[dict[str, Any]]:
        """All stored settings plus defaults for known keys that were never stored."""
        result = await self.db.execute(select(PlatformSetting).order_by(PlatformSetting.key))
        rows = list(result.scalars().all())
        stored_keys = {row.key for row in rows}

        items = [
            {
                "key": row.key,
                "value": row.value,
                "description": row.description,
                "is_default": False,
                "updated_at": row.updated_at,
            }
            for row in rows
        ]
        for key, value in DEFAULT_SETTINGS.items():
            if key not in stored_keys:
                items.append({"key": key, "value": copy.deepcopy(value), "is_default": True})

        return sorted(items, key=lambda item: item["key"])

    def _validate(self, key: str, value: Any) -> Any:
        try:
            if key == CREDIT_PRICES:
                return {str(credits): price for credits, price in parse_credit_prices(value).items()}
            model = _TYPED_SETTINGS.get(key)
            if model is not None:
                return model.model_validate(value).model_dump()
        except (PydanticValidationError, ValueError, TypeError) as e:
            raise ValidationError(detail=f"Invalid value for setting '{key}': {e}")
        return value

    # Typed accessors

    async def get_featured_pricing(self) -> FeaturedPricing:
        return FeaturedPricing.model_validate(await self.get(FEATURED_PACKAGE_PRICING))

    async def get_featured_limits(self) -> FeaturedLimits:
        return FeaturedLimits.model_validate(await self.get(FEATURED_PACKAGE_LIMITS))

    async def get_free_credits(self) -> FreeCredits:
        return FreeCredits.model_validate(await self.get(FREE_CREDITS_ON_REGISTER))

    async def get_credit_prices(self) -> dict[int, int]:
        return parse_credit_prices(await self.get(CREDIT_PRICES))
