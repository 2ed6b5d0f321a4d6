"""Deterministic umroh package recommendation from pilgrim preferences."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.package import Departure, DepartureStatus, Package, PackageType
from ..models.travel import Travel
from ..schemas.recommendation import FlightPreference, RecommendationRequest

logger = logging.getLogger(__name__)

BASE_SCORE = 50
HOTEL_MATCH_BONUS = 20
MISSING_STAR_PENALTY = 10
FLIGHT_MATCH_BONUS = 15
RATING_WEIGHT = 3
VERIFIED_BONUS = 10

TOP_RECOMMENDATIONS = 3
DEPARTURES_PER_RECOMMENDATION = 3

UNAVAILABLE_STATUSES = (DepartureStatus.FULL.value, DepartureStatus.CANCELLED.value)

SUMMARY_FOUND = "Berikut adalah paket-paket terbaik berdasarkan preferensi Anda."
SUMMARY_EMPTY = "Tidak ada paket yang sesuai dengan preferensi Anda. Coba ubah kriteria pencarian."


def score_package(package: Package, travel: Travel, preferences: RecommendationRequest) -> int:
    """Match score in 0..100 for a package against the preferences."""
    score = float(BASE_SCORE)

    if package.hotel_star >= preferences.hotel_star:
        score += HOTEL_MATCH_BONUS
    else:
        score -= (preferences.hotel_star - package.hotel_star) * MISSING_STAR_PENALTY

    if preferences.flight_type != FlightPreference.ANY and package.flight_type == preferences.flight_type.value:
        score += FLIGHT_MATCH_BONUS

    score += (travel.rating or 0) * RATING_WEIGHT
    if travel.verified:
        score += VERIFIED_BONUS

    return int(round(min(100.0, max(0.0, score))))


def build_reasoning(package: Package, travel: Travel, preferences: RecommendationRequest) -> str:
    reasons = []
    if package.hotel_star >= preferences.hotel_star:
        reasons.append(f"Hotel {package.hotel_star} bintang sesuai dengan preferensi Anda")
    if travel.verified:
        reasons.append("Travel agent terverifikasi")
    if travel.rating and travel.rating >= 4:
        reasons.append(f"Rating tinggi ({travel.rating:g}/5)")
    if package.flight_type == "direct":
        reasons.append("Penerbangan langsung")
    if not reasons:
        reasons.append("Paket ini sesuai dengan budget dan durasi yang Anda inginkan")
    return ". ".join(reasons) + "."


def open_departures(package: Package) -> list[Departure]:
    return [d for d in package.departures if d.status not in UNAVAILABLE_STATUSES]


def matches_preferences(package: Package, preferences: RecommendationRequest) -> bool:
    if not preferences.duration.min <= package.duration_days <= preferences.duration.max:
        return False
    if preferences.hotel_star > 0 and package.hotel_star < preferences.hotel_star:
        return False
    if preferences.flight_type != FlightPreference.ANY and package.flight_type != preferences.flight_type.value:
        return False
    return any(
        preferences.budget.min <= d.price <= preferences.budget.max for d in open_departures(package)
    )


class RecommendationService:
    """Ranks active umroh packages against a pilgrim's preferences."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def recommend(self, preferences: RecommendationRequest) -> dict:
        stmt = (
            select(Package)
            .join(Travel, Package.travel_id == Travel.id)
            .where(
                Package.is_active.is_(True),
                Package.package_type == PackageType.UMROH.value,
                Travel.is_active.is_(True),
            )
            .options(selectinload(Package.travel), selectinload(Package.departures))
            .order_by(Package.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        candidates = [p for p in result.scalars().all() if matches_preferences(p, preferences)]

        scored = []
        for package in candidates:
            departures = sorted(open_departures(package), key=lambda d: d.price)
            scored.append({
                "package": package,
                "travel": package.travel,
                "score": score_package(package, package.travel, preferences),
                "reasoning": build_reasoning(package, package.travel, preferences),
                "lowest_price": departures[0].price if departures else None,
                "departures": sorted(departures[:DEPARTURES_PER_RECOMMENDATION], key=lambda d: d.departure_date),
            })

        # Stable sort keeps newest first among equal scores
        scored.sort(key=lambda item: item["score"], reverse=True)

        logger.info(
            "Recommendations computed",
            extra={"candidates": len(candidates), "budget_max": preferences.budget.max}
        )
        return {
            "recommendations": scored[:TOP_RECOMMENDATIONS],
            "summary": SUMMARY_FOUND if candidates else SUMMARY_EMPTY,
            "total_matches": len(candidates),
        }
