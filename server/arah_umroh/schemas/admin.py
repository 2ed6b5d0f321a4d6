"""Admin dashboard Pydantic schemas."""

from pydantic import BaseModel, Field


class PlatformStats(BaseModel):
    """Headline numbers for the admin dashboard."""

    total_travels: int
    verified_travels: int
    total_packages: int
    active_packages: int
    total_bookings: int
    active_memberships: int
    pending_memberships: int
    membership_revenue: int = Field(..., description="Sum of active membership amounts in rupiah")
    pending_credit_purchases: int
    pending_feedback: int
    pending_subscriptions: int


class MaintenanceRunResult(BaseModel):
    featured_expired: int
    memberships_expired: int
    subscriptions_expired: int
