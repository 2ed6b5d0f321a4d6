"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.booking import BookingStatus, PaymentType, ReminderType
from .common import PageInfo, PageRequest


class PaymentScheduleInput(BaseModel):
    """One installment of a booking's payment plan."""

    payment_type: PaymentType = Field(..., description="dp, installment or final")
    amount: int = Field(..., gt=0, description="Amount in rupiah")
    due_date: date = Field(..., description="Due date")
    notes: Optional[str] = Field(None, max_length=500)


class CreateBookingRequest(BaseModel):
    """Request schema for booking a package departure."""

    package_id: UUID = Field(..., description="Package to book")
    departure_id: Optional[UUID] = Field(None, description="Departure to book seats on")
    number_of_pilgrims: int = Field(1, ge=1, le=50, description="Number of pilgrims")
    contact_name: str = Field(..., min_length=2, max_length=255)
    contact_phone: str = Field(..., min_length=8, max_length=32)
    contact_email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, max_length=2000)
    total_price: Optional[int] = Field(
        None, ge=0, description="Defaults to departure price times pilgrims"
    )
    payment_schedules: list[PaymentScheduleInput] = Field(default_factory=list, max_length=24)


class UpdateBookingStatusRequest(BaseModel):
    booking_id: UUID
    status: BookingStatus
    agent_notes: Optional[str] = Field(None, max_length=2000)


class BookingIdRequest(BaseModel):
    booking_id: UUID = Field(..., description="Booking ID")


class RecordPaymentRequest(BaseModel):
    """Request schema for marking a scheduled payment as paid."""

    payment_schedule_id: UUID
    paid_amount: Optional[int] = Field(None, gt=0, description="Defaults to the scheduled amount")
    payment_proof_url: Optional[str] = Field(None, max_length=1024)
    notes: Optional[str] = Field(None, max_length=500)


class ListUserBookingsRequest(PageRequest):
    status: Optional[BookingStatus] = None


class ListTravelBookingsRequest(PageRequest):
    travel_id: UUID
    status: Optional[BookingStatus] = None
    search: Optional[str] = Field(None, max_length=100, description="Booking code or contact name/phone")


class TravelIdRequest(BaseModel):
    travel_id: UUID


class NotificationIdRequest(BaseModel):
    notification_id: UUID


class PaymentSchedule(BaseModel):
    """Payment schedule response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    payment_type: PaymentType
    amount: int
    due_date: date
    is_paid: bool
    paid_at: Optional[datetime] = None
    paid_amount: Optional[int] = None
    payment_proof_url: Optional[str] = None
    notes: Optional[str] = None


class Booking(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    package_id: UUID
    departure_id: Optional[UUID] = None
    travel_id: UUID
    booking_code: str
    status: BookingStatus
    number_of_pilgrims: int
    total_price: int
    paid_amount: int
    remaining_amount: int
    contact_name: str
    contact_phone: str
    contact_email: Optional[str] = None
    notes: Optional[str] = None
    agent_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BookingDetail(Booking):
    """Booking with its payment plan and progress percentage."""

    payment_schedules: list[PaymentSchedule]
    payment_progress: int = Field(..., ge=0, le=100)


class BookingList(PageInfo):
    items: list[BookingDetail]


class UpcomingPayment(BaseModel):
    """Unpaid schedule entry with enough context to show in a reminder list."""

    payment_schedule_id: UUID
    booking_id: UUID
    booking_code: str
    package_name: str
    travel_name: str
    payment_type: PaymentType
    amount: int
    due_date: date
    is_overdue: bool
    days_until_due: int


class PaymentStats(BaseModel):
    travel_id: UUID
    total_bookings: int
    pending_payments: int = Field(..., description="Unpaid schedules due today or later")
    overdue_payments: int = Field(..., description="Unpaid schedules past their due date")
    total_paid: int
    total_remaining: int


class PaymentNotification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    payment_schedule_id: Optional[UUID] = None
    notification_type: ReminderType
    title: str
    body: str
    sent_at: datetime
    is_read: bool
    read_at: Optional[datetime] = None


class ReminderRunResult(BaseModel):
    """Counts of reminders written by one sweep, per reminder type."""

    run_date: date
    h7: int = 0
    h3: int = 0
    h1: int = 0
    overdue: int = 0

    @property
    def total(self) -> int:
        return self.h7 + self.h3 + self.h1 + self.overdue
