"""Credit balance and ledger Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.credit import CreditTransactionStatus, CreditTransactionType
from .common import PageInfo, PageRequest


class TravelIdRequest(BaseModel):
    travel_id: UUID


class CreditBalance(BaseModel):
    """Credit balance response; zero for travels that never bought credits."""

    travel_id: UUID
    credits_remaining: int = Field(..., ge=0)
    credits_used: int = Field(..., ge=0)
    last_purchase_date: Optional[datetime] = None


class CreditPrice(BaseModel):
    credits: int = Field(..., gt=0, description="Credits in the pack")
    price: int = Field(..., ge=0, description="Pack price in rupiah")


class CreditPriceList(BaseModel):
    items: list[CreditPrice]


class RequestCreditPurchaseRequest(BaseModel):
    """Request schema for buying a credit pack by manual transfer."""

    travel_id: UUID
    credits: int = Field(..., gt=0, description="Pack size; must match a listed pack")
    payment_proof_url: Optional[str] = Field(None, max_length=1024)
    notes: Optional[str] = Field(None, max_length=500)


class ReviewCreditPurchaseRequest(BaseModel):
    transaction_id: UUID
    approve: bool
    notes: Optional[str] = Field(None, max_length=500)


class GrantCreditsRequest(BaseModel):
    """Admin bonus or refund of credits."""

    travel_id: UUID
    amount: int = Field(..., gt=0, le=10000)
    package_id: Optional[UUID] = None
    notes: Optional[str] = Field(None, max_length=500)


class ListCreditTransactionsRequest(PageRequest):
    travel_id: Optional[UUID] = Field(None, description="Required for non-admin callers")
    status: Optional[CreditTransactionStatus] = None
    transaction_type: Optional[CreditTransactionType] = None


class CreditTransaction(BaseModel):
    """Credit ledger row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    travel_id: UUID
    package_id: Optional[UUID] = None
    transaction_type: CreditTransactionType
    amount: int
    status: CreditTransactionStatus
    price: Optional[int] = None
    payment_proof_url: Optional[str] = None
    notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


class CreditTransactionList(PageInfo):
    items: list[CreditTransaction]


class CreditBalanceList(PageInfo):
    items: list[CreditBalance]
