from pydantic import BaseModel, Field
from typing import Dict, Literal, Optional
from datetime import date, datetime
from decimal import Decimal

from ..models.payout import PayoutMethod, PayoutStatus


class ChargeSplit(BaseModel):
    gross: Decimal
    platform_fee: Decimal
    provider_net: Decimal


class PaymentTransaction(BaseModel):
    booking_id: int
    kind: Literal["service", "tip"]
    gross_amount: Decimal
    platform_fee: Decimal
    provider_net: Decimal


class PayoutQuote(BaseModel):
    amount: Decimal
    fee: Decimal
    net: Decimal
    method: PayoutMethod
    settlement: str


class PayoutRequest(BaseModel):
    amount: str | Decimal | float | int = Field(..., description="Requested gross payout amount")
    method: PayoutMethod = PayoutMethod.STANDARD


class PayoutReceipt(BaseModel):
    payout_id: int
    external_transaction_id: str
    estimated_arrival: datetime
    status: PayoutStatus
    quote: PayoutQuote


class PayoutResponse(BaseModel):
    id: int
    amount: Decimal
    fee: Decimal
    net_amount: Decimal
    currency: str
    method: PayoutMethod
    status: PayoutStatus
    external_transaction_id: Optional[str] = None
    estimated_arrival: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class BalanceResponse(BaseModel):
    business_id: int
    available_balance: Decimal
    currency: str


class RevenueSummary(BaseModel):
    period_start: date
    period_end: date
    total_revenue: Decimal
    platform_fees: Decimal
    provider_net: Decimal
    total_bookings: int
    completed_bookings: int
    bookings_by_status: Dict[str, int]
    average_order_value: Decimal
    completion_rate: float
    previous_period_revenue: Decimal
    revenue_change: float
    bookings_change: float
