from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal, Union
from datetime import date, datetime, time
from decimal import Decimal

from ..models.booking_status import BookingStatus, TipStatus, TERMINAL_STATUSES
from .finance import ChargeSplit


def _lower(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class BookingRecord(BaseModel):
    """Normalized, immutable view of a booking row.

    Every rule in ``services`` reads bookings through this shape; rows coming
    from the store are mapped once with :meth:`from_orm_booking`.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    business_id: int
    provider_id: Optional[int] = None
    customer_id: int
    service_id: Optional[int] = None
    booking_reference: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: Optional[time] = None
    booking_status: BookingStatus = BookingStatus.PENDING
    total_amount: Decimal = Decimal("0")
    tip_amount: Optional[Decimal] = None
    tip_status: TipStatus = TipStatus.NOT_REQUESTED
    original_booking_date: Optional[date] = None
    original_booking_time: Optional[time] = None
    special_instructions: Optional[str] = None
    decline_reason: Optional[str] = None
    version_id: int = 1

    @field_validator("booking_status", "tip_status", mode="before")
    def normalize_enums(cls, v):
        return _lower(v)

    @field_validator("total_amount", mode="before")
    def default_amount(cls, v):
        return Decimal("0") if v is None else v

    @classmethod
    def from_orm_booking(cls, booking) -> "BookingRecord":
        return cls.model_validate(booking)

    @property
    def has_provider(self) -> bool:
        return self.provider_id is not None

    @property
    def is_rescheduled(self) -> bool:
        return self.original_booking_date is not None or self.original_booking_time is not None

    @property
    def is_terminal(self) -> bool:
        return self.booking_status in TERMINAL_STATUSES


class StatusAction(BaseModel):
    label: str
    status: BookingStatus
    disabled: bool = False
    tooltip: Optional[str] = None


class StatusChangeRequest(BaseModel):
    status: BookingStatus
    reason: Optional[str] = None
    custom_reason: Optional[str] = None
    expected_version: Optional[int] = Field(default=None, ge=1)

    @field_validator("status", mode="before")
    def normalize_status(cls, v):
        return _lower(v)


class AssignRequest(BaseModel):
    provider_id: Union[int, Literal["unassigned"], None] = None
    expected_version: Optional[int] = Field(default=None, ge=1)


class BookingResponse(BaseModel):
    id: int
    business_id: int
    provider_id: Optional[int] = None
    customer_id: int
    service_id: Optional[int] = None
    booking_reference: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: Optional[time] = None
    booking_status: BookingStatus
    total_amount: Decimal
    tip_amount: Optional[Decimal] = None
    tip_status: TipStatus
    original_booking_date: Optional[date] = None
    original_booking_time: Optional[time] = None
    special_instructions: Optional[str] = None
    decline_reason: Optional[str] = None
    version_id: int
    is_rescheduled: bool = False

    model_config = {
        "from_attributes": True
    }


class BookingDetailResponse(BookingResponse):
    status_message: str
    progress: int
    actions: List[StatusAction] = []
    charge_split: ChargeSplit
    tip_split: ChargeSplit


class AssignmentResponse(BaseModel):
    booking: BookingResponse
    changed: bool
    auto_assigned: bool = False


class BookingPage(BaseModel):
    items: List[BookingResponse]
    total_pages: int
    current_page: int
    total_items: int


class BookingListResponse(BaseModel):
    scheme: str
    today: date
    buckets: dict[str, BookingPage]


class BookingStats(BaseModel):
    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    in_progress_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    completion_rate: float
    total_revenue: Decimal
    average_booking_value: Decimal


class StatusHistoryEntry(BaseModel):
    from_status: Optional[BookingStatus] = None
    status: BookingStatus
    changed_by: Optional[int] = None
    reason: Optional[str] = None
    changed_at: datetime

    model_config = {
        "from_attributes": True
    }
