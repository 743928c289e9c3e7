# backend/provider_dashboard/models/booking.py

from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import relationship

from .base import BaseModel
from .booking_status import BookingStatus, TipStatus
from .types import CaseInsensitiveEnum


class Booking(BaseModel):
    __tablename__ = "bookings"

    id             = Column(Integer, primary_key=True, index=True)
    business_id    = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    provider_id    = Column(Integer, ForeignKey("providers.id"), nullable=True, index=True)
    customer_id    = Column(Integer, nullable=False, index=True)
    service_id     = Column(Integer, nullable=True, index=True)
    booking_reference = Column(String, nullable=True, index=True)
    booking_date   = Column(Date, nullable=False, index=True)
    start_time     = Column(Time, nullable=False)
    end_time       = Column(Time, nullable=True)
    booking_status = Column(
        CaseInsensitiveEnum(BookingStatus, name="bookingstatus"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    total_amount   = Column(Numeric(10, 2), nullable=False, default=0)
    tip_amount     = Column(Numeric(10, 2), nullable=True)
    tip_status     = Column(
        CaseInsensitiveEnum(TipStatus, name="tipstatus"),
        nullable=False,
        default=TipStatus.NOT_REQUESTED,
    )
    original_booking_date = Column(Date, nullable=True)
    original_booking_time = Column(Time, nullable=True)
    special_instructions  = Column(Text, nullable=True)
    decline_reason = Column(Text, nullable=True)
    # Bumped on every UPDATE; a mismatch at flush time raises StaleDataError.
    version_id     = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    business       = relationship("Business", back_populates="bookings")
    provider       = relationship("Provider")
    status_history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        order_by="BookingStatusHistory.id",
    )
