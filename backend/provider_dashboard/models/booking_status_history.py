from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow
from .booking_status import BookingStatus
from .types import CaseInsensitiveEnum


class BookingStatusHistory(BaseModel):
    """Append-only audit trail of applied status transitions."""

    __tablename__ = "booking_status_history"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    from_status = Column(CaseInsensitiveEnum(BookingStatus, name="bookingstatus"), nullable=True)
    status = Column(CaseInsensitiveEnum(BookingStatus, name="bookingstatus"), nullable=False)
    changed_by = Column(Integer, ForeignKey("providers.id"), nullable=True)
    reason = Column(Text, nullable=True)
    changed_at = Column(DateTime, nullable=False, default=utcnow)

    booking = relationship("Booking", back_populates="status_history")
