import enum

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class BusinessType(str, enum.Enum):
    INDEPENDENT = "independent"
    SMALL_BUSINESS = "small_business"
    FRANCHISE = "franchise"
    ENTERPRISE = "enterprise"
    OTHER = "other"


class Business(BaseModel):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String, nullable=False)
    business_type = Column(
        CaseInsensitiveEnum(BusinessType, name="businesstype"),
        nullable=False,
        default=BusinessType.SMALL_BUSINESS,
    )
    # Bumped with every recorded payout; guards the balance check.
    payout_version = Column(Integer, nullable=False, default=0, server_default="0")

    providers = relationship("Provider", back_populates="business")
    bookings = relationship("Booking", back_populates="business")
    payouts = relationship("Payout", back_populates="business")
