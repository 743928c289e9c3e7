import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class PayoutMethod(str, enum.Enum):
    STANDARD = "standard"
    INSTANT = "instant"


class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    PAID = "paid"
    FAILED = "failed"


class Payout(BaseModel):
    __tablename__ = "payouts"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    requested_by = Column(Integer, ForeignKey("providers.id"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    fee = Column(Numeric(10, 2), nullable=False, default=0)
    net_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    method = Column(CaseInsensitiveEnum(PayoutMethod, name="payoutmethod"), nullable=False)
    status = Column(
        CaseInsensitiveEnum(PayoutStatus, name="payoutstatus"),
        nullable=False,
        default=PayoutStatus.PENDING,
        index=True,
    )
    external_transaction_id = Column(String, nullable=True, unique=True)
    estimated_arrival = Column(DateTime, nullable=True)

    business = relationship("Business", back_populates="payouts")
