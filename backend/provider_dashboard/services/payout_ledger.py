from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud import crud_payout
from ..models.base import utcnow
from ..models.payout import PayoutMethod, PayoutStatus
from ..schemas.finance import PayoutQuote, PayoutReceipt
from ..utils.errors import BookingEngineError
from . import finance
from .booking_workflow import business_balance

logger = logging.getLogger(__name__)

STANDARD_SETTLEMENT_BUSINESS_DAYS = 2
INSTANT_SETTLEMENT = timedelta(minutes=30)


def add_business_days(start: datetime, days: int) -> datetime:
    current = start
    added = 0
    while added < days:
        current += timedelta(days=1)
        if current.weekday() < 5:
            added += 1
    return current


def estimate_arrival(method: PayoutMethod, requested_at: datetime) -> datetime:
    if method == PayoutMethod.INSTANT:
        return requested_at + INSTANT_SETTLEMENT
    return add_business_days(requested_at, STANDARD_SETTLEMENT_BUSINESS_DAYS)


class PayoutLedger:
    """Records payouts and reports when the money should land.

    The quote is validated again against a fresh balance in the same
    transaction as the insert; a payout recorded by someone else in between
    makes the insert fail with ``UpdateFailed``.
    """

    def __init__(self, now=None) -> None:
        self._now = now or utcnow

    def execute(
        self,
        db: Session,
        business_id: int,
        quote: PayoutQuote,
        requested_by: Optional[int] = None,
    ) -> PayoutReceipt:
        business = crud_payout.lock_business_for_payout(db, business_id)
        version = business.payout_version
        try:
            quote = finance.validate_payout_request(quote.amount, business_balance(db, business_id), quote.method)
        except BookingEngineError:
            db.rollback()
            raise
        requested_at = self._now()
        arrival = estimate_arrival(quote.method, requested_at)
        external_id = f"po_{uuid.uuid4().hex}"
        status = PayoutStatus.IN_TRANSIT if quote.method == PayoutMethod.INSTANT else PayoutStatus.PENDING
        payout = crud_payout.create_payout(
            db,
            business_id=business_id,
            quote=quote,
            currency=settings.DEFAULT_CURRENCY,
            requested_by=requested_by,
            external_transaction_id=external_id,
            estimated_arrival=arrival,
            expected_version=version,
            status=status,
        )
        logger.info(
            "Payout %s recorded business_id=%s method=%s amount=%s fee=%s",
            payout.id,
            business_id,
            quote.method.value,
            quote.amount,
            quote.fee,
        )
        return PayoutReceipt(
            payout_id=payout.id,
            external_transaction_id=external_id,
            estimated_arrival=arrival,
            status=status,
            quote=quote,
        )


payout_ledger = PayoutLedger()


def get_payout_ledger() -> PayoutLedger:
    return payout_ledger
