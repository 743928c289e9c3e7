from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud import crud_payout
from ..database import get_db
from ..models.payout import PayoutStatus
from ..schemas.finance import (
    BalanceResponse,
    PayoutQuote,
    PayoutReceipt,
    PayoutRequest,
    PayoutResponse,
)
from ..schemas.provider import ActingContext
from ..services import booking_workflow
from ..services.payout_ledger import PayoutLedger, get_payout_ledger
from ..utils import error_response
from .dependencies import get_finance_context, get_owner_context

router = APIRouter(tags=["payouts"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)


@router.get("/balance", response_model=BalanceResponse)
def read_available_balance(
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_finance_context),
) -> Any:
    return BalanceResponse(
        business_id=context.business_id,
        available_balance=booking_workflow.business_balance(db, context.business_id),
        currency=settings.DEFAULT_CURRENCY,
    )


@router.post("/quote", response_model=PayoutQuote)
def quote_payout(
    payload: PayoutRequest,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_finance_context),
) -> Any:
    """Validate a payout request and show its fee without moving money."""
    return booking_workflow.quote_payout(db, context, payload.amount, payload.method)


@router.post("/", response_model=PayoutReceipt, status_code=status.HTTP_201_CREATED)
def request_payout(
    payload: PayoutRequest,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_owner_context),
    ledger: PayoutLedger = Depends(get_payout_ledger),
) -> Any:
    quote = booking_workflow.quote_payout(db, context, payload.amount, payload.method)
    return ledger.execute(db, context.business_id, quote, requested_by=context.provider_id)


@router.get("/me", response_model=List[PayoutResponse])
def list_my_payouts(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_finance_context),
) -> Any:
    payout_status = None
    if status_filter:
        try:
            payout_status = PayoutStatus(status_filter.strip().lower())
        except ValueError:
            raise error_response("Invalid status filter", {"status": "unknown payout status"})
    return crud_payout.get_payouts_by_business(
        db, context.business_id, status=payout_status, skip=offset, limit=limit
    )
