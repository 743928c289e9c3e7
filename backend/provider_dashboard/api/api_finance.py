import logging
from datetime import date, timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.finance import ChargeSplit, RevenueSummary
from ..schemas.provider import ActingContext
from ..services import booking_workflow, finance
from .dependencies import get_acting_context, get_finance_context, get_today

router = APIRouter(tags=["finance"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30


@router.get("/split", response_model=ChargeSplit)
def read_charge_split(
    amount: str = Query(..., description="Gross amount to split"),
    context: ActingContext = Depends(get_acting_context),
) -> Any:
    """Platform fee and provider earnings for a charge or tip amount."""
    return finance.split_charge(amount)


@router.get("/revenue", response_model=RevenueSummary)
def read_revenue_summary(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_finance_context),
    today: date = Depends(get_today),
) -> Any:
    """Revenue for a period (default: the last 30 days) against the period before."""
    period_end = end or today
    period_start = start or period_end - timedelta(days=DEFAULT_PERIOD_DAYS - 1)
    return booking_workflow.revenue(db, context, period_start, period_end)
