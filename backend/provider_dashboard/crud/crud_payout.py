import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..models.payout import PayoutStatus
from ..schemas.finance import PayoutQuote
from ..utils.errors import NotFound, UpdateFailed

logger = logging.getLogger(__name__)


def get_payouts_by_business(
    db: Session,
    business_id: int,
    status: Optional[PayoutStatus] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[models.Payout]:
    query = db.query(models.Payout).filter(models.Payout.business_id == business_id)
    if status is not None:
        query = query.filter(models.Payout.status == status)
    query = query.order_by(models.Payout.created_at.desc(), models.Payout.id.desc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def lock_business_for_payout(db: Session, business_id: int) -> models.Business:
    """Fresh business row, locked where the database supports ``FOR UPDATE``."""
    business = (
        db.query(models.Business)
        .filter(models.Business.id == business_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if business is None:
        raise NotFound("Business not found.")
    return business


def create_payout(
    db: Session,
    business_id: int,
    quote: PayoutQuote,
    currency: str,
    requested_by: Optional[int],
    external_transaction_id: str,
    estimated_arrival: datetime,
    expected_version: int,
    status: PayoutStatus = PayoutStatus.PENDING,
) -> models.Payout:
    """Insert a payout if no other payout was recorded since ``expected_version``."""
    db_payout = models.Payout(
        business_id=business_id,
        requested_by=requested_by,
        amount=quote.amount,
        fee=quote.fee,
        net_amount=quote.net,
        currency=currency,
        method=quote.method,
        status=status,
        external_transaction_id=external_transaction_id,
        estimated_arrival=estimated_arrival,
    )
    try:
        bumped = (
            db.query(models.Business)
            .filter(
                models.Business.id == business_id,
                models.Business.payout_version == expected_version,
            )
            .update({models.Business.payout_version: expected_version + 1}, synchronize_session=False)
        )
        if bumped != 1:
            db.rollback()
            logger.info("Payout for business %s lost a race at version %s", business_id, expected_version)
            raise UpdateFailed("Another payout was recorded meanwhile. Check your balance and try again.")
        db.add(db_payout)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to record payout for business %s", business_id)
        raise UpdateFailed("The payout could not be saved. Please try again.") from exc
    db.refresh(db_payout)
    return db_payout
