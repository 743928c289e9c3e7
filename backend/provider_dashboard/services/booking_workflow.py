"""Glue between the booking store and the pure rule modules.

Each operation reads fresh state, asks the rule modules for a decision, and
only then writes. Writes are optimistic; a conflict surfaces as
``UpdateFailed`` and nothing is changed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Union

from sqlalchemy.orm import Session

from .. import crud
from ..crud import crud_booking, crud_payout, crud_provider
from ..models.booking_status import BookingStatus
from ..schemas.booking import (
    BookingDetailResponse,
    BookingListResponse,
    BookingPage,
    BookingRecord,
    BookingResponse,
    BookingStats,
    StatusChangeRequest,
)
from ..schemas.finance import PayoutQuote, RevenueSummary
from ..schemas.provider import (
    ActingContext,
    BusinessRecord,
    ProviderRecord,
    ProviderServiceRecord,
)
from ..utils.errors import UpdateFailed
from ..utils.notifications import NotificationService
from . import assignment, finance, status_transitions, temporal_classifier
from .pagination import paginate

logger = logging.getLogger(__name__)

# Notifications are handed to this callable; FastAPI passes
# BackgroundTasks.add_task so delivery happens after the response.
Dispatch = Callable[..., None]


def _run_now(func, *args, **kwargs) -> None:
    func(*args, **kwargs)


def to_response(record: BookingRecord) -> BookingResponse:
    return BookingResponse.model_validate(record, from_attributes=True)


def _business(db: Session, business_id: int) -> BusinessRecord:
    return BusinessRecord.model_validate(crud_provider.get_business(db, business_id))


def _eligible_for(db: Session, record: BookingRecord, business: BusinessRecord) -> List[ProviderRecord]:
    providers = [ProviderRecord.model_validate(p) for p in crud_provider.get_providers_by_business(db, business.id)]
    services = [
        ProviderServiceRecord.model_validate(row)
        for row in crud_provider.get_provider_services(db, [p.id for p in providers], record.service_id)
    ]
    return assignment.resolve_eligible_providers(record, business, providers, services)


def _bind_owner(db: Session, record: BookingRecord, business: BusinessRecord) -> BookingRecord:
    """Owner binding for independent businesses, computed without writing."""
    if not business.is_independent or record.has_provider or record.is_terminal:
        return record
    return assignment.auto_assign(record, business, _eligible_for(db, record, business)) or record


def _auto_assign(db: Session, record: BookingRecord, business: BusinessRecord) -> BookingRecord:
    bound = _bind_owner(db, record, business)
    if bound is record:
        return record
    row = crud.booking.update_provider(db, record.id, bound.provider_id, record.version_id)
    logger.info("Auto-assigned booking %s to owner %s", record.id, bound.provider_id)
    return BookingRecord.from_orm_booking(row)


def _fresh(db: Session, booking_id: int, context: ActingContext, expected_version: Optional[int]) -> BookingRecord:
    """Stored record, refused before any write when ``expected_version`` is stale."""
    record = BookingRecord.from_orm_booking(crud.booking.get_booking_for_business(db, booking_id, context.business_id))
    if expected_version is not None and expected_version != record.version_id:
        raise UpdateFailed(crud_booking.STALE_MESSAGE)
    return record


def load_booking(db: Session, booking_id: int, context: ActingContext) -> BookingRecord:
    """Fresh record for ``booking_id``, auto-assigned where the business requires it."""
    row = crud.booking.get_booking_for_business(db, booking_id, context.business_id)
    record = BookingRecord.from_orm_booking(row)
    return _auto_assign(db, record, _business(db, context.business_id))


def load_business_bookings(db: Session, context: ActingContext) -> List[BookingRecord]:
    business = _business(db, context.business_id)
    records = []
    for row in crud.booking.get_bookings_by_business(db, context.business_id):
        record = BookingRecord.from_orm_booking(row)
        try:
            record = _auto_assign(db, record, business)
        except UpdateFailed:
            # Someone else wrote first; the next read retries the binding.
            logger.warning("Auto-assignment of booking %s lost a write race", record.id)
            record = BookingRecord.from_orm_booking(crud.booking.get_booking(db, record.id))
        records.append(record)
    return records


def list_bookings(
    db: Session,
    context: ActingContext,
    today: date,
    scheme: str,
    page: int = 1,
    page_size: int = 10,
    status: Optional[BookingStatus] = None,
    unassigned_only: bool = False,
    search: Optional[str] = None,
) -> BookingListResponse:
    records = temporal_classifier.filter_bookings(
        load_business_bookings(db, context),
        status=status,
        unassigned_only=unassigned_only,
        search=search,
    )
    buckets = {}
    for name, items in temporal_classifier.classify(records, today, scheme).items():
        sliced = paginate(items, page, page_size)
        buckets[name] = BookingPage(
            items=[to_response(r) for r in sliced.items],
            total_pages=sliced.total_pages,
            current_page=sliced.current_page,
            total_items=sliced.total_items,
        )
    return BookingListResponse(scheme=scheme, today=today, buckets=buckets)


def booking_detail(db: Session, booking_id: int, context: ActingContext, today: date) -> BookingDetailResponse:
    record = load_booking(db, booking_id, context)
    return BookingDetailResponse(
        **to_response(record).model_dump(),
        status_message=status_transitions.status_message(record, today),
        progress=status_transitions.progress_percentage(record.booking_status),
        actions=status_transitions.available_actions(record, today),
        charge_split=finance.split_charge(record.total_amount),
        tip_split=finance.split_tip(record.tip_amount, record.tip_status),
    )


def change_status(
    db: Session,
    booking_id: int,
    request: StatusChangeRequest,
    context: ActingContext,
    today: date,
    notifier: NotificationService,
    dispatch: Dispatch = _run_now,
) -> BookingRecord:
    current = _fresh(db, booking_id, context, request.expected_version)
    # An independent owner binding rides along with the status write.
    bound = _bind_owner(db, current, _business(db, context.business_id))
    updated = status_transitions.transition(
        bound,
        request.status,
        context,
        today,
        reason=request.reason,
        custom_reason=request.custom_reason,
    )
    history_reason = updated.decline_reason or request.reason or f"Status updated to {request.status.value}"
    row = crud.booking.update_status(
        db,
        booking_id,
        updated.booking_status,
        expected_version=current.version_id,
        changed_by=context.provider_id,
        reason=history_reason,
        decline_reason=updated.decline_reason if updated.booking_status == BookingStatus.DECLINED else None,
        from_status=current.booking_status,
        provider_id=bound.provider_id if bound is not current else None,
    )
    saved = BookingRecord.from_orm_booking(row)
    dispatch(notifier.booking_status_changed, saved, current.booking_status)
    return saved


def eligible_providers(db: Session, booking_id: int, context: ActingContext) -> List[ProviderRecord]:
    record = load_booking(db, booking_id, context)
    return _eligible_for(db, record, _business(db, context.business_id))


def assign_provider(
    db: Session,
    booking_id: int,
    provider_id: Union[int, str, None],
    context: ActingContext,
    expected_version: Optional[int] = None,
) -> assignment.AssignmentResult:
    before = _fresh(db, booking_id, context, expected_version)
    business = _business(db, context.business_id)
    assignment.ensure_can_assign(before, context)
    current = _bind_owner(db, before, business)
    auto_assigned = current.provider_id != before.provider_id

    result = assignment.assign(current, provider_id, context, business, _eligible_for(db, current, business))
    if result.booking.provider_id == before.provider_id:
        return assignment.AssignmentResult(booking=before, changed=False)
    row = crud.booking.update_provider(db, booking_id, result.booking.provider_id, before.version_id)
    return assignment.AssignmentResult(
        booking=BookingRecord.from_orm_booking(row),
        changed=True,
        auto_assigned=auto_assigned and not result.changed,
    )


def stats(db: Session, context: ActingContext) -> BookingStats:
    return finance.booking_stats(load_business_bookings(db, context))


def revenue(db: Session, context: ActingContext, start: date, end: date) -> RevenueSummary:
    records = [BookingRecord.from_orm_booking(r) for r in crud.booking.get_bookings_by_business(db, context.business_id)]
    return finance.aggregate_revenue(records, start, end)


def business_balance(db: Session, business_id: int):
    records = [BookingRecord.from_orm_booking(r) for r in crud.booking.get_bookings_by_business(db, business_id)]
    return finance.available_balance(records, crud_payout.get_payouts_by_business(db, business_id))


def quote_payout(db: Session, context: ActingContext, amount, method) -> PayoutQuote:
    return finance.validate_payout_request(amount, business_balance(db, context.business_id), method)
