# backend/provider_dashboard/api/api_booking.py

import logging
from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..core.config import settings
from ..database import get_db
from .. import crud
from ..models.booking_status import BookingStatus
from ..schemas.booking import (
    AssignmentResponse,
    AssignRequest,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStats,
    StatusChangeRequest,
    StatusHistoryEntry,
)
from ..schemas.provider import ActingContext, ProviderResponse
from ..services import booking_workflow
from ..services.temporal_classifier import SCHEME_BUCKETS
from ..utils import error_response
from ..utils.notifications import NotificationService, get_notification_service
from .dependencies import get_acting_context, get_today

router = APIRouter(tags=["bookings"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)
# ‣ Note: no prefix here.  main.py mounts this router at /api/v1/bookings.


@router.get("/", response_model=BookingListResponse)
def read_business_bookings(
    *,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
    today: date = Depends(get_today),
    scheme: Optional[str] = Query(None, description="three_bucket (present/future/past) or two_bucket (active/closed)"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=200),
    status_filter: Optional[str] = Query(None, alias="status"),
    unassigned_only: bool = Query(False),
    search: Optional[str] = Query(None, max_length=200),
) -> Any:
    """Bookings of the caller's business, bucketed for the dashboard tabs."""
    scheme_name = (scheme or settings.CLASSIFICATION_SCHEME).strip().lower().replace("-", "_")
    if scheme_name not in SCHEME_BUCKETS:
        raise error_response(
            "Invalid classification scheme",
            {"scheme": f"must be one of {', '.join(SCHEME_BUCKETS)}"},
        )
    enum_status = None
    if status_filter:
        try:
            enum_status = BookingStatus(status_filter.strip().lower())
        except ValueError:
            logger.warning("Invalid status filter: %s", status_filter)
            raise error_response("Invalid status filter", {"status": "unknown status"})
    return booking_workflow.list_bookings(
        db,
        context,
        today,
        scheme_name,
        page=page,
        page_size=page_size or settings.BOOKINGS_PAGE_SIZE,
        status=enum_status,
        unassigned_only=unassigned_only,
        search=search,
    )


@router.get("/stats", response_model=BookingStats)
def read_booking_stats(
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
) -> Any:
    return booking_workflow.stats(db, context)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
def read_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
    today: date = Depends(get_today),
) -> Any:
    """A single booking with its status message, progress and available actions."""
    return booking_workflow.booking_detail(db, booking_id, context, today)


@router.post("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: int,
    status_update: StatusChangeRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
    today: date = Depends(get_today),
    notifier: NotificationService = Depends(get_notification_service),
) -> Any:
    """Accept, decline, start, complete or mark a booking as no-show.

    Guard failures come back as 409 with a machine-readable ``code`` so the
    dashboard can show the reason next to the disabled action.
    """
    saved = booking_workflow.change_status(
        db,
        booking_id,
        status_update,
        context,
        today,
        notifier,
        dispatch=background_tasks.add_task,
    )
    return booking_workflow.to_response(saved)


@router.get("/{booking_id}/history", response_model=List[StatusHistoryEntry])
def read_status_history(
    booking_id: int,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
) -> Any:
    crud.booking.get_booking_for_business(db, booking_id, context.business_id)
    return crud.booking.get_status_history(db, booking_id)


@router.get("/{booking_id}/eligible-providers", response_model=List[ProviderResponse])
def read_eligible_providers(
    booking_id: int,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
) -> Any:
    return booking_workflow.eligible_providers(db, booking_id, context)


@router.post("/{booking_id}/assign", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
def assign_booking_provider(
    booking_id: int,
    payload: AssignRequest,
    db: Session = Depends(get_db),
    context: ActingContext = Depends(get_acting_context),
) -> Any:
    """Assign, reassign or (with ``"unassigned"``) clear the booking's provider."""
    result = booking_workflow.assign_provider(
        db,
        booking_id,
        payload.provider_id,
        context,
        expected_version=payload.expected_version,
    )
    return AssignmentResponse(
        booking=booking_workflow.to_response(result.booking),
        changed=result.changed,
        auto_assigned=result.auto_assigned,
    )
