"""Booking status state machine with role and data guards.

Everything here is pure: functions take a :class:`BookingRecord` and return
a new one (or raise). Persisting the result is the workflow's job.
"""

from __future__ import annotations

import enum
import logging
from datetime import date
from typing import Dict, FrozenSet, List, Optional

from ..models.booking_status import BookingStatus, TERMINAL_STATUSES
from ..models.provider import ProviderRole
from ..schemas.booking import BookingRecord, StatusAction
from ..schemas.provider import ActingContext
from ..utils.errors import Forbidden, GuardFailed

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.DECLINED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_PROGRESS}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED, BookingStatus.NO_SHOW}),
}
for _terminal in TERMINAL_STATUSES:
    ALLOWED_TRANSITIONS[_terminal] = frozenset()

ASSIGN_PROVIDER_TOOLTIP = "Please assign a provider before accepting this booking"


class DeclineReason(str, enum.Enum):
    UNAVAILABLE_TIME = "unavailable_time"
    UNAVAILABLE_LOCATION = "unavailable_location"
    OUT_OF_EXPERTISE = "out_of_expertise"
    FULLY_BOOKED = "fully_booked"
    OTHER = "other"


DECLINE_REASON_TEXT = {
    DeclineReason.UNAVAILABLE_TIME: "The provider is not available at the requested time.",
    DeclineReason.UNAVAILABLE_LOCATION: "The provider does not serve the requested location.",
    DeclineReason.OUT_OF_EXPERTISE: "The requested service is outside the provider's expertise.",
    DeclineReason.FULLY_BOOKED: "The provider is fully booked.",
}

STATUS_PROGRESS = {
    BookingStatus.PENDING: 20,
    BookingStatus.CONFIRMED: 60,
    BookingStatus.IN_PROGRESS: 80,
    BookingStatus.COMPLETED: 100,
}


def resolve_decline_reason(reason: Optional[str], custom_reason: Optional[str] = None) -> str:
    """Turn a reason code or free text into the text shown to the customer."""
    code = (reason or "").strip()
    custom = (custom_reason or "").strip()
    normalized = code.lower().replace("-", "_")
    try:
        choice = DeclineReason(normalized)
    except ValueError:
        choice = None
    if choice is DeclineReason.OTHER:
        if not custom:
            raise GuardFailed(
                GuardFailed.MISSING_REASON,
                "A custom reason is required when declining for another reason.",
                {"custom_reason": "required"},
            )
        return custom
    if choice is not None:
        return DECLINE_REASON_TEXT[choice]
    if code:
        return code
    if custom:
        return custom
    raise GuardFailed(
        GuardFailed.MISSING_REASON,
        "A reason is required to decline a booking.",
        {"reason": "required"},
    )


def check_guards(booking: BookingRecord, target: BookingStatus, today: date) -> None:
    """Raise :class:`GuardFailed` unless ``booking`` may move to ``target``.

    The decline reason is validated separately in :func:`transition`.
    """
    current = booking.booking_status
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise GuardFailed(
            GuardFailed.ILLEGAL_TRANSITION,
            f"Cannot change booking status from {current.value} to {target.value}.",
        )
    if target == BookingStatus.IN_PROGRESS and booking.booking_date > today:
        raise GuardFailed(
            GuardFailed.DATE_IN_FUTURE,
            "This booking cannot be started before its scheduled date.",
        )
    if target in (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS) and not booking.has_provider:
        raise GuardFailed(GuardFailed.MISSING_PROVIDER, "Assign a provider first.")


def ensure_can_transition(booking: BookingRecord, context: ActingContext) -> None:
    if booking.business_id != context.business_id:
        raise Forbidden("You do not have access to this booking.")
    if context.role == ProviderRole.PROVIDER and booking.provider_id != context.provider_id:
        raise Forbidden("Providers can only update bookings assigned to them.")


def transition(
    booking: BookingRecord,
    target: BookingStatus,
    context: ActingContext,
    today: date,
    reason: Optional[str] = None,
    custom_reason: Optional[str] = None,
) -> BookingRecord:
    """Return ``booking`` moved to ``target``; the input is left untouched."""
    ensure_can_transition(booking, context)
    check_guards(booking, target, today)
    update = {"booking_status": target}
    if target == BookingStatus.DECLINED:
        update["decline_reason"] = resolve_decline_reason(reason, custom_reason)
    logger.debug(
        "Booking %s transition %s -> %s approved for provider %s",
        booking.id,
        booking.booking_status.value,
        target.value,
        context.provider_id,
    )
    return booking.model_copy(update=update)


def available_actions(booking: BookingRecord, today: date) -> List[StatusAction]:
    status = booking.booking_status
    if status == BookingStatus.PENDING:
        return [
            StatusAction(
                label="Accept" if booking.has_provider else "Accept (Assign Provider First)",
                status=BookingStatus.CONFIRMED,
                disabled=not booking.has_provider,
                tooltip=None if booking.has_provider else ASSIGN_PROVIDER_TOOLTIP,
            ),
            StatusAction(label="Decline", status=BookingStatus.DECLINED),
        ]
    if status == BookingStatus.CONFIRMED:
        if booking.has_provider and booking.booking_date <= today:
            return [StatusAction(label="Start Service", status=BookingStatus.IN_PROGRESS)]
        return []
    if status == BookingStatus.IN_PROGRESS:
        return [
            StatusAction(label="Complete", status=BookingStatus.COMPLETED),
            StatusAction(label="Mark No Show", status=BookingStatus.NO_SHOW),
        ]
    return []


def status_message(booking: BookingRecord, today: date) -> str:
    status = booking.booking_status
    if status == BookingStatus.CONFIRMED:
        if booking.booking_date > today:
            return "Confirmed - Scheduled for future"
        if booking.has_provider:
            return "Confirmed - Ready to start"
        return "Confirmed - Awaiting provider assignment"
    return {
        BookingStatus.PENDING: "Pending - Awaiting your response",
        BookingStatus.IN_PROGRESS: "In Progress - Service ongoing",
        BookingStatus.COMPLETED: "Completed - Service finished",
        BookingStatus.DECLINED: "Declined - Service declined",
        BookingStatus.NO_SHOW: "No Show - Customer didn't arrive",
        BookingStatus.CANCELLED: "Cancelled - Cancelled by customer",
    }.get(status, "Status unknown")


def progress_percentage(status: BookingStatus) -> int:
    return STATUS_PROGRESS.get(status, 0)
