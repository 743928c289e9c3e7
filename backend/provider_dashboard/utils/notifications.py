import logging
from typing import Callable, Optional

from ..models.booking_status import BookingStatus
from ..schemas.booking import BookingRecord

logger = logging.getLogger(__name__)

Sender = Callable[[int, str, str], None]


def format_status_message(booking: BookingRecord, previous: Optional[BookingStatus]) -> str:
    """Return the customer-facing text for a status change."""
    status = booking.booking_status
    ref = booking.booking_reference or f"#{booking.id}"
    when = booking.booking_date.isoformat()
    if status == BookingStatus.CONFIRMED:
        return f"Your booking {ref} on {when} has been confirmed."
    if status == BookingStatus.DECLINED:
        reason = booking.decline_reason or "The provider is unable to take this booking."
        return f"Your booking {ref} on {when} was declined. {reason}"
    if status == BookingStatus.IN_PROGRESS:
        return f"Your service for booking {ref} has started."
    if status == BookingStatus.COMPLETED:
        return f"Your booking {ref} is complete. Thank you!"
    if status == BookingStatus.NO_SHOW:
        return f"Booking {ref} on {when} was marked as a no-show."
    prev = previous.value if previous else "unknown"
    return f"Booking {ref} changed from {prev} to {status.value}."


def _log_sender(customer_id: int, subject: str, body: str) -> None:
    logger.info("Customer notification queued customer_id=%s subject=%s body=%s", customer_id, subject, body)


class NotificationService:
    """Hands customer-facing messages to the delivery channel.

    Delivery (email, SMS, push) lives outside this service; ``sender`` is the
    hook it is plugged into. Calls are fire-and-forget: a failing sender is
    logged and never propagates back into the booking workflow.
    """

    def __init__(self, sender: Optional[Sender] = None) -> None:
        self.sender = sender or _log_sender

    def booking_status_changed(self, booking: BookingRecord, previous: Optional[BookingStatus] = None) -> None:
        subject = f"Booking {booking.booking_status.value.replace('_', ' ')}"
        body = format_status_message(booking, previous)
        try:
            self.sender(booking.customer_id, subject, body)
        except Exception:
            logger.exception("Failed to notify customer %s about booking %s", booking.customer_id, booking.id)


notification_service = NotificationService()


def get_notification_service() -> NotificationService:
    return notification_service
