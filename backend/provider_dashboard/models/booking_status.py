import enum


class BookingStatus(str, enum.Enum):
    """Lifecycle states of a booking as seen from the provider dashboard."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DECLINED = "declined"
    NO_SHOW = "no_show"


class TipStatus(str, enum.Enum):
    NOT_REQUESTED = "not_requested"
    REQUESTED = "requested"
    PENDING = "pending"
    PAID = "paid"
    DECLINED = "declined"


# Statuses a provider still has to act on.
ACTIVE_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
)
# Final states; cancelled is customer-initiated and only ever read here.
TERMINAL_STATUSES = frozenset(
    {
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.DECLINED,
        BookingStatus.NO_SHOW,
    }
)
