from .business import Business, BusinessType
from .provider import Provider, ProviderRole, ProviderService
from .booking import Booking
from .booking_status import BookingStatus, TipStatus, ACTIVE_STATUSES, TERMINAL_STATUSES
from .booking_status_history import BookingStatusHistory
from .payout import Payout, PayoutMethod, PayoutStatus

__all__ = [
    "Business",
    "BusinessType",
    "Provider",
    "ProviderRole",
    "ProviderService",
    "Booking",
    "BookingStatus",
    "TipStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "BookingStatusHistory",
    "Payout",
    "PayoutMethod",
    "PayoutStatus",
]
