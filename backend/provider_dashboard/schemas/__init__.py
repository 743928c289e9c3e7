from .finance import (
    ChargeSplit,
    PaymentTransaction,
    PayoutQuote,
    PayoutRequest,
    PayoutReceipt,
    PayoutResponse,
    BalanceResponse,
    RevenueSummary,
)
from .booking import (
    BookingRecord,
    StatusAction,
    StatusChangeRequest,
    AssignRequest,
    BookingResponse,
    BookingDetailResponse,
    AssignmentResponse,
    BookingPage,
    BookingListResponse,
    BookingStats,
    StatusHistoryEntry,
)
from .provider import (
    BusinessRecord,
    ProviderRecord,
    ProviderServiceRecord,
    ActingContext,
    ProviderResponse,
)
from .pagination import Page
