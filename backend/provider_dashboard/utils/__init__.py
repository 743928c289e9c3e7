from .errors import (
    error_response,
    BookingEngineError,
    GuardFailed,
    Forbidden,
    AssignmentRejected,
    InvalidAmount,
    InsufficientBalance,
    UpdateFailed,
    NotFound,
)
from .money import to_money, quantize_money
