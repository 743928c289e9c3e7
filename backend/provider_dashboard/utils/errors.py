from typing import Dict, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)


class BookingEngineError(Exception):
    """Base class for every recoverable rule violation raised by the engine."""

    code = "booking_engine_error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        field_errors: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.field_errors = field_errors or {}

    def to_detail(self) -> dict:
        return {
            "message": self.message,
            "code": self.code,
            "field_errors": self.field_errors,
        }


class GuardFailed(BookingEngineError):
    """A transition or assignment is not legal in the booking's current state."""

    MISSING_PROVIDER = "missing_provider"
    DATE_IN_FUTURE = "date_in_future"
    MISSING_REASON = "missing_reason"
    ILLEGAL_TRANSITION = "illegal_transition"
    TERMINAL_STATUS = "terminal_status"

    http_status = status.HTTP_409_CONFLICT

    def __init__(self, reason: str, message: str, field_errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message, code=reason, field_errors=field_errors)
        self.reason = reason


class Forbidden(BookingEngineError):
    code = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN


class AssignmentRejected(BookingEngineError):
    code = "not_eligible"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidAmount(BookingEngineError):
    code = "invalid_amount"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InsufficientBalance(BookingEngineError):
    code = "insufficient_balance"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class UpdateFailed(BookingEngineError):
    """The store refused the write; state is unchanged and the caller should re-read."""

    code = "update_failed"
    http_status = status.HTTP_409_CONFLICT


class NotFound(BookingEngineError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND
