"""Bucket bookings into dashboard tabs.

Two schemes exist. ``three_bucket`` splits by calendar position
(present/future/past); ``two_bucket`` splits by lifecycle only
(active/closed). A single response uses exactly one scheme.
"""

from __future__ import annotations

from datetime import date, time
from typing import Dict, Iterable, List, Optional

from ..models.booking_status import ACTIVE_STATUSES, TERMINAL_STATUSES, BookingStatus
from ..schemas.booking import BookingRecord

THREE_BUCKET = "three_bucket"
TWO_BUCKET = "two_bucket"

SCHEME_BUCKETS = {
    THREE_BUCKET: ("present", "future", "past"),
    TWO_BUCKET: ("active", "closed"),
}

_FUTURE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def sort_key(booking: BookingRecord) -> tuple[date, time]:
    return (booking.booking_date, booking.start_time)


def sort_bookings(bookings: Iterable[BookingRecord]) -> List[BookingRecord]:
    """Newest first by (booking_date, start_time); ties keep input order."""
    return sorted(bookings, key=sort_key, reverse=True)


def three_bucket_for(booking: BookingRecord, today: date) -> str:
    status = booking.booking_status
    if booking.booking_date == today and status in ACTIVE_STATUSES:
        return "present"
    if booking.booking_date > today and status in _FUTURE_STATUSES:
        return "future"
    # Terminal statuses, earlier dates and anything unmatched (for example
    # an in_progress booking dated tomorrow) all land in past.
    return "past"


def two_bucket_for(booking: BookingRecord) -> str:
    if booking.booking_status in TERMINAL_STATUSES:
        return "closed"
    return "active"


def bucket_for(booking: BookingRecord, today: date, scheme: str = THREE_BUCKET) -> str:
    if scheme == THREE_BUCKET:
        return three_bucket_for(booking, today)
    if scheme == TWO_BUCKET:
        return two_bucket_for(booking)
    raise ValueError(f"Unknown classification scheme: {scheme!r}")


def classify(
    bookings: Iterable[BookingRecord],
    today: date,
    scheme: str = THREE_BUCKET,
) -> Dict[str, List[BookingRecord]]:
    """Partition ``bookings`` into the buckets of ``scheme``.

    Every bucket of the scheme is present in the result, and every booking
    appears in exactly one of them. Buckets are sorted newest first.
    """
    if scheme not in SCHEME_BUCKETS:
        raise ValueError(f"Unknown classification scheme: {scheme!r}")
    buckets: Dict[str, List[BookingRecord]] = {name: [] for name in SCHEME_BUCKETS[scheme]}
    for booking in sort_bookings(bookings):
        buckets[bucket_for(booking, today, scheme)].append(booking)
    return buckets


def filter_bookings(
    bookings: Iterable[BookingRecord],
    status: Optional[BookingStatus] = None,
    unassigned_only: bool = False,
    search: Optional[str] = None,
) -> List[BookingRecord]:
    """Apply the dashboard list filters ahead of classification."""
    needle = (search or "").strip().lower()
    result = []
    for booking in bookings:
        if status is not None and booking.booking_status != status:
            continue
        if unassigned_only and booking.has_provider:
            continue
        if needle:
            haystack = " ".join(
                part for part in (booking.booking_reference, booking.special_instructions) if part
            ).lower()
            if needle not in haystack:
                continue
        result.append(booking)
    return result
