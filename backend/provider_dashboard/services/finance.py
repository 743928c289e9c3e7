"""Platform/provider money split, payout validation and revenue rollups.

All amounts are ``Decimal`` rounded half-up to cents. The platform keeps
``PLATFORM_FEE_RATE`` of every service charge and of every paid tip; the
provider keeps the rest.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from ..core.config import settings
from ..models.booking_status import BookingStatus, TipStatus
from ..models.payout import PayoutMethod, PayoutStatus
from ..schemas.booking import BookingRecord, BookingStats
from ..schemas.finance import ChargeSplit, PaymentTransaction, PayoutQuote, RevenueSummary
from ..utils.errors import BookingEngineError, InsufficientBalance, InvalidAmount
from ..utils.money import quantize_money, to_money

logger = logging.getLogger(__name__)

# Policy defaults are 12% / 88% / 1.5%; deployments override them via settings.
PLATFORM_FEE_RATE = settings.PLATFORM_FEE_RATE
PROVIDER_NET_RATE = settings.PROVIDER_NET_RATE
INSTANT_PAYOUT_FEE_RATE = settings.INSTANT_PAYOUT_FEE_RATE

SETTLEMENT_HORIZON = {
    PayoutMethod.STANDARD: "2 business days",
    PayoutMethod.INSTANT: "~30 minutes",
}

_ZERO = Decimal("0.00")


def _platform_rate(rate: Optional[Decimal]) -> Decimal:
    return PLATFORM_FEE_RATE if rate is None else Decimal(rate)


def split_charge(gross: Any, rate: Optional[Decimal] = None) -> ChargeSplit:
    """Split ``gross`` into platform fee and provider net.

    Both shares are rounded independently; if they then miss ``gross`` by a
    cent, the larger share absorbs the difference so the parts always add up.
    """
    amount = to_money(gross, None)
    if amount is None or amount < 0:
        raise InvalidAmount("Amount must be a non-negative number.", field_errors={"amount": "invalid"})
    amount = quantize_money(amount)
    fee_rate = _platform_rate(rate)
    net_rate = PROVIDER_NET_RATE if rate is None else Decimal("1") - fee_rate
    platform_fee = quantize_money(amount * fee_rate)
    provider_net = quantize_money(amount * net_rate)
    remainder = amount - platform_fee - provider_net
    if remainder:
        if provider_net >= platform_fee:
            provider_net += remainder
        else:
            platform_fee += remainder
    return ChargeSplit(gross=amount, platform_fee=platform_fee, provider_net=provider_net)


def split_tip(tip_amount: Any, tip_status: TipStatus | str | None, rate: Optional[Decimal] = None) -> ChargeSplit:
    """Split a tip the same way as a charge, but only once it has been paid."""
    if tip_amount is None or tip_status is None or TipStatus(tip_status) != TipStatus.PAID:
        return ChargeSplit(gross=_ZERO, platform_fee=_ZERO, provider_net=_ZERO)
    return split_charge(tip_amount, rate)


def payment_transactions(booking: BookingRecord, rate: Optional[Decimal] = None) -> List[PaymentTransaction]:
    """Ledger lines derived from a booking: the service charge and a paid tip."""
    service = split_charge(booking.total_amount, rate)
    lines = [
        PaymentTransaction(
            booking_id=booking.id,
            kind="service",
            gross_amount=service.gross,
            platform_fee=service.platform_fee,
            provider_net=service.provider_net,
        )
    ]
    tip = split_tip(booking.tip_amount, booking.tip_status, rate)
    if tip.gross > 0:
        lines.append(
            PaymentTransaction(
                booking_id=booking.id,
                kind="tip",
                gross_amount=tip.gross,
                platform_fee=tip.platform_fee,
                provider_net=tip.provider_net,
            )
        )
    return lines


def validate_payout_request(amount: Any, available_balance: Any, method: PayoutMethod | str) -> PayoutQuote:
    requested = to_money(amount, None)
    if requested is None or requested <= 0:
        raise InvalidAmount(
            "Please enter a valid payout amount.", field_errors={"amount": "must be a positive number"}
        )
    balance = to_money(available_balance, _ZERO)
    try:
        requested = quantize_money(requested)
    except InvalidAmount:
        if requested > balance:
            raise InsufficientBalance(
                "Payout amount exceeds your available balance.",
                field_errors={"amount": f"maximum {quantize_money(balance)}"},
            )
        raise
    if requested <= 0:
        raise InvalidAmount(
            "Please enter a valid payout amount.", field_errors={"amount": "must be at least 0.01"}
        )
    try:
        payout_method = PayoutMethod(str(getattr(method, "value", method)).strip().lower())
    except ValueError:
        raise BookingEngineError(
            f"Unknown payout method {method!r}.",
            code="invalid_method",
            field_errors={"method": "must be standard or instant"},
        )

    if requested > balance:
        raise InsufficientBalance(
            "Payout amount exceeds your available balance.",
            field_errors={"amount": f"maximum {quantize_money(balance)}"},
        )

    if payout_method == PayoutMethod.INSTANT:
        fee = quantize_money(requested * INSTANT_PAYOUT_FEE_RATE)
    else:
        fee = _ZERO
    return PayoutQuote(
        amount=requested,
        fee=fee,
        net=requested - fee,
        method=payout_method,
        settlement=SETTLEMENT_HORIZON[payout_method],
    )


def available_balance(
    bookings: Iterable[BookingRecord],
    payouts: Iterable[Any] = (),
    rate: Optional[Decimal] = None,
) -> Decimal:
    """Provider earnings not yet paid out.

    Earnings are the provider share of completed service charges plus paid
    tips. Every payout that has not failed is already spoken for.
    """
    earned = _ZERO
    for booking in bookings:
        if booking.booking_status != BookingStatus.COMPLETED:
            continue
        for line in payment_transactions(booking, rate):
            earned += line.provider_net
    committed = _ZERO
    for payout in payouts:
        if PayoutStatus(payout.status) == PayoutStatus.FAILED:
            continue
        committed += to_money(payout.amount, _ZERO)
    return max(quantize_money(earned - committed), _ZERO)


def _percent_change(current: Decimal, previous: Decimal) -> float:
    if previous <= 0:
        return 0.0
    return round(float((current - previous) / previous * 100), 2)


def _completed_total(bookings: Iterable[BookingRecord]) -> Decimal:
    return sum(
        (to_money(b.total_amount, _ZERO) for b in bookings if b.booking_status == BookingStatus.COMPLETED),
        _ZERO,
    )


def aggregate_revenue(
    bookings: Iterable[BookingRecord],
    period_start: date,
    period_end: date,
    rate: Optional[Decimal] = None,
) -> RevenueSummary:
    """Revenue figures for ``[period_start, period_end]`` (inclusive).

    The comparison period is the equal-length window ending the day before
    ``period_start``. Ratios whose denominator is zero are reported as 0.
    """
    if period_end < period_start:
        raise BookingEngineError(
            "The period end must not be before its start.",
            code="invalid_period",
            field_errors={"end": "before start"},
        )
    bookings = list(bookings)
    length = (period_end - period_start).days + 1
    previous_end = period_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=length - 1)

    current = [b for b in bookings if period_start <= b.booking_date <= period_end]
    previous = [b for b in bookings if previous_start <= b.booking_date <= previous_end]

    by_status = {s.value: 0 for s in BookingStatus}
    for booking in current:
        by_status[booking.booking_status.value] += 1
    completed = [b for b in current if b.booking_status == BookingStatus.COMPLETED]

    total_revenue = quantize_money(_completed_total(current))
    platform_fees = _ZERO
    provider_net = _ZERO
    for booking in completed:
        split = split_charge(booking.total_amount, rate)
        platform_fees += split.platform_fee
        provider_net += split.provider_net

    previous_revenue = quantize_money(_completed_total(previous))
    average = quantize_money(total_revenue / len(completed)) if completed else _ZERO
    completion_rate = round(len(completed) / len(current) * 100, 2) if current else 0.0

    return RevenueSummary(
        period_start=period_start,
        period_end=period_end,
        total_revenue=total_revenue,
        platform_fees=platform_fees,
        provider_net=provider_net,
        total_bookings=len(current),
        completed_bookings=len(completed),
        bookings_by_status=by_status,
        average_order_value=average,
        completion_rate=completion_rate,
        previous_period_revenue=previous_revenue,
        revenue_change=_percent_change(total_revenue, previous_revenue),
        bookings_change=_percent_change(Decimal(len(current)), Decimal(len(previous))),
    )


def booking_stats(bookings: Iterable[BookingRecord]) -> BookingStats:
    bookings = list(bookings)

    def count(status: BookingStatus) -> int:
        return sum(1 for b in bookings if b.booking_status == status)

    completed = count(BookingStatus.COMPLETED)
    total_revenue = quantize_money(_completed_total(bookings))
    return BookingStats(
        total_bookings=len(bookings),
        pending_bookings=count(BookingStatus.PENDING),
        confirmed_bookings=count(BookingStatus.CONFIRMED),
        in_progress_bookings=count(BookingStatus.IN_PROGRESS),
        completed_bookings=completed,
        cancelled_bookings=count(BookingStatus.CANCELLED),
        completion_rate=round(completed / len(bookings) * 100, 2) if bookings else 0.0,
        total_revenue=total_revenue,
        average_booking_value=quantize_money(total_revenue / completed) if completed else _ZERO,
    )
