import math
from datetime import date
from decimal import Decimal

import pytest

from provider_dashboard.models import BookingStatus, PayoutMethod, PayoutStatus, TipStatus
from provider_dashboard.services import finance
from provider_dashboard.utils.errors import BookingEngineError, InsufficientBalance, InvalidAmount

from factories import record


class _Payout:
    def __init__(self, amount, status=PayoutStatus.PAID):
        self.amount = Decimal(amount)
        self.status = status


def test_split_charge_twelve_percent():
    split = finance.split_charge("100")
    assert split.gross == Decimal("100.00")
    assert split.platform_fee == Decimal("12.00")
    assert split.provider_net == Decimal("88.00")


@pytest.mark.parametrize("gross", ["0.01", "0.05", "19.99", "33.33", "1234.57"])
def test_split_parts_always_add_up(gross):
    split = finance.split_charge(gross)
    assert split.platform_fee + split.provider_net == split.gross


def test_split_zero_and_invalid():
    assert finance.split_charge(0).provider_net == Decimal("0.00")
    with pytest.raises(InvalidAmount):
        finance.split_charge("-5")
    with pytest.raises(InvalidAmount):
        finance.split_charge("abc")


def test_tip_only_counts_when_paid():
    assert finance.split_tip("10", TipStatus.REQUESTED).gross == Decimal("0.00")
    assert finance.split_tip(None, TipStatus.PAID).gross == Decimal("0.00")
    assert finance.split_tip("10", "paid").provider_net == Decimal("8.80")


def test_payment_transactions_include_paid_tip():
    lines = finance.payment_transactions(
        record(total_amount=Decimal("50.00"), tip_amount=Decimal("5.00"), tip_status=TipStatus.PAID)
    )
    assert [line.kind for line in lines] == ["service", "tip"]
    assert lines[1].platform_fee == Decimal("0.60")


def test_payout_standard_has_no_fee():
    quote = finance.validate_payout_request("50", "100", PayoutMethod.STANDARD)
    assert quote.fee == Decimal("0.00")
    assert quote.net == Decimal("50.00")
    assert quote.settlement == "2 business days"


def test_payout_instant_fee():
    quote = finance.validate_payout_request("200", "500", "instant")
    assert quote.fee == Decimal("3.00")
    assert quote.net == Decimal("197.00")


def test_payout_can_drain_balance_exactly():
    assert finance.validate_payout_request("100.00", "100", "standard").amount == Decimal("100.00")


@pytest.mark.parametrize("amount", ["0", "-1", "abc", None, "0.001"])
def test_payout_invalid_amount(amount):
    with pytest.raises(InvalidAmount):
        finance.validate_payout_request(amount, "100", "standard")


def test_payout_over_balance():
    with pytest.raises(InsufficientBalance):
        finance.validate_payout_request("100.01", "100", "standard")


def test_payout_unknown_method():
    with pytest.raises(BookingEngineError) as exc:
        finance.validate_payout_request("10", "100", "wire")
    assert exc.value.code == "invalid_method"


def test_available_balance():
    bookings = [
        record(id=1, booking_status=BookingStatus.COMPLETED, total_amount=Decimal("100.00")),
        record(
            id=2,
            booking_status=BookingStatus.COMPLETED,
            total_amount=Decimal("50.00"),
            tip_amount=Decimal("10.00"),
            tip_status=TipStatus.PAID,
        ),
        record(id=3, booking_status=BookingStatus.CONFIRMED, total_amount=Decimal("999.00")),
    ]
    # 88.00 + 44.00 + 8.80
    assert finance.available_balance(bookings) == Decimal("140.80")
    payouts = [_Payout("40.00"), _Payout("1000.00", PayoutStatus.FAILED)]
    assert finance.available_balance(bookings, payouts) == Decimal("100.80")
    assert finance.available_balance(bookings, [_Payout("500")]) == Decimal("0.00")


def test_aggregate_revenue_compares_previous_window():
    bookings = [
        record(id=1, booking_date=date(2030, 6, 10), booking_status=BookingStatus.COMPLETED, total_amount=Decimal("100")),
        record(id=2, booking_date=date(2030, 6, 12), booking_status=BookingStatus.COMPLETED, total_amount=Decimal("50")),
        record(id=3, booking_date=date(2030, 6, 14), booking_status=BookingStatus.DECLINED, total_amount=Decimal("80")),
        record(id=4, booking_date=date(2030, 6, 5), booking_status=BookingStatus.COMPLETED, total_amount=Decimal("100")),
    ]
    summary = finance.aggregate_revenue(bookings, date(2030, 6, 8), date(2030, 6, 14))
    assert summary.total_revenue == Decimal("150.00")
    assert summary.platform_fees == Decimal("18.00")
    assert summary.provider_net == Decimal("132.00")
    assert summary.total_bookings == 3
    assert summary.completed_bookings == 2
    assert summary.bookings_by_status["declined"] == 1
    assert summary.average_order_value == Decimal("75.00")
    assert summary.completion_rate == pytest.approx(66.67)
    assert summary.previous_period_revenue == Decimal("100.00")
    assert summary.revenue_change == pytest.approx(50.0)
    assert summary.bookings_change == pytest.approx(200.0)


def test_aggregate_revenue_with_no_history():
    summary = finance.aggregate_revenue([], date(2030, 6, 1), date(2030, 6, 30))
    assert summary.total_revenue == Decimal("0.00")
    assert summary.average_order_value == Decimal("0.00")
    assert summary.revenue_change == 0.0
    assert summary.completion_rate == 0.0


def test_aggregate_revenue_rejects_reversed_period():
    with pytest.raises(BookingEngineError):
        finance.aggregate_revenue([], date(2030, 6, 30), date(2030, 6, 1))


def test_booking_stats():
    stats = finance.booking_stats(
        [
            record(id=1, booking_status=BookingStatus.COMPLETED, total_amount=Decimal("60")),
            record(id=2, booking_status=BookingStatus.PENDING),
            record(id=3, booking_status=BookingStatus.CANCELLED),
            record(id=4, booking_status=BookingStatus.COMPLETED, total_amount=Decimal("40")),
        ]
    )
    assert stats.total_bookings == 4
    assert stats.completed_bookings == 2
    assert stats.completion_rate == 50.0
    assert stats.average_booking_value == Decimal("50.00")


def test_aggregate_revenue_without_completed_bookings():
    bookings = [
        record(id=1, booking_date=date(2030, 6, 10), booking_status=BookingStatus.PENDING, total_amount=Decimal("90")),
        record(id=2, booking_date=date(2030, 6, 11), booking_status=BookingStatus.DECLINED, total_amount=Decimal("40")),
    ]
    summary = finance.aggregate_revenue(bookings, date(2030, 6, 1), date(2030, 6, 30))
    assert summary.total_bookings == 2
    assert summary.completed_bookings == 0
    assert summary.average_order_value == Decimal("0.00")
    assert summary.revenue_change == 0.0
    assert summary.completion_rate == 0.0
    assert math.isfinite(summary.completion_rate)


def test_huge_amounts_are_rejected_not_crashing():
    with pytest.raises(InvalidAmount):
        finance.split_charge("1e30")
    with pytest.raises(InsufficientBalance):
        finance.validate_payout_request("1e30", "100", "standard")
