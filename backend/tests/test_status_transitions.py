from datetime import date

import pytest

from provider_dashboard.models import BookingStatus, ProviderRole
from provider_dashboard.schemas import ActingContext
from provider_dashboard.services import status_transitions as st
from provider_dashboard.utils.errors import Forbidden, GuardFailed

from factories import record

TODAY = date(2030, 6, 15)
OWNER = ActingContext(provider_id=1, business_id=1, role=ProviderRole.OWNER)


def test_accept_requires_provider():
    with pytest.raises(GuardFailed) as exc:
        st.transition(record(), BookingStatus.CONFIRMED, OWNER, TODAY)
    assert exc.value.reason == GuardFailed.MISSING_PROVIDER


def test_accept_with_provider_returns_new_record():
    booking = record(provider_id=2)
    confirmed = st.transition(booking, BookingStatus.CONFIRMED, OWNER, TODAY)
    assert confirmed.booking_status == BookingStatus.CONFIRMED
    assert booking.booking_status == BookingStatus.PENDING


def test_start_before_booking_date_is_refused():
    booking = record(provider_id=2, booking_status=BookingStatus.CONFIRMED, booking_date=date(2030, 6, 16))
    with pytest.raises(GuardFailed) as exc:
        st.transition(booking, BookingStatus.IN_PROGRESS, OWNER, TODAY)
    assert exc.value.reason == GuardFailed.DATE_IN_FUTURE


def test_start_on_booking_date():
    booking = record(provider_id=2, booking_status=BookingStatus.CONFIRMED)
    started = st.transition(booking, BookingStatus.IN_PROGRESS, OWNER, TODAY)
    assert started.booking_status == BookingStatus.IN_PROGRESS


def test_start_without_provider_is_refused():
    booking = record(booking_status=BookingStatus.CONFIRMED, booking_date=date(2030, 6, 1))
    with pytest.raises(GuardFailed) as exc:
        st.transition(booking, BookingStatus.IN_PROGRESS, OWNER, TODAY)
    assert exc.value.reason == GuardFailed.MISSING_PROVIDER


@pytest.mark.parametrize(
    "current, target",
    [
        (BookingStatus.PENDING, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.DECLINED),
        (BookingStatus.COMPLETED, BookingStatus.IN_PROGRESS),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.NO_SHOW, BookingStatus.COMPLETED),
    ],
)
def test_illegal_transitions(current, target):
    with pytest.raises(GuardFailed) as exc:
        st.transition(record(provider_id=2, booking_status=current), target, OWNER, TODAY)
    assert exc.value.reason == GuardFailed.ILLEGAL_TRANSITION


def test_in_progress_can_finish_as_completed_or_no_show():
    booking = record(provider_id=2, booking_status=BookingStatus.IN_PROGRESS)
    assert st.transition(booking, BookingStatus.COMPLETED, OWNER, TODAY).booking_status == BookingStatus.COMPLETED
    assert st.transition(booking, BookingStatus.NO_SHOW, OWNER, TODAY).booking_status == BookingStatus.NO_SHOW


def test_decline_needs_no_provider_but_needs_reason():
    with pytest.raises(GuardFailed) as exc:
        st.transition(record(), BookingStatus.DECLINED, OWNER, TODAY)
    assert exc.value.reason == GuardFailed.MISSING_REASON

    declined = st.transition(record(), BookingStatus.DECLINED, OWNER, TODAY, reason="fully_booked")
    assert declined.decline_reason == "The provider is fully booked."


def test_decline_reasons():
    assert st.resolve_decline_reason("Out-Of-Expertise") == st.DECLINE_REASON_TEXT[st.DeclineReason.OUT_OF_EXPERTISE]
    assert st.resolve_decline_reason("other", "  Van broke down ") == "Van broke down"
    assert st.resolve_decline_reason("Double booked by mistake") == "Double booked by mistake"
    assert st.resolve_decline_reason(None, "Sick today") == "Sick today"
    with pytest.raises(GuardFailed):
        st.resolve_decline_reason("other", "   ")


def test_provider_role_only_updates_own_bookings():
    provider = ActingContext(provider_id=5, business_id=1, role=ProviderRole.PROVIDER)
    with pytest.raises(Forbidden):
        st.transition(record(provider_id=6), BookingStatus.CONFIRMED, provider, TODAY)
    confirmed = st.transition(record(provider_id=5), BookingStatus.CONFIRMED, provider, TODAY)
    assert confirmed.booking_status == BookingStatus.CONFIRMED


def test_other_business_is_forbidden():
    outsider = ActingContext(provider_id=9, business_id=2, role=ProviderRole.OWNER)
    with pytest.raises(Forbidden):
        st.transition(record(provider_id=2), BookingStatus.CONFIRMED, outsider, TODAY)


def test_available_actions_for_unassigned_pending_booking():
    actions = st.available_actions(record(), TODAY)
    accept, decline = actions
    assert accept.label == "Accept (Assign Provider First)"
    assert accept.disabled is True
    assert accept.tooltip == st.ASSIGN_PROVIDER_TOOLTIP
    assert decline.status == BookingStatus.DECLINED
    assert decline.disabled is False


def test_start_action_hidden_until_booking_date():
    future = record(provider_id=2, booking_status=BookingStatus.CONFIRMED, booking_date=date(2030, 7, 1))
    assert st.available_actions(future, TODAY) == []
    assert st.status_message(future, TODAY) == "Confirmed - Scheduled for future"

    today = future.model_copy(update={"booking_date": TODAY})
    assert [a.label for a in st.available_actions(today, TODAY)] == ["Start Service"]
    assert st.status_message(today, TODAY) == "Confirmed - Ready to start"


def test_terminal_bookings_have_no_actions():
    for status in (BookingStatus.COMPLETED, BookingStatus.DECLINED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
        assert st.available_actions(record(provider_id=2, booking_status=status), TODAY) == []


def test_progress():
    assert st.progress_percentage(BookingStatus.PENDING) == 20
    assert st.progress_percentage(BookingStatus.COMPLETED) == 100
    assert st.progress_percentage(BookingStatus.DECLINED) == 0
