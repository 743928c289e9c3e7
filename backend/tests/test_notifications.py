import logging

import pytest
from pydantic import ValidationError

from provider_dashboard.core.config import Settings
from provider_dashboard.models import BookingStatus
from provider_dashboard.utils.notifications import NotificationService, format_status_message

from factories import record


def test_declined_message_carries_reason():
    booking = record(booking_status=BookingStatus.DECLINED, decline_reason="The provider is fully booked.")
    message = format_status_message(booking, BookingStatus.PENDING)
    assert "#1" in message
    assert message.endswith("The provider is fully booked.")


def test_failing_sender_is_logged_not_raised(caplog):
    def broken(customer_id, subject, body):
        raise RuntimeError("smtp down")

    service = NotificationService(sender=broken)
    with caplog.at_level(logging.ERROR, logger="provider_dashboard.utils.notifications"):
        service.booking_status_changed(record(booking_status=BookingStatus.CONFIRMED), BookingStatus.PENDING)
    assert "Failed to notify customer" in caplog.text


def test_settings_validate_scheme_and_rates():
    assert Settings(CLASSIFICATION_SCHEME="Two-Bucket").CLASSIFICATION_SCHEME == "two_bucket"
    with pytest.raises(ValidationError):
        Settings(CLASSIFICATION_SCHEME="weekly")
    with pytest.raises(ValidationError):
        Settings(PLATFORM_FEE_RATE="1.5")
    assert str(Settings(PLATFORM_FEE_RATE="0.2").PROVIDER_NET_RATE) == "0.8"
