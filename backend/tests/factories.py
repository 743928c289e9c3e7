"""Row builders shared by the API tests."""

from datetime import date, time
from decimal import Decimal

from provider_dashboard.api.auth import create_provider_token
from provider_dashboard.models import (
    Booking,
    BookingStatus,
    Business,
    BusinessType,
    Provider,
    ProviderRole,
    ProviderService,
    TipStatus,
)
from provider_dashboard.schemas import BookingRecord, BusinessRecord, ProviderRecord

TODAY = date(2030, 6, 15)


def make_business(db, business_type=BusinessType.SMALL_BUSINESS, name="Glow Studio"):
    business = Business(business_name=name, business_type=business_type)
    db.add(business)
    db.commit()
    db.refresh(business)
    return business


def make_provider(db, business, role=ProviderRole.PROVIDER, first_name="Pat", is_active=True, services=()):
    provider = Provider(
        business_id=business.id,
        first_name=first_name,
        last_name="Lee",
        provider_role=role,
        is_active=is_active,
    )
    db.add(provider)
    db.commit()
    db.refresh(provider)
    for service_id in services:
        db.add(ProviderService(provider_id=provider.id, service_id=service_id, is_active=True))
    db.commit()
    return provider


def make_booking(
    db,
    business,
    booking_date,
    status=BookingStatus.PENDING,
    provider=None,
    service_id=1,
    total_amount="100.00",
    start=time(10, 0),
    tip_amount=None,
    tip_status=TipStatus.NOT_REQUESTED,
    reference=None,
):
    booking = Booking(
        business_id=business.id,
        provider_id=provider.id if provider is not None else None,
        customer_id=501,
        service_id=service_id,
        booking_reference=reference,
        booking_date=booking_date,
        start_time=start,
        end_time=time(start.hour + 1, start.minute),
        booking_status=status,
        total_amount=Decimal(total_amount),
        tip_amount=Decimal(tip_amount) if tip_amount is not None else None,
        tip_status=tip_status,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def auth_headers(provider):
    return {"Authorization": f"Bearer {create_provider_token(provider.id)}"}


def record(**overrides):
    """A BookingRecord with sensible defaults for pure rule tests."""
    values = {
        "id": 1,
        "business_id": 1,
        "provider_id": None,
        "customer_id": 501,
        "service_id": 7,
        "booking_date": date(2030, 6, 15),
        "start_time": time(10, 0),
        "booking_status": BookingStatus.PENDING,
        "total_amount": Decimal("100.00"),
    }
    values.update(overrides)
    return BookingRecord(**values)


def business_record(business_type=BusinessType.SMALL_BUSINESS, id=1):
    return BusinessRecord(id=id, business_type=business_type)


def provider_record(id, role=ProviderRole.PROVIDER, business_id=1, is_active=True):
    return ProviderRecord(id=id, business_id=business_id, provider_role=role, is_active=is_active)
