from datetime import date
from decimal import Decimal

from provider_dashboard.models import BookingStatus, ProviderRole

from factories import auth_headers, make_booking, make_business, make_provider

BASE = "/api/v1/finance"


def test_split_for_any_member(client, db):
    business = make_business(db)
    provider = make_provider(db, business)

    res = client.get(f"{BASE}/split", params={"amount": "100"}, headers=auth_headers(provider))
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["platform_fee"]) == Decimal("12.00")
    assert Decimal(body["provider_net"]) == Decimal("88.00")

    res = client.get(f"{BASE}/split", params={"amount": "-1"}, headers=auth_headers(provider))
    assert res.status_code == 422
    assert res.json()["detail"]["code"] == "invalid_amount"


def test_revenue_summary(client, db):
    business = make_business(db)
    owner = make_provider(db, business, ProviderRole.OWNER)
    make_booking(db, business, date(2030, 6, 10), status=BookingStatus.COMPLETED, provider=owner, total_amount="200.00")
    make_booking(db, business, date(2030, 6, 12), status=BookingStatus.DECLINED, total_amount="70.00")
    make_booking(db, business, date(2030, 5, 15), status=BookingStatus.COMPLETED, provider=owner, total_amount="100.00")

    res = client.get(
        f"{BASE}/revenue",
        params={"start": "2030-06-01", "end": "2030-06-30"},
        headers=auth_headers(owner),
    )
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["total_revenue"]) == Decimal("200.00")
    assert Decimal(body["platform_fees"]) == Decimal("24.00")
    assert body["total_bookings"] == 2
    assert body["completion_rate"] == 50.0
    assert Decimal(body["previous_period_revenue"]) == Decimal("100.00")
    assert body["revenue_change"] == 100.0


def test_revenue_defaults_to_last_thirty_days(client, db):
    business = make_business(db)
    owner = make_provider(db, business, ProviderRole.OWNER)

    body = client.get(f"{BASE}/revenue", headers=auth_headers(owner)).json()
    assert body["period_end"] == "2030-06-15"
    assert body["period_start"] == "2030-05-17"


def test_revenue_restricted_to_owner_and_dispatcher(client, db):
    business = make_business(db)
    provider = make_provider(db, business)
    assert client.get(f"{BASE}/revenue", headers=auth_headers(provider)).status_code == 403


def test_revenue_rejects_reversed_period(client, db):
    business = make_business(db)
    owner = make_provider(db, business, ProviderRole.OWNER)
    res = client.get(
        f"{BASE}/revenue",
        params={"start": "2030-06-30", "end": "2030-06-01"},
        headers=auth_headers(owner),
    )
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "invalid_period"


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_split_of_huge_amount_is_rejected(client, db):
    business = make_business(db)
    provider = make_provider(db, business)
    res = client.get(f"{BASE}/split", params={"amount": "1e30"}, headers=auth_headers(provider))
    assert res.status_code == 422
    assert res.json()["detail"]["code"] == "invalid_amount"
