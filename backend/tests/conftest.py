import os

os.environ.setdefault("PYTEST_RUN", "1")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from provider_dashboard.main import app
from provider_dashboard.database import Base
from provider_dashboard.api.dependencies import get_db, get_today
from provider_dashboard.utils.notifications import NotificationService, get_notification_service

from factories import TODAY


@pytest.fixture
def Session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sent_notifications():
    """Capture customer notifications instead of logging them."""
    sent = []
    service = NotificationService(sender=lambda customer_id, subject, body: sent.append((customer_id, subject, body)))
    app.dependency_overrides[get_notification_service] = lambda: service
    yield sent
    app.dependency_overrides.pop(get_notification_service, None)


@pytest.fixture
def client(Session, sent_notifications):
    def override_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_today, None)
