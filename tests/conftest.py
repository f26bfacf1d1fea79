"""
Pytest Configuration and Fixtures

Shared fixtures for booking API tests: an in-memory SQLite store, a
recording notifier and a FastAPI TestClient wired to both.
"""

import os

# Must be set before vtc_booking.config is imported
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = "operator@example.com"
os.environ["DEBUG_ROUTES_ENABLED"] = "true"

from datetime import datetime  # noqa: E402
from zoneinfo import ZoneInfo  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from vtc_booking.database import create_session_factory, init_db  # noqa: E402
from vtc_booking.main import create_app  # noqa: E402

PARIS = ZoneInfo("Europe/Paris")
FROZEN_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=PARIS)
FUTURE_DATE = "2099-06-15"
PAST_DATE = "2020-01-01"


class RecordingNotifier:
    """Notifier double that records every booking it was asked to email"""

    def __init__(self, fail_customer=False, fail_operator=False):
        self.fail_customer = fail_customer
        self.fail_operator = fail_operator
        self.customer_calls = []
        self.operator_calls = []

    async def send_customer_confirmation(self, booking):
        self.customer_calls.append(booking)
        if self.fail_customer:
            raise RuntimeError("SMTP down")

    async def send_operator_notification(self, booking):
        self.operator_calls.append(booking)
        if self.fail_operator:
            raise RuntimeError("SMTP down")


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


# =============================================================================
# Booking Fixtures
# =============================================================================


@pytest.fixture
def booking_payload():
    """A valid ride request as the public form sends it"""
    return {
        "pickup": "Gare de Lyon, Paris",
        "destination": "Aéroport Charles de Gaulle",
        "date": FUTURE_DATE,
        "time": "14:30",
        "passengers": 2,
        "serviceType": "premium",
        "name": "Camille Martin",
        "phone": "06 12 34 56 78",
        "email": "camille@example.com",
        "notes": "Deux valises",
    }


@pytest.fixture
def frozen_clock():
    return lambda: FROZEN_NOW


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(engine, notifier):
    return create_app(engine=engine, notifier=notifier)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_credentials():
    return {"username": "operator", "password": "s3cret-pass", "email": "operator@example.com"}


@pytest.fixture
def admin_token(client, admin_credentials):
    response = client.post("/api/admin/create-admin", json=admin_credentials)
    assert response.status_code == 201
    response = client.post(
        "/api/admin/login",
        json={"username": admin_credentials["username"], "password": admin_credentials["password"]},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}
