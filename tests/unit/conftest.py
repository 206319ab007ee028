from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from bikya.custom_types import TokenScope
from bikya.jwt_manager import create_jwt_token
from bikya.models import BikeSummary, PriceCalculationParams, UserDocument, UserInfo
from bikya.sandbox import create_app

SANDBOX_JWT_SECRET = "sandbox-test-secret"
SANDBOX_GATEWAY_KEY_ID = "rzp_test_key"
SANDBOX_GATEWAY_SECRET = "rzp_test_secret"


def make_response(status_code=200, data=None, content_type="application/json", text=""):
    response = MagicMock()
    response.status_code = status_code
    response.headers = {"content-type": content_type}
    response.json.return_value = data
    response.text = text
    return response


@pytest.fixture
def mock_http_session():
    with patch("bikya.api_client.create_http_session") as mock:
        session = MagicMock()
        mock.return_value = session
        yield session


@pytest.fixture
def rental_window():
    start = (datetime.now(timezone.utc) + timedelta(days=1)).replace(
        minute=0, second=0, microsecond=0
    )
    return start, start + timedelta(hours=2)


@pytest.fixture
def sample_bike():
    return BikeSummary(
        id="3",
        name="Yamaha MT-07",
        model="MT-07",
        year=2023,
        image_url="https://example.com/mt07.png",
        gear_type="Manual",
        mileage="25 km/l",
        rating=4.8,
        price_per_hour=250,
    )


@pytest.fixture
def sample_user():
    return UserInfo(
        id="u1", full_name="Aarav Sharma", email="aarav@example.com", phone="9876543210"
    )


@pytest.fixture
def verified_documents():
    return [
        UserDocument(
            id="doc_front", document_type="drivers_license", document_side="front", status="approved"
        ),
        UserDocument(
            id="doc_back", document_type="drivers_license", document_side="back", status="approved"
        ),
    ]


@pytest.fixture
def price_params(rental_window):
    start, end = rental_window
    return PriceCalculationParams(bike_id="3", start_time=start, end_time=end)


@pytest.fixture
def quote_payload(rental_window):
    start, end = rental_window
    return {
        "bikeId": "3",
        "bikeName": "Yamaha MT-07",
        "startTime": start.isoformat(),
        "endTime": end.isoformat(),
        "durationHours": 2,
        "originalAmount": 500,
        "promoApplied": None,
        "promoIdForNextStep": None,
        "discountAmount": 0,
        "taxesAndFees": 0,
        "finalAmount": 500,
        "currency": "INR",
    }


@pytest.fixture
def promo_quote_payload(quote_payload):
    return {
        **quote_payload,
        "promoApplied": {
            "code": "BIKYA50",
            "description": "Get ₹50 off on your first ride",
            "discountApplied": 50,
        },
        "promoIdForNextStep": "promo_bikya50",
        "discountAmount": 50,
        "finalAmount": 450,
    }


@pytest.fixture
def sandbox_app():
    return create_app(
        jwt_secret=SANDBOX_JWT_SECRET,
        gateway_key_id=SANDBOX_GATEWAY_KEY_ID,
        gateway_key_secret=SANDBOX_GATEWAY_SECRET,
    )


@pytest.fixture
def sandbox_client(sandbox_app):
    client = TestClient(sandbox_app)
    with patch("bikya.api_client.create_http_session", return_value=client):
        yield client


@pytest.fixture
def sandbox_token():
    return create_jwt_token({"user_id": "u1"}, TokenScope.USER, SANDBOX_JWT_SECRET)


@pytest.fixture
def unverified_sandbox_token():
    return create_jwt_token({"user_id": "u2"}, TokenScope.USER, SANDBOX_JWT_SECRET)
