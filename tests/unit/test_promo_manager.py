from unittest.mock import patch

import pytest

from bikya.api_client import ApiError, AuthenticationMissingError
from bikya.promo_manager import (
    PromoNotApplicableError,
    apply_promo_and_get_price,
    fetch_available_promos,
)


@pytest.fixture
def promo_params(price_params):
    return price_params.model_copy(update={"promo_code": "BIKYA50"})


def test_fetch_available_promos_fills_ids_and_validity():
    with patch("bikya.promo_manager.api_request") as mock_request:
        mock_request.return_value = {
            "success": True,
            "data": [
                {"code": "BIKYA50", "description": "₹50 off", "discountType": "fixedAmount"},
                {"code": "WEEKEND20", "description": "20% off", "validityText": "Weekends only"},
            ],
        }

        promos = fetch_available_promos("token")

    assert [p.id for p in promos] == ["BIKYA50", "WEEKEND20"]
    assert promos[0].validity_text == "Details in app"
    assert promos[1].validity_text == "Weekends only"
    mock_request.assert_called_once_with("GET", "/promocodes/available", token="token")


def test_fetch_available_promos_requires_token():
    with pytest.raises(AuthenticationMissingError, match="Not authenticated to fetch promos."):
        fetch_available_promos(None)


def test_apply_promo_returns_discounted_quote(promo_params, promo_quote_payload):
    with patch("bikya.pricing_manager.api_request") as mock_request:
        mock_request.return_value = {"success": True, "data": promo_quote_payload}

        quote = apply_promo_and_get_price(promo_params, "token")

    assert quote.promo_applied.code == "BIKYA50"
    assert quote.final_amount == 450


def test_promo_ignored_by_server_is_rejected(price_params, quote_payload):
    params = price_params.model_copy(update={"promo_code": "INVALID1"})
    with patch("bikya.pricing_manager.api_request") as mock_request:
        mock_request.return_value = {"success": True, "data": quote_payload}

        with pytest.raises(PromoNotApplicableError) as exc_info:
            apply_promo_and_get_price(params, "token")

    assert str(exc_info.value) == 'Promo code "INVALID1" is invalid or not applicable.'
    assert exc_info.value.code == "INVALID1"


def test_apply_promo_without_success_flag(promo_params, promo_quote_payload):
    with patch("bikya.pricing_manager.api_request") as mock_request:
        mock_request.return_value = {"data": promo_quote_payload}

        with pytest.raises(ApiError, match="Failed to apply promo code"):
            apply_promo_and_get_price(promo_params, "token")


def test_apply_promo_requires_code(price_params):
    with patch("bikya.pricing_manager.api_request") as mock_request:
        with pytest.raises(ValueError, match="promo code is required"):
            apply_promo_and_get_price(price_params, "token")
        mock_request.assert_not_called()


def test_apply_promo_requires_token(promo_params):
    with pytest.raises(AuthenticationMissingError, match="Not authenticated to apply promo."):
        apply_promo_and_get_price(promo_params, None)
