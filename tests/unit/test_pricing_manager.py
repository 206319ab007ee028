from datetime import timedelta
from unittest.mock import patch

import pytest

from bikya.api_client import ApiError, AuthenticationMissingError
from bikya.pricing_manager import calculate_price, estimate_subtotal


def test_calculate_price_returns_quote(price_params, quote_payload):
    with patch("bikya.pricing_manager.api_request") as mock_request:
        mock_request.return_value = {"success": True, "data": quote_payload}

        quote = calculate_price(price_params, "token")

    assert quote.final_amount == 500
    assert quote.duration_hours == 2
    method, path = mock_request.call_args[0]
    assert (method, path) == ("POST", "/bookings/calculate-price")
    payload = mock_request.call_args[1]["payload"]
    assert payload["bikeId"] == "3"
    assert "promoCode" not in payload


def test_calculate_price_sends_promo_code(price_params, promo_quote_payload):
    params = price_params.model_copy(update={"promo_code": "BIKYA50"})
    with patch("bikya.pricing_manager.api_request") as mock_request:
        mock_request.return_value = {"success": True, "data": promo_quote_payload}

        quote = calculate_price(params, "token")

    assert mock_request.call_args[1]["payload"]["promoCode"] == "BIKYA50"
    assert quote.promo_id_for_next_step == "promo_bikya50"


def test_calculate_price_without_data_fails(price_params):
    with patch("bikya.pricing_manager.api_request") as mock_request:
        mock_request.return_value = {"success": False, "message": "Bike is busy"}

        with pytest.raises(ApiError, match="Bike is busy"):
            calculate_price(price_params, "token")


def test_calculate_price_requires_token(price_params):
    with patch("bikya.pricing_manager.api_request") as mock_request:
        with pytest.raises(AuthenticationMissingError):
            calculate_price(price_params, None)
        mock_request.assert_not_called()


def test_estimate_subtotal_is_not_rounded_up(sample_bike, rental_window):
    start, _ = rental_window
    assert estimate_subtotal(sample_bike, start, start + timedelta(minutes=90)) == 375
