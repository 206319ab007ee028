import logging
from datetime import datetime

from bikya.api_client import ApiError, api_request, require_token
from bikya.models import BikeSummary, PriceCalculationParams, PriceQuote

CALCULATE_PRICE_PATH = "/bookings/calculate-price"

logger = logging.getLogger(__name__)


def request_quote(params: PriceCalculationParams, token: str) -> dict:
    """POST the rental window to the pricing endpoint and return the raw envelope."""
    logger.info(
        f"Requesting quote for bike {params.bike_id} "
        f"from {params.start_time.isoformat()} to {params.end_time.isoformat()}"
        + (f" with promo {params.promo_code}" if params.promo_code else "")
    )
    return api_request(
        "POST",
        CALCULATE_PRICE_PATH,
        token=token,
        payload=params.to_payload(exclude_none=True),
    )


def calculate_price(params: PriceCalculationParams, token: str | None) -> PriceQuote:
    token = require_token(token)
    result = request_quote(params, token)
    if not result.get("data"):
        raise ApiError(result.get("message") or "Failed to calculate price", data=result)
    quote = PriceQuote.model_validate(result["data"])
    logger.info(f"Quote for bike {quote.bike_id}: {quote.final_amount} {quote.currency}")
    return quote


def estimate_subtotal(bike: BikeSummary, start_time: datetime, end_time: datetime) -> float:
    """Local subtotal shown before the server has quoted, never used for booking."""
    hours = (end_time - start_time).total_seconds() / 3600
    return bike.price_per_hour * hours

