import logging

from bikya.api_client import ApiError, api_request, require_token
from bikya.models import PriceCalculationParams, PriceQuote, PromoOffer
from bikya.pricing_manager import request_quote

AVAILABLE_PROMOS_PATH = "/promocodes/available"
DEFAULT_VALIDITY_TEXT = "Details in app"

logger = logging.getLogger(__name__)


class PromoNotApplicableError(ValueError):
    def __init__(self, code: str):
        super().__init__(f'Promo code "{code}" is invalid or not applicable.')
        self.code = code


def fetch_available_promos(token: str | None) -> list[PromoOffer]:
    token = require_token(token, "Not authenticated to fetch promos.")
    logger.debug("Fetching promo codes available to the user")
    result = api_request("GET", AVAILABLE_PROMOS_PATH, token=token)
    promos = result.get("data") or []
    return [
        PromoOffer.model_validate(
            {
                **promo,
                "id": promo["code"],
                "validityText": promo.get("validityText") or DEFAULT_VALIDITY_TEXT,
            }
        )
        for promo in promos
    ]


def apply_promo_and_get_price(
    params: PriceCalculationParams, token: str | None
) -> PriceQuote:
    """Re-quote the rental with a promo code and insist the server applied it.

    The pricing endpoint does not reject unusable codes, it just leaves
    `promoApplied` empty. That omission is treated as a rejection here.

    Args:
        params (PriceCalculationParams): rental window including the promo code
        token (str | None): bearer token of the logged in user

    Returns:
        PriceQuote: the discounted quote
    """
    token = require_token(token, "Not authenticated to apply promo.")
    if not params.promo_code:
        raise ValueError("A promo code is required to apply a promo.")

    result = request_quote(params, token)
    if not (result.get("success") and result.get("data")):
        raise ApiError(
            result.get("message") or "Failed to apply promo code and calculate price.",
            data=result,
        )

    quote = PriceQuote.model_validate(result["data"])
    if quote.promo_applied is None:
        logger.info(f"Promo {params.promo_code} was not applied by the server")
        raise PromoNotApplicableError(params.promo_code)

    logger.info(
        f"Promo {quote.promo_applied.code} applied, "
        f"discount {quote.promo_applied.discount_applied} {quote.currency}"
    )
    return quote
