import logging

from bikya.api_client import ApiError, api_request, require_token
from bikya.models import BikeSummary, UserInfo

logger = logging.getLogger(__name__)


def fetch_bike_summary(bike_id: str) -> BikeSummary | None:
    """Fetch the display snapshot of a bike for the booking screen.

    Args:
        bike_id (str): backend identifier of the bike

    Returns:
        BikeSummary | None: the bike, or None when the backend does not know it
    """
    logger.debug(f"Fetching bike summary for {bike_id=}")
    try:
        bike = api_request("GET", f"/bikes/{bike_id}")
    except ApiError as e:
        if e.status == 404:
            logger.info(f"Bike {bike_id} not found")
            return None
        logger.error(f"Error fetching bike {bike_id}: {e}")
        raise
    if not bike or "pricePerHour" not in bike:
        return None
    return BikeSummary.model_validate(bike)


def fetch_user_info(token: str | None) -> UserInfo:
    token = require_token(token)
    logger.debug("Fetching profile of the logged in user")
    user = api_request("GET", "/auth/me", token=token)
    return UserInfo.model_validate(user.get("user", user))
