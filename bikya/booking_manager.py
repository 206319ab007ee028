import logging

from bikya.api_client import api_request, require_token
from bikya.custom_types import DictWithStringKeys
from bikya.models import (
    ConfirmedBookingDetails,
    CreateBookingParams,
    NoPaymentBooking,
    PaymentRequiredBooking,
    PaymentVerificationRequest,
    PaymentVerificationResult,
    parse_create_booking_response,
)
from bikya.utils import format_amount, format_rental_period

BOOKINGS_PATH = "/bookings"
VERIFY_PAYMENT_PATH = "/bookings/verify-payment"
PLACEHOLDER_BIKE_IMAGE = "https://placehold.co/100x80/1A1A1A/F5F5F5?text=Bike"
DEFAULT_PICKUP_INSTRUCTIONS = "Refer to your booking email for pickup details."

logger = logging.getLogger(__name__)


def create_booking(
    params: CreateBookingParams, token: str | None
) -> PaymentRequiredBooking | NoPaymentBooking:
    """Create the booking record for an accepted quote.

    The client amount is sent for a server-side cross check only, the server
    recalculates the price itself.

    Args:
        params (CreateBookingParams): confirmed rental parameters
        token (str | None): bearer token of the logged in user

    Returns:
        PaymentRequiredBooking | NoPaymentBooking: payment order handle, or the
        finished booking when nothing is owed
    """
    token = require_token(token)
    logger.info(
        f"Creating booking for bike {params.bike_id} "
        f"with client amount {params.final_amount_from_client}"
    )
    result = api_request("POST", BOOKINGS_PATH, token=token, payload=params.to_payload())
    booking = parse_create_booking_response(result)
    logger.info(f"Booking {booking.booking_id} created ({booking.kind})")
    return booking


def verify_payment(
    request: PaymentVerificationRequest, token: str | None
) -> PaymentVerificationResult:
    token = require_token(token)
    logger.info(
        f"Verifying payment {request.razorpay_payment_id} for booking {request.booking_id}"
    )
    result = api_request(
        "POST", VERIFY_PAYMENT_PATH, token=token, payload=request.to_payload()
    )
    return PaymentVerificationResult.model_validate(result)


def _to_confirmed_details(
    raw: DictWithStringKeys, booking_id: str
) -> ConfirmedBookingDetails:
    bike = raw.get("bike") or {}
    user = raw.get("user") or {}
    images = bike.get("images") or []
    pickup = raw.get("pickupDetails") or {}
    start = raw.get("startTime") or raw.get("startDate")
    end = raw.get("endTime") or raw.get("endDate")

    return ConfirmedBookingDetails(
        booking_id=raw.get("_id") or raw.get("id") or booking_id,
        bike_name=bike.get("model") or raw.get("bikeName") or "N/A",
        bike_model=bike.get("model") or raw.get("bikeModel"),
        bike_image_url=(images[0].get("url") if images else None)
        or raw.get("bikeImageUrl")
        or PLACEHOLDER_BIKE_IMAGE,
        license_plate=bike.get("licensePlate") or raw.get("licensePlate"),
        rental_period=format_rental_period(start, end),
        total_amount=format_amount(raw.get("finalAmount", raw.get("totalPrice"))),
        pickup_instructions=pickup.get("instructions")
        or raw.get("pickupInstructions")
        or DEFAULT_PICKUP_INSTRUCTIONS,
        start_date=start,
        end_date=end,
        status=raw.get("status") or "Confirmed",
        user_full_name=user.get("fullName") or raw.get("userFullName"),
        user_email=user.get("email") or raw.get("userEmail"),
    )


def fetch_confirmed_booking(booking_id: str, token: str | None) -> ConfirmedBookingDetails:
    token = require_token(token)
    logger.debug(f"Fetching confirmed booking {booking_id}")
    result = api_request("GET", f"{BOOKINGS_PATH}/{booking_id}", token=token)
    return _to_confirmed_details(result.get("data") or {}, booking_id)
