from typing import Any, Dict
from enum import Enum


class TokenScope(Enum):
    USER = "user"


class RequestStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BookingPhase(Enum):
    IDLE = "idle"
    DETAILS_LOADED = "details_loaded"
    PRICE_QUOTED = "price_quoted"
    BOOKING_CREATED = "booking_created"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_FAILED = "payment_failed"
    BOOKING_FINALIZED_NO_PAYMENT = "booking_finalized_no_payment"


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixedAmount"


class PromoAudience(Enum):
    ALL_USERS = "allUsers"
    FIRST_RIDE_ONLY = "firstRideOnly"
    SPECIFIC_BIKE_CATEGORIES = "specificBikeCategories"
    SPECIFIC_USERS = "specificUsers"


class DocumentStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# gateway error code the checkout widget uses when the user closes it
PAYMENT_CANCELLED_CODE = 2

DictWithStringKeys = Dict[str, Any]
