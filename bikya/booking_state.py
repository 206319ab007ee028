import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

from bikya.api_client import ApiError
from bikya.booking_manager import create_booking, fetch_confirmed_booking, verify_payment
from bikya.bike_accessor import fetch_bike_summary, fetch_user_info
from bikya.custom_types import BookingPhase, RequestStatus
from bikya.document_accessor import fetch_user_documents
from bikya.models import (
    BikeSummary,
    ConfirmedBookingDetails,
    CreateBookingParams,
    NoPaymentBooking,
    PaymentRequiredBooking,
    PaymentVerificationRequest,
    PaymentVerificationResult,
    PriceCalculationParams,
    PriceQuote,
    PromoOffer,
    UserDocument,
    UserInfo,
)
from bikya.pricing_manager import calculate_price
from bikya.promo_manager import apply_promo_and_get_price, fetch_available_promos

T = TypeVar("T")

BIKE_FALLBACK_ERROR = "Failed to load bike details."
USER_FALLBACK_ERROR = "Failed to load user details."
DOCUMENTS_FALLBACK_ERROR = "Failed to fetch user documents"
PRICE_FALLBACK_ERROR = "Price calculation failed."
BOOKING_FALLBACK_ERROR = "Booking creation failed."
PAYMENT_FALLBACK_ERROR = "Could not verify payment."
CONFIRMATION_FALLBACK_ERROR = (
    "Failed to fetch booking confirmation details. Please try again."
)
PROMOS_FALLBACK_ERROR = "Failed to load available promos."
APPLY_PROMO_FALLBACK_ERROR = "Failed to apply promo."

logger = logging.getLogger(__name__)


@dataclass
class RequestSlot(Generic[T]):
    """Lifecycle of one kind of request: status, last result and last error.

    Every dispatch takes a new token from `begin`; a result carrying an older
    token is dropped so a slow response cannot overwrite a newer one.
    """

    name: str
    status: RequestStatus = RequestStatus.IDLE
    data: T | None = None
    error: str | None = None
    _latest_token: int = field(default=0, repr=False)

    @property
    def is_loading(self) -> bool:
        return self.status == RequestStatus.LOADING

    def begin(self) -> int:
        self._latest_token += 1
        self.status = RequestStatus.LOADING
        self.error = None
        return self._latest_token

    def _is_current(self, token: int) -> bool:
        if token != self._latest_token:
            logger.debug(
                f"Ignoring stale {self.name} response ({token=}, latest={self._latest_token})"
            )
            return False
        return True

    def resolve(self, token: int, data: T | None) -> bool:
        if not self._is_current(token):
            return False
        self.status = RequestStatus.SUCCEEDED
        self.data = data
        return True

    def reject(self, token: int, error: str) -> bool:
        if not self._is_current(token):
            return False
        self.status = RequestStatus.FAILED
        self.error = error
        return True

    def assign(self, data: T | None) -> None:
        # invalidates whatever is still in flight
        self._latest_token += 1
        self.data = data
        self.error = None
        self.status = RequestStatus.SUCCEEDED if data is not None else RequestStatus.IDLE

    def clear_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        self.assign(None)


@dataclass
class BookingState:
    bike: RequestSlot[BikeSummary] = field(default_factory=lambda: RequestSlot("bike"))
    user: RequestSlot[UserInfo] = field(default_factory=lambda: RequestSlot("user"))
    documents: RequestSlot[list[UserDocument]] = field(
        default_factory=lambda: RequestSlot("documents")
    )
    price: RequestSlot[PriceQuote] = field(default_factory=lambda: RequestSlot("price"))
    created_booking: RequestSlot[PaymentRequiredBooking | NoPaymentBooking] = field(
        default_factory=lambda: RequestSlot("created_booking")
    )
    payment: RequestSlot[PaymentVerificationResult] = field(
        default_factory=lambda: RequestSlot("payment")
    )
    confirmation: RequestSlot[ConfirmedBookingDetails] = field(
        default_factory=lambda: RequestSlot("confirmation")
    )
    phase: BookingPhase = BookingPhase.IDLE

    def slots(self) -> list[RequestSlot]:
        return [
            self.bike,
            self.user,
            self.documents,
            self.price,
            self.created_booking,
            self.payment,
            self.confirmation,
        ]

    def reset(self) -> None:
        for slot in self.slots():
            slot.reset()
        self.phase = BookingPhase.IDLE

    def clear_errors(self) -> None:
        for slot in self.slots():
            slot.clear_error()

    def set_price_details(self, quote: PriceQuote | None) -> None:
        self.price.assign(quote)


@dataclass
class PromoState:
    available: RequestSlot[list[PromoOffer]] = field(
        default_factory=lambda: RequestSlot("available_promos")
    )
    applied: RequestSlot[PriceQuote] = field(
        default_factory=lambda: RequestSlot("applied_promo")
    )

    def clear_errors(self) -> None:
        self.available.clear_error()
        self.applied.clear_error()

    def clear_applied_promo(self) -> None:
        self.applied.reset()


class BookingStore:
    """Holds the booking and promo state and runs requests through their slots.

    Mutations are expected from a single dispatching thread. Failures never
    propagate out of a dispatch, they end up as the slot's error string.
    """

    def __init__(self):
        self.booking = BookingState()
        self.promos = PromoState()

    def reset(self) -> None:
        self.booking.reset()
        self.promos.clear_applied_promo()
        self.promos.clear_errors()

    @staticmethod
    def run(slot: RequestSlot[T], call: Callable[[], T], fallback_error: str) -> bool:
        token = slot.begin()
        try:
            result = call()
        except (ApiError, ValueError) as e:
            logger.error(f"{slot.name} request failed: {e}")
            slot.reject(token, str(e) or fallback_error)
            return False
        return slot.resolve(token, result)

    def fetch_bike_summary(self, bike_id: str) -> bool:
        return self.run(
            self.booking.bike, lambda: fetch_bike_summary(bike_id), BIKE_FALLBACK_ERROR
        )

    def fetch_user_info(self, token: str | None) -> bool:
        return self.run(
            self.booking.user, lambda: fetch_user_info(token), USER_FALLBACK_ERROR
        )

    def fetch_user_documents(self, token: str | None) -> bool:
        return self.run(
            self.booking.documents,
            lambda: fetch_user_documents(token),
            DOCUMENTS_FALLBACK_ERROR,
        )

    def calculate_price(self, params: PriceCalculationParams, token: str | None) -> bool:
        return self.run(
            self.booking.price,
            lambda: calculate_price(params, token),
            PRICE_FALLBACK_ERROR,
        )

    def create_booking(self, params: CreateBookingParams, token: str | None) -> bool:
        return self.run(
            self.booking.created_booking,
            lambda: create_booking(params, token),
            BOOKING_FALLBACK_ERROR,
        )

    def verify_payment(self, request: PaymentVerificationRequest, token: str | None) -> bool:
        return self.run(
            self.booking.payment,
            lambda: verify_payment(request, token),
            PAYMENT_FALLBACK_ERROR,
        )

    def fetch_confirmed_booking(self, booking_id: str, token: str | None) -> bool:
        return self.run(
            self.booking.confirmation,
            lambda: fetch_confirmed_booking(booking_id, token),
            CONFIRMATION_FALLBACK_ERROR,
        )

    def fetch_available_promos(self, token: str | None) -> bool:
        return self.run(
            self.promos.available,
            lambda: fetch_available_promos(token),
            PROMOS_FALLBACK_ERROR,
        )

    def apply_promo(self, params: PriceCalculationParams, token: str | None) -> bool:
        self.promos.applied.reset()
        return self.run(
            self.promos.applied,
            lambda: apply_promo_and_get_price(params, token),
            APPLY_PROMO_FALLBACK_ERROR,
        )

    def snapshot(self) -> dict[str, Any]:
        return {
            "phase": self.booking.phase.value,
            **{slot.name: slot.status.value for slot in self.booking.slots()},
            "available_promos": self.promos.available.status.value,
            "applied_promo": self.promos.applied.status.value,
        }
