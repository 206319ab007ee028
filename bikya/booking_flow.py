import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Callable

from bikya.api_client import ApiError
from bikya.bike_accessor import fetch_bike_summary, fetch_user_info
from bikya.booking_state import (
    BIKE_FALLBACK_ERROR,
    DOCUMENTS_FALLBACK_ERROR,
    USER_FALLBACK_ERROR,
    BookingStore,
)
from bikya.custom_types import PAYMENT_CANCELLED_CODE, BookingPhase, RequestStatus
from bikya.document_accessor import fetch_user_documents, is_license_verified
from bikya.env import default_currency, merchant_name
from bikya.models import (
    CheckoutOptions,
    CheckoutPrefill,
    CreateBookingParams,
    GatewayPaymentResult,
    NoPaymentBooking,
    PaymentRequiredBooking,
    PaymentVerificationRequest,
    PriceCalculationParams,
)
from bikya.pricing_manager import estimate_subtotal

PLACEHOLDER_CHECKOUT_IMAGE = "https://via.placeholder.com/100"
FINALIZED_PHASES = (
    BookingPhase.PAYMENT_VERIFIED,
    BookingPhase.BOOKING_FINALIZED_NO_PAYMENT,
)

logger = logging.getLogger(__name__)


class PaymentGatewayError(RuntimeError):
    def __init__(self, code: int, description: str = ""):
        super().__init__(description or f"Payment gateway error {code}")
        self.code = code
        self.description = description

    @property
    def is_cancellation(self) -> bool:
        return self.code == PAYMENT_CANCELLED_CODE


PaymentWidget = Callable[[CheckoutOptions], GatewayPaymentResult]
Alert = Callable[[str, str], None]


def log_alert(title: str, message: str) -> None:
    logger.warning(f"{title}: {message}")


class BookingFlow:
    """One booking attempt on the booking screen.

    Drives the store through load -> quote -> (promo)* -> create -> pay -> verify.
    The payment widget is an external collaborator: it gets CheckoutOptions and
    either returns the signed payment triple or raises PaymentGatewayError.
    """

    def __init__(
        self,
        token: str | None,
        payment_widget: PaymentWidget,
        alert: Alert = log_alert,
        store: BookingStore | None = None,
    ):
        self.token = token
        self.payment_widget = payment_widget
        self.alert = alert
        self.store = store or BookingStore()
        self._window: tuple[datetime, datetime] | None = None

    @property
    def state(self):
        return self.store.booking

    @property
    def phase(self) -> BookingPhase:
        return self.store.booking.phase

    @property
    def is_finalized(self) -> bool:
        return self.phase in FINALIZED_PHASES

    def load(self, bike_id: str) -> bool:
        """Reset the attempt and load bike, user and documents side by side.

        Results are written back on the calling thread, the worker threads only
        perform the requests. Documents only gate `confirm`, a failure there
        does not fail the load.
        """
        self.store.reset()
        self._window = None
        bike_slot, user_slot = self.state.bike, self.state.user
        loads = [
            (bike_slot, BIKE_FALLBACK_ERROR, fetch_bike_summary, bike_id),
            (user_slot, USER_FALLBACK_ERROR, fetch_user_info, self.token),
            (
                self.state.documents,
                DOCUMENTS_FALLBACK_ERROR,
                fetch_user_documents,
                self.token,
            ),
        ]
        tokens = [slot.begin() for slot, *_ in loads]

        with ThreadPoolExecutor(max_workers=len(loads)) as pool:
            pending = {
                pool.submit(call, arg): (slot, request_token, fallback_error)
                for (slot, fallback_error, call, arg), request_token in zip(
                    loads, tokens
                )
            }
            for future in as_completed(pending):
                slot, request_token, fallback_error = pending[future]
                try:
                    slot.resolve(request_token, future.result())
                except (ApiError, ValueError) as e:
                    logger.error(f"{slot.name} request failed: {e}")
                    slot.reject(request_token, str(e) or fallback_error)

        if bike_slot.status == RequestStatus.SUCCEEDED and bike_slot.data is None:
            bike_slot.status = RequestStatus.FAILED
            bike_slot.error = f"Bike {bike_id} was not found."

        loaded = (
            bike_slot.status == RequestStatus.SUCCEEDED
            and user_slot.status == RequestStatus.SUCCEEDED
        )
        if loaded:
            self.state.phase = BookingPhase.DETAILS_LOADED
        logger.info(f"Booking screen loaded for bike {bike_id}: {self.store.snapshot()}")
        return loaded

    def _params(self, promo_code: str | None = None) -> PriceCalculationParams:
        start_time, end_time = self._window
        return PriceCalculationParams(
            bike_id=self.state.bike.data.id,
            start_time=start_time,
            end_time=end_time,
            promo_code=promo_code or None,
        )

    def quote(
        self, start_time: datetime, end_time: datetime, promo_code: str | None = None
    ) -> bool:
        if self.is_finalized:
            logger.warning("Booking already finalized, not re-quoting")
            return False
        if self.state.bike.data is None or end_time <= start_time:
            self.state.set_price_details(None)
            return False

        self._window = (start_time, end_time)
        if not self.store.calculate_price(self._params(promo_code), self.token):
            return False
        self.state.phase = BookingPhase.PRICE_QUOTED
        return True

    def current_subtotal(self) -> float | None:
        quote = self.state.price.data
        if quote is not None:
            return quote.original_amount
        if self.state.bike.data is None or self._window is None:
            return None
        return estimate_subtotal(self.state.bike.data, *self._window)

    def load_promos(self) -> bool:
        return self.store.fetch_available_promos(self.token)

    def apply_promo(self, code: str) -> bool:
        if self.is_finalized:
            return False
        if self.state.bike.data is None or self._window is None:
            self.alert("Error", "Please select rental dates first.")
            return False

        code = code.strip()
        if not self.store.apply_promo(self._params(code), self.token):
            self.alert("Promo Not Applied", self.store.promos.applied.error)
            return False

        self.state.set_price_details(self.store.promos.applied.data)
        self.state.phase = BookingPhase.PRICE_QUOTED
        return True

    def confirm(self) -> bool:
        """Create the booking for the current quote and collect payment if owed.

        Returns True once the booking is finalized, with or without payment.
        """
        if self.is_finalized:
            logger.warning("Booking already finalized, ignoring confirm")
            return False
        if self.phase == BookingPhase.PAYMENT_PENDING:
            logger.warning("Payment already in progress, ignoring confirm")
            return False

        quote = self.state.price.data
        if (
            quote is None
            or self.state.bike.data is None
            or self._window is None
            or not self.token
            or self.state.user.data is None
        ):
            self.alert(
                "Error",
                "Booking details are incomplete or session expired. Please try again.",
            )
            return False
        if not is_license_verified(self.state.documents.data):
            logger.info("Driver's license not verified, booking not created")
            self.alert(
                "ID Verification Required",
                "Please upload and verify your ID documents before confirming your booking.",
            )
            return False

        start_time, end_time = self._window
        params = CreateBookingParams(
            bike_id=self.state.bike.data.id,
            start_time=start_time,
            end_time=end_time,
            promo_code_id=quote.promo_id_for_next_step,
            final_amount_from_client=quote.final_amount,
        )
        if not self.store.create_booking(params, self.token):
            self.alert(
                "Booking Failed",
                self.state.created_booking.error or "Could not create your booking.",
            )
            return False

        booking = self.state.created_booking.data
        self.state.phase = BookingPhase.BOOKING_CREATED
        if isinstance(booking, NoPaymentBooking):
            logger.info(f"Booking {booking.booking_id} confirmed without payment")
            self.state.phase = BookingPhase.BOOKING_FINALIZED_NO_PAYMENT
            return True
        return self._collect_payment(booking)

    def checkout_options(self, booking: PaymentRequiredBooking) -> CheckoutOptions:
        bike = self.state.bike.data
        user = self.state.user.data
        return CheckoutOptions(
            description=f"Booking for {bike.model}",
            image=bike.image_url or PLACEHOLDER_CHECKOUT_IMAGE,
            currency=booking.currency or default_currency,
            key=booking.razorpay_key_id,
            amount=booking.amount,
            name=merchant_name,
            order_id=booking.razorpay_order_id,
            prefill=CheckoutPrefill(
                email=user.email or booking.user_email,
                contact=user.phone or booking.user_contact or "",
                name=user.full_name or booking.user_name,
            ),
        )

    def _collect_payment(self, booking: PaymentRequiredBooking) -> bool:
        options = self.checkout_options(booking)
        self.state.phase = BookingPhase.PAYMENT_PENDING
        logger.info(f"Opening checkout for order {booking.razorpay_order_id}")

        try:
            payment = self.payment_widget(options)
        except PaymentGatewayError as e:
            if e.is_cancellation:
                logger.info(f"Checkout for booking {booking.booking_id} cancelled by user")
                self.state.created_booking.reset()
                self.state.phase = BookingPhase.IDLE
                return False
            logger.error(f"Payment for booking {booking.booking_id} failed: {e}")
            self.state.phase = BookingPhase.PAYMENT_FAILED
            self.alert("Payment Failed", e.description or str(e))
            return False

        request = PaymentVerificationRequest(
            razorpay_payment_id=payment.razorpay_payment_id,
            razorpay_order_id=payment.razorpay_order_id,
            razorpay_signature=payment.razorpay_signature,
            booking_id=booking.booking_id,
        )
        if not self.store.verify_payment(request, self.token):
            self.state.phase = BookingPhase.PAYMENT_FAILED
            self.alert("Payment Verification Failed", self.state.payment.error)
            return False

        logger.info(f"Payment verified for booking {booking.booking_id}")
        self.state.phase = BookingPhase.PAYMENT_VERIFIED
        return True

    def fetch_confirmation(self) -> bool:
        booking = self.state.created_booking.data
        if booking is None or not self.is_finalized:
            return False
        return self.store.fetch_confirmed_booking(booking.booking_id, self.token)
