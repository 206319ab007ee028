from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from bikya.booking_flow import BookingFlow, PaymentGatewayError
from bikya.custom_types import BookingPhase
from bikya.models import GatewayPaymentResult
from bikya.sandbox import (
    DUMMY_BIKES,
    DUMMY_PROMOS,
    SandboxData,
    discount_for,
    quote_rental,
    sign_payment,
)
from conftest import SANDBOX_GATEWAY_SECRET


def signing_widget(options):
    return GatewayPaymentResult(
        razorpay_payment_id="pay_sandbox_1",
        razorpay_order_id=options.order_id,
        razorpay_signature=sign_payment(
            options.order_id, "pay_sandbox_1", SANDBOX_GATEWAY_SECRET
        ),
    )


def bad_signature_widget(options):
    return GatewayPaymentResult(
        razorpay_payment_id="pay_sandbox_1",
        razorpay_order_id=options.order_id,
        razorpay_signature="0" * 64,
    )


@pytest.fixture
def alert():
    return MagicMock()


@pytest.fixture
def make_flow(sandbox_client, sandbox_token, alert):
    def _make(widget=signing_widget, bike_id="3"):
        flow = BookingFlow(sandbox_token, widget, alert=alert)
        assert flow.load(bike_id)
        return flow

    return _make


def promo(code):
    return next(p for p in DUMMY_PROMOS if p["code"] == code)


def test_percentage_discount_is_capped():
    assert discount_for(promo("WEEKEND20"), 1000) == 150
    assert discount_for(promo("WEEKEND20"), 500) == 100


def test_discount_never_exceeds_amount():
    assert discount_for(promo("BIKYA50"), 30) == 30


def test_quote_rounds_hours_up():
    now = datetime.now(timezone.utc)
    start = now + timedelta(days=1)
    quote = quote_rental(DUMMY_BIKES[2], start, start + timedelta(minutes=61), None, now)

    assert quote["durationHours"] == 2
    assert quote["originalAmount"] == 500
    assert quote["taxesAndFees"] == 0


def test_promo_below_minimum_value_is_not_applied():
    now = datetime.now(timezone.utc)
    start = now + timedelta(days=1)
    quote = SandboxData().quote(
        DUMMY_BIKES[2], start, start + timedelta(hours=2), promo("REFERRAL100"), "u1", now
    )

    assert quote["promoApplied"] is None
    assert quote["finalAmount"] == 500


def test_quote(make_flow, rental_window):
    flow = make_flow()

    assert flow.quote(*rental_window)

    quote = flow.state.price.data
    assert quote.original_amount == 500
    assert quote.discount_amount == 0
    assert quote.final_amount == 500
    assert quote.currency == "INR"


def test_quote_in_the_past(make_flow):
    flow = make_flow()
    start = datetime.now(timezone.utc) - timedelta(hours=1)

    assert not flow.quote(start, start + timedelta(hours=2))
    assert flow.state.price.error == "Start time cannot be in the past."


def test_quote_for_bike_in_maintenance(make_flow, rental_window):
    flow = make_flow(bike_id="4")

    assert not flow.quote(*rental_window)
    assert "currently unavailable" in flow.state.price.error


def test_apply_valid_promo(make_flow, rental_window, alert):
    flow = make_flow()
    flow.quote(*rental_window)

    assert flow.apply_promo("bikya50")

    quote = flow.state.price.data
    assert quote.promo_applied.code == "BIKYA50"
    assert quote.final_amount == 450
    assert quote.promo_id_for_next_step == "promo_bikya50"
    alert.assert_not_called()


def test_apply_unknown_promo(make_flow, rental_window, alert):
    flow = make_flow()
    flow.quote(*rental_window)

    assert not flow.apply_promo("INVALID1")

    title, message = alert.call_args[0]
    assert title == "Promo Not Applied"
    assert "INVALID1" in message
    assert flow.state.price.data.final_amount == 500


def test_available_promos(make_flow):
    flow = make_flow()

    assert flow.load_promos()

    codes = [p.code for p in flow.store.promos.available.data]
    assert "BIKYA50" in codes
    assert all(p.validity_text == "Details in app" for p in flow.store.promos.available.data)


def test_paid_booking(make_flow, rental_window, sandbox_app, alert):
    flow = make_flow()
    flow.quote(*rental_window)
    flow.apply_promo("BIKYA50")

    assert flow.confirm()
    assert flow.phase == BookingPhase.PAYMENT_VERIFIED
    alert.assert_not_called()

    booking_id = flow.state.created_booking.data.booking_id
    record = sandbox_app.state.data.bookings[booking_id]
    assert record["status"] == "confirmed"
    assert record["finalAmount"] == 450
    assert sandbox_app.state.data.promos["promo_bikya50"]["usedCount"] == 1

    assert flow.fetch_confirmation()
    details = flow.state.confirmation.data
    assert details.total_amount == "₹450.00"
    assert details.bike_name == "MT-07"
    assert details.user_email == "aarav@example.com"


def test_free_booking(make_flow, rental_window):
    widget = MagicMock()
    flow = make_flow(widget=widget)
    flow.quote(*rental_window)
    flow.apply_promo("FREERIDE")

    assert flow.confirm()

    widget.assert_not_called()
    assert flow.phase == BookingPhase.BOOKING_FINALIZED_NO_PAYMENT
    assert flow.state.created_booking.data.booking_details["status"] == "confirmed"


def test_cancelled_checkout_can_be_retried(make_flow, rental_window, sandbox_app, alert):
    order_ids = []

    def widget(options):
        order_ids.append(options.order_id)
        if len(order_ids) == 1:
            raise PaymentGatewayError(2, "Payment cancelled")
        return signing_widget(options)

    flow = make_flow(widget=widget)
    flow.quote(*rental_window)

    assert not flow.confirm()
    alert.assert_not_called()
    assert flow.phase == BookingPhase.IDLE
    assert flow.state.created_booking.data is None

    assert flow.confirm()
    assert flow.phase == BookingPhase.PAYMENT_VERIFIED
    statuses = {
        record["razorpayOrderId"]: record["status"]
        for record in sandbox_app.state.data.bookings.values()
    }
    assert statuses == {order_ids[0]: "cancelled", order_ids[1]: "confirmed"}


def test_bad_signature(make_flow, rental_window, sandbox_app, alert):
    flow = make_flow(widget=bad_signature_widget)
    flow.quote(*rental_window)

    assert not flow.confirm()

    alert.assert_called_once_with(
        "Payment Verification Failed", "Payment verification failed. Invalid signature."
    )
    assert flow.phase == BookingPhase.PAYMENT_FAILED
    [record] = sandbox_app.state.data.bookings.values()
    assert record["status"] == "payment_failed"


def test_price_mismatch(make_flow, rental_window, alert):
    flow = make_flow()
    flow.quote(*rental_window)
    flow.state.set_price_details(
        flow.state.price.data.model_copy(update={"final_amount": 1.0})
    )

    assert not flow.confirm()

    alert.assert_called_once_with(
        "Booking Failed",
        "Price mismatch. Please try calculating the price again or contact support.",
    )


def test_unauthenticated_requests_fail(sandbox_client, rental_window):
    flow = BookingFlow(None, signing_widget)

    assert not flow.load("3")
    assert flow.state.user.error == "Authentication token is missing."


def test_promo_cannot_be_reused(make_flow, rental_window, alert):
    first = make_flow()
    first.quote(*rental_window)
    assert first.apply_promo("BIKYA50")
    assert first.confirm()

    start, end = (moment + timedelta(days=1) for moment in rental_window)
    second = make_flow()
    second.quote(start, end)

    assert not second.apply_promo("BIKYA50")

    alert.assert_called_once_with(
        "Promo Not Applied", 'Promo code "BIKYA50" is invalid or not applicable.'
    )
    assert second.state.price.data.final_amount == 500
    assert second.load_promos()
    assert "BIKYA50" not in [p.code for p in second.store.promos.available.data]


def test_promos_are_scoped_to_the_user(sandbox_client, unverified_sandbox_token):
    flow = BookingFlow(unverified_sandbox_token, signing_widget)

    assert flow.load_promos()

    codes = [p.code for p in flow.store.promos.available.data]
    assert "REFERRAL100" not in codes
    assert "WEEKEND20" in codes


def test_category_promo(make_flow, rental_window, alert):
    sports = make_flow()
    sports.quote(*rental_window)
    assert not sports.apply_promo("SCOOTY30")

    scooter = make_flow(bike_id="2")
    scooter.quote(*rental_window)
    assert scooter.apply_promo("SCOOTY30")
    assert scooter.state.price.data.discount_amount == 36
    assert scooter.state.price.data.final_amount == 84


def test_unverified_license_never_creates_booking(
    sandbox_client, unverified_sandbox_token, sandbox_app, rental_window, alert
):
    flow = BookingFlow(unverified_sandbox_token, signing_widget, alert=alert)
    assert flow.load("3")
    flow.quote(*rental_window)

    assert not flow.confirm()

    alert.assert_called_once_with(
        "ID Verification Required",
        "Please upload and verify your ID documents before confirming your booking.",
    )
    assert sandbox_app.state.data.bookings == {}
