from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    model_validator,
)

from bikya.custom_types import DictWithStringKeys, DocumentStatus

PAYMENT_GROUP_FIELDS = ("razorpayOrderId", "razorpayKeyId", "amount", "currency")


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self, **kwargs: Any) -> DictWithStringKeys:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class BikeSummary(ApiModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str | None = None
    model: str
    year: int | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    gear_type: str | None = Field(default=None, alias="gearType")
    mileage: str | None = None
    rating: float | None = None
    price_per_hour: float = Field(alias="pricePerHour")

    @model_validator(mode="before")
    @classmethod
    def _first_image(cls, data: Any) -> Any:
        if isinstance(data, dict) and "imageUrl" not in data:
            images = data.get("images") or []
            if images:
                data = {**data, "imageUrl": images[0].get("url")}
        return data

    @property
    def display_name(self) -> str:
        return self.name or self.model


class UserInfo(ApiModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    full_name: str = Field(alias="fullName")
    email: str
    phone: str | None = None
    role: str | None = None


class UserDocument(ApiModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    document_type: str = Field(alias="documentType")
    document_side: str | None = Field(default=None, alias="documentSide")
    status: str = DocumentStatus.PENDING.value
    file_url: str | None = Field(default=None, alias="fileUrl")


class PriceCalculationParams(ApiModel):
    bike_id: str = Field(alias="bikeId")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    promo_code: str | None = Field(default=None, alias="promoCode")

    @model_validator(mode="after")
    def _check_window(self) -> "PriceCalculationParams":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time.")
        return self


class PromoApplied(ApiModel):
    code: str
    description: str
    discount_applied: float = Field(alias="discountApplied")


class PriceQuote(ApiModel):
    """Quote returned by the pricing endpoint.

    The server owns the arithmetic, final_amount is taken as-is.
    """

    bike_id: str = Field(alias="bikeId")
    bike_name: str = Field(alias="bikeName")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    duration_hours: float = Field(alias="durationHours")
    original_amount: float = Field(alias="originalAmount")
    promo_applied: PromoApplied | None = Field(default=None, alias="promoApplied")
    promo_id_for_next_step: str | None = Field(
        default=None, alias="promoIdForNextStep"
    )
    discount_amount: float = Field(default=0.0, alias="discountAmount")
    taxes_and_fees: float = Field(default=0.0, alias="taxesAndFees")
    final_amount: float = Field(alias="finalAmount")
    currency: str


class CreateBookingParams(ApiModel):
    bike_id: str = Field(alias="bikeId")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    promo_code_id: str | None = Field(default=None, alias="promoCodeId")
    final_amount_from_client: float = Field(alias="finalAmountFromClient")


class PaymentRequiredBooking(ApiModel):
    kind: Literal["payment_required"] = "payment_required"
    message: str
    booking_id: str = Field(alias="bookingId")
    booking_reference: str | None = Field(default=None, alias="bookingReference")
    razorpay_order_id: str = Field(alias="razorpayOrderId")
    razorpay_key_id: str = Field(alias="razorpayKeyId")
    amount: int
    currency: str
    user_name: str = Field(default="", alias="userName")
    user_email: str = Field(default="", alias="userEmail")
    user_contact: str = Field(default="", alias="userContact")


class NoPaymentBooking(ApiModel):
    kind: Literal["no_payment"] = "no_payment"
    message: str
    booking_id: str = Field(alias="bookingId")
    booking_reference: str | None = Field(default=None, alias="bookingReference")
    booking_details: DictWithStringKeys = Field(alias="bookingDetails")


CreateBookingResponse = Annotated[
    Union[PaymentRequiredBooking, NoPaymentBooking], Field(discriminator="kind")
]

_create_booking_adapter = TypeAdapter(CreateBookingResponse)


def parse_create_booking_response(
    payload: DictWithStringKeys,
) -> PaymentRequiredBooking | NoPaymentBooking:
    """Tag a raw create-booking payload and validate it into the matching variant.

    Payment fields must arrive together, a partial group is rejected rather than
    guessed at.
    """
    present = [name for name in PAYMENT_GROUP_FIELDS if payload.get(name) is not None]
    if present and len(present) != len(PAYMENT_GROUP_FIELDS):
        missing = sorted(set(PAYMENT_GROUP_FIELDS) - set(present))
        raise ValueError(f"Incomplete payment details in booking response: {missing=}")
    kind = "payment_required" if present else "no_payment"
    return _create_booking_adapter.validate_python({**payload, "kind": kind})


class PromoOffer(ApiModel):
    id: str
    code: str
    description: str
    discount_type: str | None = Field(default=None, alias="discountType")
    discount_value: float | None = Field(default=None, alias="discountValue")
    min_booking_value: float | None = Field(default=None, alias="minBookingValue")
    max_discount_amount: float | None = Field(default=None, alias="maxDiscountAmount")
    validity_text: str | None = Field(default=None, alias="validityText")


class PaymentVerificationRequest(ApiModel):
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str
    booking_id: str = Field(alias="bookingId")


class PaymentVerificationResult(ApiModel):
    status: str | None = None
    message: str | None = None
    booking_details: DictWithStringKeys | None = Field(
        default=None, alias="bookingDetails"
    )


class CheckoutPrefill(ApiModel):
    email: str
    contact: str
    name: str


class CheckoutOptions(ApiModel):
    description: str
    image: str | None = None
    currency: str
    key: str
    amount: int
    name: str
    order_id: str
    prefill: CheckoutPrefill


class GatewayPaymentResult(ApiModel):
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str


class ConfirmedBookingDetails(ApiModel):
    booking_id: str = Field(alias="bookingId")
    bike_name: str = Field(alias="bikeName")
    bike_model: str | None = Field(default=None, alias="bikeModel")
    bike_image_url: str = Field(alias="bikeImageUrl")
    license_plate: str | None = Field(default=None, alias="licensePlate")
    rental_period: str = Field(alias="rentalPeriod")
    total_amount: str = Field(alias="totalAmount")
    pickup_instructions: str | None = Field(default=None, alias="pickupInstructions")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    status: str | None = None
    user_full_name: str | None = Field(default=None, alias="userFullName")
    user_email: str | None = Field(default=None, alias="userEmail")
