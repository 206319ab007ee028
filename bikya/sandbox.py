"""In-memory stand-in for the Bikya backend.

Serves the endpoints the booking client talks to, with dummy bikes, users,
license documents and promo codes, so the whole workflow can run without the
real backend. Pricing and payment verification follow the production rules:
hourly pricing on ceil'd hours, promo discounts capped at the rental amount
and limited per user, zero taxes, and HMAC-SHA256 gateway signatures over
"order_id|payment_id".
"""

import hashlib
import hmac
import logging
import uuid
from copy import deepcopy
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bikya.custom_types import (
    DictWithStringKeys,
    DiscountType,
    DocumentStatus,
    PromoAudience,
    TokenScope,
)
from bikya.env import jwt_secret_key, log_level, razorpay_key_id, razorpay_key_secret
from bikya.jwt_manager import verify_jwt_token
from bikya.models import (
    CreateBookingParams,
    PaymentVerificationRequest,
    PriceCalculationParams,
)
from bikya.utils import rental_hours, to_minor_units

logging.basicConfig(level=log_level)

CURRENCY = "INR"
CLOCK_SKEW = timedelta(minutes=5)
UNAVAILABLE_STATUSES = ("maintenance", "unavailable")
BLOCKING_BOOKING_STATUSES = ("confirmed", "active", "pending_payment")
PROMO_CONSUMING_STATUSES = ("confirmed", "active", "completed")

logger = logging.getLogger(__name__)

_FAR_FUTURE = datetime(2099, 12, 31, tzinfo=timezone.utc)
_PAST = datetime(2024, 1, 1, tzinfo=timezone.utc)

DUMMY_BIKES: list[DictWithStringKeys] = [
    {
        "_id": "1",
        "name": "Royal Enfield Classic 350",
        "model": "Classic 350",
        "year": 2022,
        "images": [{"url": "https://placehold.co/400x250/1A1A1A/F5F5F5?text=Classic+350"}],
        "gearType": "Manual",
        "mileage": "35 km/l",
        "rating": 4.6,
        "pricePerHour": 150,
        "category": "Cruiser",
        "availabilityStatus": "available",
    },
    {
        "_id": "2",
        "name": "Honda Activa 6G",
        "model": "Activa 6G",
        "year": 2023,
        "images": [{"url": "https://placehold.co/400x250/1A1A1A/F5F5F5?text=Activa"}],
        "gearType": "Gearless",
        "mileage": "50 km/l",
        "rating": 4.3,
        "pricePerHour": 60,
        "category": "Scooter",
        "availabilityStatus": "available",
    },
    {
        "_id": "3",
        "name": "Yamaha MT-07",
        "model": "MT-07",
        "year": 2023,
        "images": [{"url": "https://placehold.co/400x250/1A1A1A/F5F5F5?text=MT-07"}],
        "gearType": "Manual",
        "mileage": "25 km/l",
        "rating": 4.8,
        "pricePerHour": 250,
        "category": "Sports",
        "availabilityStatus": "available",
    },
    {
        "_id": "4",
        "name": "KTM Duke 390",
        "model": "Duke 390",
        "year": 2021,
        "images": [],
        "gearType": "Manual",
        "mileage": "28 km/l",
        "rating": 4.5,
        "pricePerHour": 200,
        "category": "Sports",
        "availabilityStatus": "maintenance",
    },
]

DUMMY_USERS: list[DictWithStringKeys] = [
    {
        "_id": "u1",
        "fullName": "Aarav Sharma",
        "email": "aarav@example.com",
        "phone": "9876543210",
        "role": "User",
    },
    {
        "_id": "u2",
        "fullName": "Diya Patel",
        "email": "diya@example.com",
        "phone": "9123456780",
        "role": "User",
    },
]

# newest first, as the backend sorts them
DUMMY_DOCUMENTS: list[DictWithStringKeys] = [
    {
        "_id": "doc_u1_front",
        "user": "u1",
        "documentType": "drivers_license",
        "documentSide": "front",
        "fileUrl": "https://placehold.co/600x400?text=DL+front",
        "status": DocumentStatus.APPROVED.value,
    },
    {
        "_id": "doc_u1_back",
        "user": "u1",
        "documentType": "drivers_license",
        "documentSide": "back",
        "fileUrl": "https://placehold.co/600x400?text=DL+back",
        "status": DocumentStatus.APPROVED.value,
    },
    {
        "_id": "doc_u2_front",
        "user": "u2",
        "documentType": "drivers_license",
        "documentSide": "front",
        "fileUrl": "https://placehold.co/600x400?text=DL+front",
        "status": DocumentStatus.APPROVED.value,
    },
    {
        "_id": "doc_u2_back",
        "user": "u2",
        "documentType": "drivers_license",
        "documentSide": "back",
        "fileUrl": "https://placehold.co/600x400?text=DL+back",
        "status": DocumentStatus.PENDING.value,
    },
]

DUMMY_PROMOS: list[DictWithStringKeys] = [
    {
        "_id": "promo_bikya50",
        "code": "BIKYA50",
        "description": "Get ₹50 off on your first ride",
        "discountType": DiscountType.FIXED_AMOUNT.value,
        "discountValue": 50,
        "minBookingValue": 100,
        "maxDiscountAmount": None,
        "validFrom": _PAST,
        "validTill": _FAR_FUTURE,
        "maxUsageCount": 1000,
        "usedCount": 0,
        "isActive": True,
        "userMaxUsageCount": 1,
        "applicableTo": {"type": PromoAudience.FIRST_RIDE_ONLY.value},
    },
    {
        "_id": "promo_weekend20",
        "code": "WEEKEND20",
        "description": "20% off on weekend rides",
        "discountType": DiscountType.PERCENTAGE.value,
        "discountValue": 20,
        "minBookingValue": 0,
        "maxDiscountAmount": 150,
        "validFrom": _PAST,
        "validTill": _FAR_FUTURE,
        "maxUsageCount": 1000,
        "usedCount": 0,
        "isActive": True,
        "userMaxUsageCount": 5,
        "applicableTo": {"type": PromoAudience.ALL_USERS.value},
    },
    {
        "_id": "promo_referral100",
        "code": "REFERRAL100",
        "description": "₹100 off on your first ride with referral code",
        "discountType": DiscountType.FIXED_AMOUNT.value,
        "discountValue": 100,
        "minBookingValue": 1000,
        "maxDiscountAmount": None,
        "validFrom": _PAST,
        "validTill": _FAR_FUTURE,
        "maxUsageCount": 1000,
        "usedCount": 0,
        "isActive": True,
        "userMaxUsageCount": 1,
        "applicableTo": {"type": PromoAudience.SPECIFIC_USERS.value, "users": ["u1"]},
    },
    {
        "_id": "promo_freeride",
        "code": "FREERIDE",
        "description": "Your first ride is on us",
        "discountType": DiscountType.PERCENTAGE.value,
        "discountValue": 100,
        "minBookingValue": 0,
        "maxDiscountAmount": None,
        "validFrom": _PAST,
        "validTill": _FAR_FUTURE,
        "maxUsageCount": 1000,
        "usedCount": 0,
        "isActive": True,
        "userMaxUsageCount": 1,
        "applicableTo": {"type": PromoAudience.ALL_USERS.value},
    },
    {
        "_id": "promo_scooty30",
        "code": "SCOOTY30",
        "description": "30% off on scooters",
        "discountType": DiscountType.PERCENTAGE.value,
        "discountValue": 30,
        "minBookingValue": 0,
        "maxDiscountAmount": 60,
        "validFrom": _PAST,
        "validTill": _FAR_FUTURE,
        "maxUsageCount": 1000,
        "usedCount": 0,
        "isActive": True,
        "userMaxUsageCount": 3,
        "applicableTo": {
            "type": PromoAudience.SPECIFIC_BIKE_CATEGORIES.value,
            "bikeCategories": ["Scooter"],
        },
    },
]


def sign_payment(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def promo_audience_rejection(
    promo: DictWithStringKeys, user_id: str, user_uses: int, completed_rides: int
) -> str | None:
    """Reason the promo is closed to this user, or None.

    Bike categories are only known once a bike is quoted, see `promo_rejection`.
    """
    if user_uses >= promo["userMaxUsageCount"]:
        return "User-specific usage limit reached."
    audience = promo.get("applicableTo") or {}
    kind = audience.get("type")
    if kind == PromoAudience.FIRST_RIDE_ONLY.value and completed_rides > 0:
        return "Applicable to first ride only."
    if kind == PromoAudience.SPECIFIC_USERS.value and user_id not in audience.get("users", []):
        return "Promo not applicable to this user."
    return None


def promo_rejection(
    promo: DictWithStringKeys,
    original_amount: float,
    now: datetime,
    bike: DictWithStringKeys,
    user_id: str,
    user_uses: int,
    completed_rides: int,
) -> str | None:
    if not promo["validFrom"] <= now <= promo["validTill"]:
        return "Date validity failed."
    if promo["usedCount"] >= promo["maxUsageCount"]:
        return "Overall usage limit reached."
    if original_amount < promo["minBookingValue"]:
        return (
            f"Minimum booking value of {promo['minBookingValue']} not met. "
            f"Original amount: {original_amount}."
        )
    reason = promo_audience_rejection(promo, user_id, user_uses, completed_rides)
    if reason:
        return reason
    audience = promo.get("applicableTo") or {}
    if audience.get("type") == PromoAudience.SPECIFIC_BIKE_CATEGORIES.value and bike.get(
        "category"
    ) not in audience.get("bikeCategories", []):
        return f"Promo not valid for bike category: {bike.get('category')}."
    return None


def discount_for(promo: DictWithStringKeys, original_amount: float) -> float:
    if promo["discountType"] == DiscountType.PERCENTAGE.value:
        discount = original_amount * promo["discountValue"] / 100
        if promo["maxDiscountAmount"] and discount > promo["maxDiscountAmount"]:
            discount = promo["maxDiscountAmount"]
    else:
        discount = promo["discountValue"]
    return min(discount, original_amount)


def quote_rental(
    bike: DictWithStringKeys,
    start_time: datetime,
    end_time: datetime,
    promo: DictWithStringKeys | None,
    now: datetime,
) -> DictWithStringKeys:
    duration_hours = rental_hours(start_time, end_time)
    original_amount = duration_hours * bike["pricePerHour"]

    discount_amount = 0.0
    promo_applied = None
    promo_id = None
    if promo:
        discount_amount = discount_for(promo, original_amount)
        promo_applied = {
            "code": promo["code"],
            "description": promo["description"],
            "discountApplied": round(discount_amount, 2),
        }
        promo_id = promo["_id"]

    taxes_and_fees = 0.0
    final_amount = original_amount - discount_amount + taxes_and_fees
    return {
        "bikeId": bike["_id"],
        "bikeName": bike.get("name") or bike["model"],
        "startTime": start_time.isoformat(),
        "endTime": end_time.isoformat(),
        "durationHours": duration_hours,
        "originalAmount": round(original_amount, 2),
        "promoApplied": promo_applied,
        "promoIdForNextStep": promo_id,
        "discountAmount": round(discount_amount, 2),
        "taxesAndFees": round(taxes_and_fees, 2),
        "finalAmount": round(final_amount, 2),
        "currency": CURRENCY,
    }


class SandboxData:
    def __init__(self):
        self.bikes = {bike["_id"]: deepcopy(bike) for bike in DUMMY_BIKES}
        self.users = {user["_id"]: deepcopy(user) for user in DUMMY_USERS}
        self.documents = deepcopy(DUMMY_DOCUMENTS)
        self.promos = {promo["_id"]: deepcopy(promo) for promo in DUMMY_PROMOS}
        self.bookings: dict[str, DictWithStringKeys] = {}

    def promo_by_code(self, code: str | None) -> DictWithStringKeys | None:
        if not code or not code.strip():
            return None
        code = code.strip().upper()
        return next(
            (p for p in self.promos.values() if p["code"] == code and p["isActive"]),
            None,
        )

    def documents_for(self, user_id: str) -> list[DictWithStringKeys]:
        return [doc for doc in self.documents if doc["user"] == user_id]

    def promo_uses(self, user_id: str, promo_id: str) -> int:
        return sum(
            1
            for booking in self.bookings.values()
            if booking["user"] == user_id
            and booking["appliedPromoCode"] == promo_id
            and booking["status"] in PROMO_CONSUMING_STATUSES
        )

    def completed_rides(self, user_id: str) -> int:
        return sum(
            1
            for booking in self.bookings.values()
            if booking["user"] == user_id and booking["status"] == "completed"
        )

    def promos_for_user(self, user_id: str, now: datetime) -> list[DictWithStringKeys]:
        return [
            promo
            for promo in self.promos.values()
            if promo["isActive"]
            and promo["validFrom"] <= now <= promo["validTill"]
            and promo["usedCount"] < promo["maxUsageCount"]
            and promo_audience_rejection(
                promo,
                user_id,
                self.promo_uses(user_id, promo["_id"]),
                self.completed_rides(user_id),
            )
            is None
        ]

    def quote(
        self,
        bike: DictWithStringKeys,
        start_time: datetime,
        end_time: datetime,
        promo: DictWithStringKeys | None,
        user_id: str,
        now: datetime,
    ) -> DictWithStringKeys:
        if promo:
            original_amount = rental_hours(start_time, end_time) * bike["pricePerHour"]
            reason = promo_rejection(
                promo,
                original_amount,
                now,
                bike,
                user_id,
                self.promo_uses(user_id, promo["_id"]),
                self.completed_rides(user_id),
            )
            if reason:
                logger.info(f"Promo {promo['code']} not applied for user {user_id}: {reason}")
                promo = None
        return quote_rental(bike, start_time, end_time, promo, now)

    def bike_for_rental(
        self, bike_id: str, start_time: datetime, end_time: datetime, user_id: str
    ) -> DictWithStringKeys:
        """The bike if it can be rented for the window, else an HTTP error.

        The user's own unpaid booking for the same slot does not block it, a new
        booking replaces it.
        """
        bike = self.bikes.get(bike_id)
        if not bike:
            raise HTTPException(status_code=404, detail="Bike not found.")
        if bike["availabilityStatus"] in UNAVAILABLE_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f'Bike "{bike["name"]}" is currently unavailable ({bike["availabilityStatus"]}).',
            )
        for booking in self._overlapping(bike_id, start_time, end_time):
            if not self._is_own_unpaid(booking, user_id):
                raise HTTPException(
                    status_code=400,
                    detail="Bike is not available for the selected time slot.",
                )
        return bike

    def release_unpaid(
        self, bike_id: str, start_time: datetime, end_time: datetime, user_id: str
    ) -> None:
        for booking in self._overlapping(bike_id, start_time, end_time):
            if self._is_own_unpaid(booking, user_id):
                logger.info(f"Booking {booking['_id']} superseded by a new attempt")
                booking["status"] = "cancelled"

    def _overlapping(
        self, bike_id: str, start_time: datetime, end_time: datetime
    ) -> list[DictWithStringKeys]:
        return [
            booking
            for booking in self.bookings.values()
            if booking["bike"] == bike_id
            and booking["status"] in BLOCKING_BOOKING_STATUSES
            and booking["startTime"] < end_time
            and booking["endTime"] > start_time
        ]

    @staticmethod
    def _is_own_unpaid(booking: DictWithStringKeys, user_id: str) -> bool:
        return booking["user"] == user_id and booking["status"] == "pending_payment"


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _checked_window(
    start_time: datetime, end_time: datetime, now: datetime
) -> tuple[datetime, datetime]:
    start_time, end_time = _as_utc(start_time), _as_utc(end_time)
    if start_time < now - CLOCK_SKEW:
        raise HTTPException(status_code=400, detail="Start time cannot be in the past.")
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="End time must be after start time.")
    return start_time, end_time


def create_app(
    jwt_secret: str | None = jwt_secret_key,
    gateway_key_id: str | None = razorpay_key_id,
    gateway_key_secret: str | None = razorpay_key_secret,
) -> FastAPI:
    app = FastAPI(title="Bikya sandbox")
    data = SandboxData()
    app.state.data = data

    def current_user(authorization: str | None) -> DictWithStringKeys:
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Not authorized, no token")
        try:
            claims = verify_jwt_token(
                authorization.removeprefix("Bearer "), TokenScope.USER, jwt_secret
            )
        except ValueError as e:
            raise HTTPException(status_code=401, detail=f"Not authorized, {e}") from e
        user = data.users.get(claims.get("user_id"))
        if not user:
            raise HTTPException(status_code=401, detail="Not authorized, user not found")
        return user

    def gateway_secret() -> str:
        if not gateway_key_secret:
            raise HTTPException(status_code=500, detail="Payment gateway is not configured.")
        return gateway_key_secret

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [{"msg": err["msg"], "path": ".".join(map(str, err["loc"]))} for err in exc.errors()]
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.get("/api/bikes/{bike_id}")
    def get_bike_request(bike_id: str) -> DictWithStringKeys:
        bike = data.bikes.get(bike_id)
        if not bike:
            raise HTTPException(status_code=404, detail="Bike not found")
        return bike

    @app.get("/api/auth/me")
    def get_me_request(authorization: str | None = Header(default=None)) -> DictWithStringKeys:
        return current_user(authorization)

    @app.get("/api/documents/me")
    def get_my_documents_request(
        authorization: str | None = Header(default=None),
    ) -> list[DictWithStringKeys]:
        user = current_user(authorization)
        return data.documents_for(user["_id"])

    @app.get("/api/promocodes/available")
    def available_promos_request(
        authorization: str | None = Header(default=None),
    ) -> DictWithStringKeys:
        user = current_user(authorization)
        promos = [
            {
                "code": p["code"],
                "description": p["description"],
                "discountType": p["discountType"],
                "discountValue": p["discountValue"],
                "minBookingValue": p["minBookingValue"],
                "maxDiscountAmount": p["maxDiscountAmount"],
            }
            for p in data.promos_for_user(user["_id"], datetime.now(timezone.utc))
        ]
        return {"success": True, "data": promos}

    @app.post("/api/bookings/calculate-price")
    def calculate_price_request(
        request: PriceCalculationParams,
        authorization: str | None = Header(default=None),
    ) -> DictWithStringKeys:
        user = current_user(authorization)
        now = datetime.now(timezone.utc)
        start_time, end_time = _checked_window(
            request.start_time, request.end_time, now
        )
        bike = data.bike_for_rental(request.bike_id, start_time, end_time, user["_id"])

        promo = data.promo_by_code(request.promo_code)
        if request.promo_code and not promo:
            logger.info(f"Promo {request.promo_code} not found or not active")

        quote = data.quote(bike, start_time, end_time, promo, user["_id"], now)
        logger.info(f"Quoted {quote['finalAmount']} {CURRENCY} for user {user['_id']}")
        return {"success": True, "data": quote}

    @app.post("/api/bookings", status_code=201)
    def create_booking_request(
        request: CreateBookingParams,
        authorization: str | None = Header(default=None),
    ) -> DictWithStringKeys:
        user = current_user(authorization)
        now = datetime.now(timezone.utc)
        start_time, end_time = _checked_window(
            request.start_time, request.end_time, now
        )
        if request.final_amount_from_client < 0:
            raise HTTPException(status_code=400, detail="Invalid final amount.")
        bike = data.bike_for_rental(request.bike_id, start_time, end_time, user["_id"])

        promo = data.promos.get(request.promo_code_id) if request.promo_code_id else None
        quote = data.quote(bike, start_time, end_time, promo, user["_id"], now)
        final_amount = quote["finalAmount"]
        if abs(final_amount - request.final_amount_from_client) > 0.01:
            logger.error(
                f"Amount mismatch: client={request.final_amount_from_client}, server={final_amount}"
            )
            raise HTTPException(
                status_code=400,
                detail="Price mismatch. Please try calculating the price again or contact support.",
            )

        data.release_unpaid(bike["_id"], start_time, end_time, user["_id"])
        amount_in_paisa = to_minor_units(final_amount)
        booking_id = uuid.uuid4().hex
        booking = {
            "_id": booking_id,
            "bookingReference": f"BK-{booking_id[:8].upper()}",
            "user": user["_id"],
            "bike": bike["_id"],
            "startTime": start_time,
            "endTime": end_time,
            "originalAmount": quote["originalAmount"],
            "appliedPromoCode": quote["promoIdForNextStep"],
            "discountAmount": quote["discountAmount"],
            "taxesAndFees": quote["taxesAndFees"],
            "finalAmount": final_amount,
            "status": "pending_payment" if amount_in_paisa > 0 else "confirmed",
            "razorpayOrderId": f"order_{uuid.uuid4().hex[:14]}" if amount_in_paisa > 0 else None,
        }
        data.bookings[booking_id] = booking
        logger.info(f"Booking {booking_id} created with status {booking['status']}")

        if amount_in_paisa > 0:
            if not gateway_key_id:
                raise HTTPException(status_code=500, detail="Payment gateway is not configured.")
            return {
                "message": "Booking initiated. Proceed to payment.",
                "bookingId": booking_id,
                "bookingReference": booking["bookingReference"],
                "razorpayOrderId": booking["razorpayOrderId"],
                "razorpayKeyId": gateway_key_id,
                "amount": amount_in_paisa,
                "currency": CURRENCY,
                "userName": user["fullName"],
                "userEmail": user["email"],
                "userContact": user.get("phone") or "",
            }
        return {
            "message": "Booking confirmed (free of charge).",
            "bookingId": booking_id,
            "bookingReference": booking["bookingReference"],
            "bookingDetails": _serialize_booking(booking),
        }

    @app.post("/api/bookings/verify-payment")
    def verify_payment_request(
        request: PaymentVerificationRequest,
        authorization: str | None = Header(default=None),
    ) -> DictWithStringKeys:
        user = current_user(authorization)
        booking = data.bookings.get(request.booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found.")
        if booking["user"] != user["_id"]:
            raise HTTPException(
                status_code=403, detail="User not authorized to verify this booking."
            )
        if booking["razorpayOrderId"] != request.razorpay_order_id:
            raise HTTPException(
                status_code=400, detail="Razorpay Order ID mismatch with booking record."
            )
        if booking["status"] == "confirmed":
            return {
                "status": "success",
                "message": "Booking already confirmed.",
                "bookingDetails": _serialize_booking(booking),
            }
        if booking["status"] != "pending_payment":
            raise HTTPException(
                status_code=400,
                detail=f"Booking cannot be confirmed. Current status: {booking['status']}.",
            )

        expected = sign_payment(
            booking["razorpayOrderId"], request.razorpay_payment_id, gateway_secret()
        )
        if not hmac.compare_digest(expected, request.razorpay_signature):
            booking["status"] = "payment_failed"
            logger.error(f"Invalid payment signature for booking {booking['_id']}")
            raise HTTPException(
                status_code=400, detail="Payment verification failed. Invalid signature."
            )

        booking["paymentId"] = request.razorpay_payment_id
        booking["status"] = "confirmed"
        if booking["appliedPromoCode"]:
            data.promos[booking["appliedPromoCode"]]["usedCount"] += 1
        logger.info(f"Booking {booking['_id']} confirmed after payment")
        return {
            "status": "success",
            "message": "Booking confirmed successfully!",
            "bookingDetails": _serialize_booking(booking),
        }

    @app.get("/api/bookings/{booking_id}")
    def get_booking_request(
        booking_id: str, authorization: str | None = Header(default=None)
    ) -> DictWithStringKeys:
        user = current_user(authorization)
        booking = data.bookings.get(booking_id)
        if not booking or booking["user"] != user["_id"]:
            raise HTTPException(
                status_code=404,
                detail="Booking not found or you are not authorized to view this booking.",
            )
        details = _serialize_booking(booking)
        details["bike"] = data.bikes[booking["bike"]]
        details["user"] = user
        return {"success": True, "data": details}

    return app


def _serialize_booking(booking: DictWithStringKeys) -> DictWithStringKeys:
    return {
        **booking,
        "startTime": booking["startTime"].isoformat(),
        "endTime": booking["endTime"].isoformat(),
    }


app = create_app()
