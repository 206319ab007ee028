import math
from datetime import datetime

RENTAL_PERIOD_UNAVAILABLE = "Date information unavailable"


def rental_hours(start_time: datetime, end_time: datetime) -> int:
    """Billable hours for a rental window, partial hours are charged in full."""
    seconds = (end_time - start_time).total_seconds()
    return math.ceil(seconds / 3600)


def to_minor_units(amount: float) -> int:
    return round(amount * 100)


def format_amount(amount: float | None, symbol: str = "₹") -> str:
    if not isinstance(amount, (int, float)):
        amount = 0
    return f"{symbol}{amount:.2f}"


def _format_moment(dt: datetime) -> str:
    hour = dt.strftime("%I").lstrip("0")
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}, {hour}:{dt.strftime('%M %p')}"


def format_rental_period(start_iso: str | None, end_iso: str | None) -> str:
    if not start_iso or not end_iso:
        return RENTAL_PERIOD_UNAVAILABLE
    try:
        start = datetime.fromisoformat(start_iso.replace("Z", "+00:00"))
        end = datetime.fromisoformat(end_iso.replace("Z", "+00:00"))
    except ValueError:
        return "Invalid date range"
    return f"{_format_moment(start)} - {_format_moment(end)}"
