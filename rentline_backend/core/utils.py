"""Common utilities for RentLine backend."""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Get the current UTC date."""
    return utc_now().date()


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from drivers that drop tzinfo."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def sanitize_string(value: str | None, max_length: int = 255) -> str | None:
    """Strip whitespace and truncate; blank strings become None."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > max_length:
        return value[:max_length]
    return value


def to_decimal(value) -> Decimal:
    """Coerce a money value (Decimal, float, int, str or None) to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def month_bounds(month: str) -> tuple[date, date]:
    """Return the first and last day of a ``YYYY-MM`` month.

    Raises:
        ValueError: If the month string is malformed
    """
    start = datetime.strptime(month, "%Y-%m").date()
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    end = date.fromordinal(next_month.toordinal() - 1)
    return start, end


def percent(part, whole) -> int:
    """Whole-number percentage rounded half up; 0 when whole is 0."""
    whole = to_decimal(whole)
    if whole <= 0:
        return 0
    value = to_decimal(part) * 100 / whole
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
