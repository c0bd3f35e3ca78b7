from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from rentline_backend.core.utils import (
    as_utc,
    month_bounds,
    percent,
    sanitize_string,
    to_decimal,
)


def test_month_bounds():
    assert month_bounds("2026-02") == (date(2026, 2, 1), date(2026, 2, 28))
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2026-12") == (date(2026, 12, 1), date(2026, 12, 31))


@pytest.mark.parametrize("month", ["2026-13", "2026/01", "January", ""])
def test_month_bounds_rejects_malformed(month):
    with pytest.raises(ValueError):
        month_bounds(month)


def test_percent_rounds_half_up():
    assert percent(1, 3) == 33
    assert percent(2, 3) == 67
    assert percent(1, 8) == 13  # 12.5
    assert percent(5, 0) == 0


def test_sanitize_string():
    assert sanitize_string("  hello ") == "hello"
    assert sanitize_string("   ") is None
    assert sanitize_string(None) is None
    assert sanitize_string("abcdef", max_length=3) == "abc"


def test_to_decimal():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12.50") == Decimal("12.50")


def test_as_utc_attaches_timezone():
    naive = datetime(2026, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo is timezone.utc
    aware = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert as_utc(aware) is aware
    assert as_utc(None) is None
