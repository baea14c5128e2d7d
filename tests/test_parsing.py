from datetime import date, datetime
from decimal import Decimal

from tenderadmin.core.normalize.parsing import (
    days_between,
    format_date,
    format_price,
    from_timestamp,
    parse_date,
    parse_price,
    to_timestamp,
)


def test_parse_date_day_first():
    assert parse_date("05/03/2024").date() == date(2024, 3, 5)
    assert parse_date("2024-03-05").date() == date(2024, 3, 5)


def test_parse_date_epoch_seconds_and_millis():
    assert from_timestamp(1_700_000_000) == from_timestamp(1_700_000_000_000)
    assert parse_date(1_700_000_000) == datetime.fromtimestamp(1_700_000_000)
    assert parse_date("1700000000") == datetime.fromtimestamp(1_700_000_000)


def test_parse_date_rejects_blank_and_garbage():
    assert parse_date(None) is None
    assert parse_date("   ") is None
    assert parse_date("xyzzy") is None


def test_to_timestamp_and_format():
    ts = to_timestamp(datetime(2024, 3, 5, 12, 0))

    assert format_date(ts) == "05/03/2024"
    assert format_date(None) == "N/A"
    assert to_timestamp(None) is None


def test_days_between_rounds_up():
    assert days_between(datetime(2024, 1, 1), datetime(2024, 1, 2, 1)) == 2
    assert days_between(None, datetime(2024, 1, 1)) is None


def test_parse_price_formats():
    assert parse_price("1.234,56 EUR") == Decimal("1234.56")
    assert parse_price("$1,234.56") == Decimal("1234.56")
    assert parse_price("5200000.00") == Decimal("5200000.00")
    assert parse_price(120) == Decimal("120")
    assert parse_price("free") is None


def test_format_price():
    assert format_price("1234.5") == "1,234.50 EUR"
