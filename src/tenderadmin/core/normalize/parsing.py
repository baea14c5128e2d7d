"""
Parsing utilities for dates and prices.

The API stores dates as epoch seconds (sometimes ISO strings) while the
console accepts free-form input such as ``2024-05-01``, ``01/05/2024`` or
``in 30 days``.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import dateparser


SECONDS_PER_DAY = 24 * 60 * 60

# Epoch values above this are taken to be milliseconds
_MILLISECONDS_THRESHOLD = 10_000_000_000


# =============================================================================
# Date Parsing
# =============================================================================


def parse_date(
    value: str | datetime | date | int | float | None,
    *,
    relative_base: datetime | None = None,
) -> datetime | None:
    """Parse user or API input into a datetime.

    Handles:
    - datetime/date objects
    - Epoch seconds or milliseconds
    - ISO 8601 strings
    - Day-first formats (DD/MM/YYYY, DD.MM.YYYY)
    - Natural language ("tomorrow", "in 30 days")

    Args:
        value: Value to parse
        relative_base: Base datetime for relative expressions

    Returns:
        Naive local datetime, or None if unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, (int, float)):
        return from_timestamp(value)

    text = " ".join(str(value).split())
    if not text:
        return None

    if text.isdigit():
        return from_timestamp(int(text))

    iso = _try_iso(text)
    if iso is not None:
        return iso

    settings: dict[str, Any] = {
        "DATE_ORDER": "DMY",
        "PREFER_DAY_OF_MONTH": "first",
        "PREFER_DATES_FROM": "future",
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    if relative_base:
        settings["RELATIVE_BASE"] = relative_base

    return dateparser.parse(text, settings=settings)


def _try_iso(text: str) -> datetime | None:
    """Fast path for ISO strings (faster than dateparser)."""
    if not re.match(r"^\d{4}-\d{2}-\d{2}", text):
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def from_timestamp(value: int | float | str | None) -> datetime | None:
    """Convert epoch seconds (or milliseconds) to a local datetime."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return parse_date(str(value))
    if number <= 0:
        return None
    if number > _MILLISECONDS_THRESHOLD:
        number /= 1000
    return datetime.fromtimestamp(number)


def to_timestamp(value: str | datetime | date | int | float | None) -> int | None:
    """Convert any accepted date input to epoch seconds."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return int(parsed.timestamp())
    return int(parsed.astimezone(timezone.utc).timestamp())


def format_date(value: Any, fmt: str = "%d/%m/%Y", empty: str = "N/A") -> str:
    """Format a stored date for display."""
    parsed = parse_date(value)
    if parsed is None:
        return empty
    return parsed.strftime(fmt)


def days_between(start: Any, end: Any) -> int | None:
    """Whole days from start to end, rounded up."""
    start_dt = parse_date(start)
    end_dt = parse_date(end)
    if start_dt is None or end_dt is None:
        return None
    return math.ceil((end_dt - start_dt).total_seconds() / SECONDS_PER_DAY)


# =============================================================================
# Price Parsing
# =============================================================================


def parse_price(value: str | int | float | Decimal | None) -> Decimal | None:
    """Parse a price such as ``1.234,56``, ``1,234.56`` or ``€ 500``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    match = re.search(r"[\d.,]+", str(value))
    if not match:
        return None
    text = match.group()

    last_comma = text.rfind(",")
    last_period = text.rfind(".")
    if last_comma > last_period:
        # European format: 1.234,56
        text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", "")

    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def format_price(value: Any, currency: str = "EUR") -> str:
    amount = parse_price(value)
    if amount is None:
        return "N/A"
    return f"{amount:,.2f} {currency}"
