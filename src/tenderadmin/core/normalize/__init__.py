"""Date and price normalization."""

from .parsing import (
    SECONDS_PER_DAY,
    parse_date,
    from_timestamp,
    to_timestamp,
    format_date,
    days_between,
    parse_price,
    format_price,
)

__all__ = [
    # Dates
    "SECONDS_PER_DAY",
    "parse_date",
    "from_timestamp",
    "to_timestamp",
    "format_date",
    "days_between",
    # Prices
    "parse_price",
    "format_price",
]
