"""Reference data helpers: subcategories and option lookup."""

from .subcategories import (
    SUBCATEGORIES,
    Subcategory,
    belongs_to,
    get_subcategory,
    subcategories_for,
)
from .resolve import (
    FUZZY_MATCH_THRESHOLD,
    filter_options,
    option_id,
    option_name,
    resolve_option,
)

__all__ = [
    # Subcategories
    "SUBCATEGORIES",
    "Subcategory",
    "belongs_to",
    "get_subcategory",
    "subcategories_for",
    # Option lookup
    "FUZZY_MATCH_THRESHOLD",
    "filter_options",
    "option_id",
    "option_name",
    "resolve_option",
]
