"""
Matching user input against reference options.

Commands accept either an id or a (possibly misspelled) name for
categories, procedures, authorities and the like.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence, TypeVar

from thefuzz import fuzz

# Minimum fuzzy match score to accept a name
FUZZY_MATCH_THRESHOLD = 80

T = TypeVar("T")


def option_id(option: Any) -> Any:
    if isinstance(option, dict):
        return option.get("id", option.get("value"))
    return getattr(option, "id", getattr(option, "value", None))


def option_name(option: Any) -> str:
    if isinstance(option, dict):
        value = option.get("name") or option.get("notice") or option.get("label")
    else:
        value = getattr(option, "name", None) or getattr(option, "label", None)
    return str(value or "")


def resolve_option(
    query: str | int | None,
    options: Sequence[T],
    threshold: int = FUZZY_MATCH_THRESHOLD,
) -> T | None:
    """Find the option a user meant.

    Tries, in order: numeric id, exact case-insensitive name, best fuzzy
    name match scoring at least ``threshold``.
    """
    if query is None:
        return None
    text = str(query).strip()
    if not text:
        return None

    if text.isdigit():
        for option in options:
            if str(option_id(option)) == text:
                return option

    lowered = text.lower()
    for option in options:
        if option_name(option).lower() == lowered:
            return option

    best: T | None = None
    best_score = 0
    for option in options:
        score = fuzz.ratio(lowered, option_name(option).lower())
        if score > best_score and score >= threshold:
            best_score = score
            best = option
    return best


def filter_options(
    query: str | None,
    options: Iterable[T],
    threshold: int = FUZZY_MATCH_THRESHOLD,
    limit: int | None = None,
) -> list[T]:
    """Options for a searchable dropdown.

    Substring matches come first, then fuzzy partial matches ordered by
    score.
    """
    options = list(options)
    text = (query or "").strip().lower()
    if not text:
        return options[:limit] if limit else options

    exact = [o for o in options if text in option_name(o).lower()]
    scored = []
    for option in options:
        if option in exact:
            continue
        score = fuzz.partial_ratio(text, option_name(option).lower())
        if score >= threshold:
            scored.append((score, option))
    scored.sort(key=lambda pair: pair[0], reverse=True)

    matches = exact + [option for _, option in scored]
    return matches[:limit] if limit else matches
