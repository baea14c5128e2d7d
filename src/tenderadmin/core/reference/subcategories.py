"""
Static subcategory hierarchy.

Subcategories are not served by the API; they hang off root categories
by category name.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subcategory:
    id: int
    name: str
    parent: str
    code: str


SUBCATEGORIES: tuple[Subcategory, ...] = (
    Subcategory(5, "Software Development", "IT Services", "SOFT"),
    Subcategory(6, "Network Infrastructure", "IT Services", "NET"),
    Subcategory(7, "Residential Buildings", "Construction", "RES"),
    Subcategory(8, "Commercial Buildings", "Construction", "COM"),
    Subcategory(9, "Diagnostic Equipment", "Medical Equipment", "DIAG"),
    Subcategory(10, "Web Development", "Software Development", "WEB"),
    Subcategory(11, "Mobile Development", "Software Development", "MOB"),
    Subcategory(12, "Office Paper", "Office Supplies", "PAPER"),
    Subcategory(13, "Writing Instruments", "Office Supplies", "WRITE"),
)


def subcategories_for(category: str | None) -> list[Subcategory]:
    """Subcategories whose parent is the named category."""
    if not category:
        return []
    return [sub for sub in SUBCATEGORIES if sub.parent == category]


def get_subcategory(sub_id: int | str | None) -> Subcategory | None:
    if sub_id in (None, ""):
        return None
    for sub in SUBCATEGORIES:
        if str(sub.id) == str(sub_id):
            return sub
    return None


def belongs_to(sub_id: int | str | None, category: str | None) -> bool:
    sub = get_subcategory(sub_id)
    return sub is not None and category is not None and sub.parent == category
