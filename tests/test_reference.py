from tenderadmin.core.models.entities import ReferenceItem
from tenderadmin.core.reference import (
    belongs_to,
    filter_options,
    get_subcategory,
    resolve_option,
    subcategories_for,
)

OPTIONS = [
    ReferenceItem(id=1, name="Open Procedure"),
    ReferenceItem(id=2, name="Restricted Procedure"),
    ReferenceItem(id=3, name="Negotiated Procedure"),
]


def test_resolve_by_id_and_exact_name():
    assert resolve_option("2", OPTIONS).name == "Restricted Procedure"
    assert resolve_option(3, OPTIONS).id == 3
    assert resolve_option("open procedure", OPTIONS).id == 1


def test_resolve_tolerates_typos():
    assert resolve_option("Restricted Procedur", OPTIONS).id == 2


def test_resolve_without_match():
    assert resolve_option("Design contest", OPTIONS) is None
    assert resolve_option("", OPTIONS) is None
    assert resolve_option(None, OPTIONS) is None
    assert resolve_option("9", OPTIONS) is None


def test_resolve_dict_options():
    notice_types = [{"id": 7, "notice": "Contract Notice"}, {"value": 8, "label": "Award Notice"}]

    assert resolve_option("contract notice", notice_types)["id"] == 7
    assert resolve_option("8", notice_types)["label"] == "Award Notice"


def test_filter_options_puts_substring_matches_first():
    matches = filter_options("restr", OPTIONS)

    assert [option.id for option in matches] == [2]
    assert filter_options("", OPTIONS, limit=2) == OPTIONS[:2]
    assert filter_options("procedure", OPTIONS, limit=1) == OPTIONS[:1]


def test_subcategories_for_category():
    assert [sub.name for sub in subcategories_for("Construction")] == [
        "Residential Buildings",
        "Commercial Buildings",
    ]
    assert subcategories_for("Unknown") == []
    assert subcategories_for(None) == []


def test_belongs_to():
    assert belongs_to(10, "Software Development")
    assert belongs_to("12", "Office Supplies")
    assert not belongs_to(10, "IT Services")
    assert not belongs_to(99, "IT Services")
    assert get_subcategory("") is None
