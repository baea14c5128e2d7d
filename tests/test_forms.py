from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from tenderadmin.core.api.base import NotFoundError, ServerError
from tenderadmin.core.forms import (
    DOCUMENT_REQUIRED,
    EXPIRY_NOT_LATER,
    ExtendExpiryForm,
    Form,
    FormController,
    FormValidationError,
    InvoiceForm,
    MemberForm,
    PasswordResetForm,
    ReferenceForm,
    TenderEditForm,
    TenderForm,
    generate_password,
)
from tenderadmin.core.forms.password import DIGITS, LOWERCASE, SYMBOLS, UPPERCASE
from tenderadmin.core.models.entities import ExtractedTender, Member

from .conftest import ADMIN


def test_tender_without_documents_is_rejected():
    form = TenderForm(title="Road works")

    errors = form.field_errors()

    assert errors == {"documents": DOCUMENT_REQUIRED}
    with pytest.raises(FormValidationError) as exc:
        form.validate()
    assert exc.value.first == DOCUMENT_REQUIRED


def test_tender_rejects_unparseable_dates():
    form = TenderForm(documents=["spec.pdf"], publication_date="xyzzy")

    assert "publication_date" in form.field_errors()


def test_select_category_filters_subcategories():
    form = TenderForm(subcategory_id=10)

    options = form.select_category("IT Services", 3)

    assert [sub.id for sub in options] == [5, 6]
    assert form.category_id == 3
    assert form.subcategory_id is None


def test_select_category_keeps_matching_subcategory():
    form = TenderForm(subcategory_id=5)

    form.select_category("IT Services", 3)

    assert form.subcategory_id == 5
    assert [sub.name for sub in form.subcategory_options] == ["Software Development", "Network Infrastructure"]


def test_clearing_category_clears_subcategory():
    form = TenderForm(category="IT Services", category_id=3, subcategory_id=5)

    assert form.select_category(None) == []
    assert (form.category, form.category_id, form.subcategory_id) == (None, None, None)


def test_tender_payload():
    form = TenderForm(
        title="  Road works ",
        procurement_number="PN-7",
        category_id=3,
        procedure_id=2,
        country_id=4,
        price=" 1500 ",
        retendering=True,
        authority_ids=[8, 9],
        documents=[Path("uploads/spec.pdf"), "annex.docx"],
        publication_date=datetime(2026, 3, 1),
    )

    payload = form.to_payload(ADMIN, now=1_700_000_000)

    assert payload["title"] == "Road works"
    assert payload["procedures_id"] == 2
    assert payload["states_id"] == 4
    assert payload["contracting_authority_id"] == 8
    assert payload["cmimi"] == "1500"
    assert payload["created_by"] == payload["updated_by"] == "Ada Admin"
    assert payload["create_date"] == 1_700_000_000
    assert payload["retendering"] == 1
    assert payload["flag"] == 0
    assert payload["file"] == "spec.pdf"
    assert payload["file_2"] == "annex.docx"
    assert "file_3" not in payload
    assert payload["publication_date"] == int(datetime(2026, 3, 1).timestamp())
    assert payload["expiry_date"] is None


def test_fill_from_document_keeps_entered_values():
    form = TenderForm(title="Road works", price="", documents=["notice.pdf"])
    extracted = ExtractedTender.model_validate({
        "title": "Construction of administrative building",
        "prosecutionNumber": " TN-2024-001 ",
        "price": "150000.00",
        "email": "procurement@example.com",
        "publicationDate": "2026-03-01T00:00:00",
        "endDate": "2026-03-31T00:00:00",
        "retendering": True,
        "description": None,
    })

    form.fill_from(extracted)
    payload = form.to_payload(ADMIN, now=1_700_000_000)

    assert form.title == "Road works"
    assert form.procurement_number == "TN-2024-001"
    assert form.description == ""
    assert payload["cmimi"] == "150000.00"
    assert payload["email"] == "procurement@example.com"
    assert payload["publication_date"] == int(datetime(2026, 3, 1).timestamp())
    assert payload["expiry_date"] == int(datetime(2026, 3, 31).timestamp())
    assert payload["retendering"] == 1


def test_tender_payload_defaults_retendering_to_zero():
    payload = TenderForm(documents=["a.pdf"]).to_payload(None, now=1)

    assert payload["retendering"] == 0
    assert payload["created_by"] == "admin"


def test_tender_edit_sends_only_set_fields():
    form = TenderEditForm(id=4).apply(title="New title", region_id=2, price=None)

    assert form.to_payload() == {"title": "New title", "region_id": 2, "retendering": 0}


def test_tender_edit_rejects_unknown_field_and_blank_title():
    form = TenderEditForm(id=4)

    with pytest.raises(AttributeError):
        form.apply(colour="red")
    form.apply(title="   ")
    assert form.field_errors() == {"title": "Title cannot be empty"}


def test_member_form_checks_email_and_password():
    form = MemberForm(username="jo", name="Jo", email="jo@example")

    errors = form.field_errors()

    assert errors["email"] == "Email is invalid"
    assert errors["password"] == "Password is required"
    assert MemberForm(username="jo", name="Jo").field_errors()["email"] == "Email is required"


def test_member_edit_does_not_require_password():
    member = Member(id=3, username="jo", name="Jo", email="jo@example.com", status=1, active=1)

    form = MemberForm.from_member(member)

    assert form.is_valid
    assert "password" not in form.to_payload()
    assert form.to_payload()["status"] == 1


def test_extend_expiry_counts_days_from_current_expiry():
    member = Member(id=3, expire_date=int(datetime(2026, 1, 10).timestamp()))

    form = ExtendExpiryForm(member, new_date=datetime(2026, 1, 20))

    assert form.days == 10
    assert form.is_valid


def test_extend_expiry_must_be_later():
    member = Member(id=3, expire_date=int(datetime(2026, 1, 10).timestamp()))

    form = ExtendExpiryForm(member, new_date=datetime(2026, 1, 5))

    assert form.field_errors() == {"new_date": EXPIRY_NOT_LATER}
    assert ExtendExpiryForm(member).field_errors() == {"new_date": "Please choose a new expiry date"}


def test_extend_expiry_without_expiry_counts_from_now():
    now = datetime(2026, 5, 1).timestamp()

    form = ExtendExpiryForm(Member(id=3), new_date=datetime(2026, 5, 31), now=now)

    assert form.days == 30


def test_reference_form():
    assert ReferenceForm(label="Region", name=" ").field_errors() == {"name": "Region name is required"}
    assert ReferenceForm(label="Region", name=" North ").to_payload() == {"name": "North"}


def test_invoice_form():
    form = InvoiceForm(client_id=2, package="12_months", price="1.200,50")

    assert form.is_valid
    assert form.amount == Decimal("1200.50")
    assert set(InvoiceForm(package="forever", price="0").field_errors()) == {"client_id", "package", "price"}


def test_generate_password_has_every_character_class():
    password = generate_password()

    assert len(password) == 12
    for charset in (UPPERCASE, LOWERCASE, DIGITS, SYMBOLS):
        assert any(ch in charset for ch in password)
    with pytest.raises(ValueError):
        generate_password(3)


def test_password_reset_form():
    form = PasswordResetForm(user_id=5)

    assert form.field_errors() == {"password": "Please generate a password first"}
    form.generate()
    assert form.is_valid


@pytest.mark.asyncio
async def test_controller_blocks_invalid_form(notifier):
    calls = []

    async def action():
        calls.append(1)

    with pytest.raises(FormValidationError):
        await FormController(notifier, "Tender").submit(TenderForm(), action)

    assert calls == []
    assert notifier.last.title == "Validation Error"
    assert notifier.last.message == DOCUMENT_REQUIRED


@pytest.mark.asyncio
async def test_controller_notifies_success_and_runs_hook(notifier):
    hooks = []

    async def on_success():
        hooks.append("refresh")

    async def action():
        return 42

    controller = FormController(notifier, "Region", on_success=on_success)
    result = await controller.submit(Form(), action, success_title="Region Created", success_message="done")

    assert result == 42
    assert hooks == ["refresh"]
    assert (notifier.last.title, notifier.last.message) == ("Region Created", "done")


@pytest.mark.asyncio
async def test_controller_not_found_runs_hook(notifier):
    hooks = []

    async def action():
        raise NotFoundError("missing", status=404)

    controller = FormController(notifier, "Tender", on_not_found=lambda: hooks.append("back"))
    with pytest.raises(NotFoundError) as exc:
        await controller.submit(Form(), action, verb="Update")

    assert exc.value.reported
    assert hooks == ["back"]
    assert notifier.last.title == "Tender Not Found"


@pytest.mark.asyncio
async def test_controller_reports_server_error(notifier):
    async def action():
        raise ServerError("Database unavailable", status=500)

    with pytest.raises(ServerError):
        await FormController(notifier, "Tender").submit(Form(), action, verb="Create")

    assert notifier.last.title == "Create Failed"
    assert notifier.last.message == "Database unavailable"
