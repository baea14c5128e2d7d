import json

import httpx
import pytest

from tenderadmin.core.api.base import ApiError, NotFoundError, ResponseFormatError, ValidationError
from tenderadmin.core.models.entities import AccountStatus, Member
from tenderadmin.core.services.base import clean_params
from tenderadmin.core.services.email import EmailRequest, EmailService, password_email
from tenderadmin.core.services.members import MembersService, clean_member_payload
from tenderadmin.core.services.reference import (
    CategoriesService,
    ContractingAuthoritiesService,
    CountriesService,
    NoticeTypesService,
    ProceduresService,
    RegionsService,
)
from tenderadmin.core.services.tenders import TendersService

DAY = 24 * 3600


def _last_json(mock_api):
    return json.loads(mock_api.requests[-1].content)


def test_clean_params_drops_empty_values():
    assert clean_params({"page": 1, "search": "", "status": None, "active": 0}) == {"page": 1, "active": 0}


@pytest.mark.asyncio
async def test_list_defaults_to_first_page_of_ten(client, mock_api):
    page = await TendersService(client).list()

    assert dict(mock_api.requests[-1].url.params) == {"page": "1", "limit": "10"}
    assert page.total == 1
    assert page.data[0].title.startswith("Construction")


@pytest.mark.asyncio
async def test_tender_search_uses_value_key(client, mock_api):
    page = await TendersService(client).list({"value": "nothing-matches", "category_id": None})

    assert mock_api.requests[-1].url.params["value"] == "nothing-matches"
    assert "category_id" not in mock_api.requests[-1].url.params
    assert page.is_empty


@pytest.mark.asyncio
async def test_crud_round_trip(client):
    service = RegionsService(client)

    created = await service.create({"name": "Peja"})
    updated = await service.update(created.id, {"name": "Peć"})
    fetched = await service.get(created.id)
    await service.delete(created.id)

    assert created.id == 3
    assert updated.name == "Peć"
    assert fetched.name == "Peć"
    with pytest.raises(NotFoundError):
        await service.get(created.id)


@pytest.mark.asyncio
async def test_update_without_id_raises(client):
    with pytest.raises(ValueError, match="Region ID is required for update"):
        await RegionsService(client).update(None, {"name": "x"})


@pytest.mark.asyncio
async def test_create_without_echoed_record_returns_placeholder(client, mock_api):
    mock_api._collection = lambda request, name, rest: mock_api._ok(None, status=201)

    region = await RegionsService(client).create({"name": "Gjilan"})

    assert region.id == 0
    assert region.name == "Gjilan"


@pytest.mark.asyncio
async def test_list_all_returns_models(client):
    countries = await CountriesService(client).list_all()

    assert [c.name for c in countries] == ["Kosovo", "Albania"]


@pytest.mark.asyncio
async def test_tenders_by_creator_estimates_pages(client, mock_api):
    page = await TendersService(client).list_by_creator("admin")

    assert mock_api.requests[-1].url.path == "/api/tenders/created-by/admin"
    assert page.total == 1
    assert page.total_pages == 1


@pytest.mark.asyncio
async def test_tender_documents_and_download(client, tmp_path):
    service = TendersService(client)
    tender = await service.get(1)

    documents = service.documents(tender)
    path = await service.download_file(1, "specification.pdf", tmp_path)

    assert [(d.name, d.field) for d in documents] == [("specification.pdf", "file")]
    assert documents[0].url == "/tenders/1/download/specification.pdf"
    assert path == tmp_path / "specification.pdf"
    assert path.exists()


def test_clean_member_payload_on_create():
    payload = clean_member_payload(
        {"username": "  neo ", "email": " Neo@Matrix.IO ", "password": "pw", "company": " Zion "},
        creating=True,
        now=1_000,
    )

    assert payload["username"] == "neo"
    assert payload["email"] == "neo@matrix.io"
    assert payload["company"] == "Zion"
    assert payload["register_date"] == 1_000
    assert payload["expire_date"] == 1_000 + 365 * DAY
    assert payload["status"] == 1
    assert payload["active"] == 1


def test_clean_member_payload_on_update_sends_only_given_keys():
    payload = clean_member_payload({"email": "A@B.CO", "active": 0, "company": None}, creating=False)

    assert payload == {"email": "a@b.co", "active": 0}


@pytest.mark.asyncio
async def test_member_filters_hit_their_routes(client, mock_api):
    service = MembersService(client)

    active = await service.list_active()
    expired = await service.list_expired()
    await service.list_by_status(2)
    await service.list_inactive()

    paths = [r.url.path for r in mock_api.requests]
    assert paths == [
        "/api/members/active",
        "/api/members/expired",
        "/api/members/status/2",
        "/api/members/filter/inactive",
    ]
    assert [m.username for m in active.data] == ["arta"]
    assert [m.username for m in expired.data] == ["besnik"]


@pytest.mark.asyncio
async def test_member_actions(client, mock_api):
    service = MembersService(client)
    before = await service.get(1)

    extended = await service.extend_expiry(1, 30)
    suspended = await service.update_active(1, 0)
    approved = await service.activate(1)
    await service.change_password(1, "N3w!pass")

    assert extended.expire_date == before.expire_date + 30 * DAY
    assert suspended.active == 0
    assert approved.active == 1 and approved.status == 1
    assert mock_api.requests[-1].method == "PATCH"
    assert _last_json(mock_api) == {"password": "N3w!pass"}


@pytest.mark.asyncio
async def test_extend_expiry_requires_positive_days(client, mock_api):
    with pytest.raises(ValueError):
        await MembersService(client).extend_expiry(1, 0)

    assert mock_api.requests == []


@pytest.mark.asyncio
async def test_server_side_validation_error(client, mock_api):
    with pytest.raises(ValidationError) as excinfo:
        await MembersService(client).change_password(1, "")

    assert excinfo.value.message == "Password is required"


def test_member_account_status():
    now = 1_000_000_000

    def member(**fields):
        return Member(id=1, username="u", **{"status": 1, "active": 1, "expire_date": now + 30 * DAY, **fields})

    assert member(active=0).account_status(now) == AccountStatus.INACTIVE
    assert member(expire_date=now - DAY).account_status(now) == AccountStatus.EXPIRED
    assert member(expire_date=now + 3 * DAY).account_status(now) == AccountStatus.EXPIRING_SOON
    assert member(status=0).account_status(now) == AccountStatus.INVALID_STATUS
    assert member().account_status(now) == AccountStatus.ACTIVE
    assert member(expire_date=now + DAY + 1).days_until_expiry(now) == 2


@pytest.mark.asyncio
async def test_notice_type_mirrors_name(client, mock_api):
    created = await NoticeTypesService(client).create({"name": "Prior Information"})

    assert _last_json(mock_api) == {"name": "Prior Information", "notice": "Prior Information"}
    assert created.notice == "Prior Information"


@pytest.mark.asyncio
async def test_reference_searches(client, mock_api):
    procedures = await ProceduresService(client).search("restr")
    categories = await CategoriesService(client).search("IT")
    roots = await CategoriesService(client).roots()
    authorities = await ContractingAuthoritiesService(client).search("ministry")

    assert [p.name for p in procedures] == ["Restricted"]
    assert mock_api.requests[0].url.path == "/api/procedures/search/restr"
    assert mock_api.requests[1].url.params["search"] == "IT"
    assert "IT Services" in [c.name for c in categories]
    assert all(c.is_root for c in roots)
    assert roots[0].code == "IT S"
    assert [a.name for a in authorities.data] == ["Ministry of Infrastructure"]


@pytest.mark.asyncio
async def test_email_send_and_options(client, mock_api):
    service = EmailService(client)

    templates = await service.templates()
    users = await service.users("arta")
    result = await service.send(password_email(1, "Arta", "Xy7!abcdefgh"))

    assert [t.value for t in templates] == ["custom", "renewal"]
    assert [u.value for u in users] == [1]
    assert result.total_recipients == 1
    sent = mock_api.sent_emails[-1]
    assert sent["recipientType"] == "specific"
    assert sent["specificUsers"] == [1]
    assert "Password: Xy7!abcdefgh" in sent["message"]
    assert "templateData" not in sent


@pytest.mark.asyncio
async def test_email_send_failure_body_raises(client, mock_api):
    mock_api._email = lambda request, rest: httpx.Response(200, json={"success": False, "message": "SMTP down"})

    with pytest.raises(ApiError, match="SMTP down"):
        await EmailService(client).send(EmailRequest(subject="Hi", message="Body"))


@pytest.mark.asyncio
async def test_null_text_fields_load_as_empty(client, mock_api):
    mock_api.data["regions"].append({"id": 3, "name": None})
    mock_api.data["members"].append({"id": 3, "username": None, "email": None, "status": 0, "active": 0})

    regions = await RegionsService(client).list()
    members = await MembersService(client).list()

    assert regions.data[-1].name == ""
    assert regions.data[-1].display_name == "#3"
    assert (members.data[-1].username, members.data[-1].email) == ("", "")


@pytest.mark.asyncio
async def test_malformed_row_raises_api_error(client, mock_api):
    mock_api.data["regions"].append({"id": 3, "name": {"en": "Peja"}})

    with pytest.raises(ResponseFormatError) as excinfo:
        await RegionsService(client).list()

    assert excinfo.value.message == "The server returned an invalid region record"
    assert excinfo.value.data == {"id": 3, "name": {"en": "Peja"}}


@pytest.mark.asyncio
async def test_email_option_without_label(client, mock_api):
    mock_api._email = lambda request, rest: httpx.Response(200, json={"success": True, "data": [{"value": 7, "label": None}]})

    options = await EmailService(client).templates()

    assert options[0].label == ""


@pytest.mark.asyncio
async def test_upload_files_sends_numbered_parts(client, mock_api, tmp_path):
    first = tmp_path / "notice.pdf"
    first.write_bytes(b"%PDF notice")
    second = tmp_path / "annex.docx"
    second.write_bytes(b"annex")

    result = await TendersService(client).upload_files([first, second], tender_id=1)

    request = mock_api.requests[-1]
    assert request.method == "POST"
    assert request.url.path.endswith("/tenders/upload")
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="file_1"; filename="notice.pdf"' in request.content
    assert b'name="file_2"; filename="annex.docx"' in request.content
    assert b'name="tenderId"' in request.content
    assert result.tender_id == 1
    assert [(f.field_name, f.name, f.size) for f in result.uploaded_files] == [
        ("file_1", "notice.pdf", 11),
        ("file_2", "annex.docx", 5),
    ]
    tender = await TendersService(client).get(1)
    assert tender.document_names() == ["notice.pdf", "annex.docx"]


@pytest.mark.asyncio
async def test_upload_refuses_more_than_five_files(client, mock_api, tmp_path):
    paths = []
    for n in range(6):
        path = tmp_path / f"doc{n}.pdf"
        path.write_bytes(b"x")
        paths.append(path)

    with pytest.raises(ValueError):
        await TendersService(client).upload_files(paths)
    assert mock_api.requests == []


@pytest.mark.asyncio
async def test_process_document_reads_tender_fields(client, mock_api, tmp_path):
    path = tmp_path / "notice.pdf"
    path.write_bytes(b"%PDF notice")

    extracted = await TendersService(client).process_document(path)

    request = mock_api.requests[-1]
    assert request.url.path.endswith("/tenders/process-document")
    assert b'name="document"; filename="notice.pdf"' in request.content
    assert extracted.procurement_number == "TN-2024-001"
    assert extracted.sub_category == "Commercial Buildings"
    assert extracted.notice_type == "Contract Notice"
    assert extracted.price == "150000.00"
    assert extracted.authorities == ["Ministry of Infrastructure", "Municipality of Pristina"]
    assert extracted.description == "Extracted from notice.pdf."


@pytest.mark.asyncio
async def test_process_document_accepts_enveloped_reply(client, mock_api, tmp_path):
    path = tmp_path / "notice.pdf"
    path.write_bytes(b"x")
    mock_api._process_document = lambda request: httpx.Response(200, json={
        "success": True,
        "data": {"title": None, "prosecutionNumber": 42, "retendering": "true", "authorities": "Ministry"},
    })

    extracted = await TendersService(client).process_document(path)

    assert extracted.title is None
    assert extracted.procurement_number == "42"
    assert extracted.retendering is True
    assert extracted.authorities == ["Ministry"]
