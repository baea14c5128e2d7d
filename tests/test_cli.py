"""End-to-end CLI tests against the in-memory API."""

import pytest
from typer.testing import CliRunner

from tenderadmin import __version__
from tenderadmin.cli.main import app
from tenderadmin.core.api import mock

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TENDERADMIN_MOCK_API", "true")
    monkeypatch.delenv("TENDERADMIN_CONFIG", raising=False)
    monkeypatch.delenv("TENDERADMIN_API_URL", raising=False)
    return tmp_path


@pytest.fixture
def logged_in(workdir):
    result = runner.invoke(app, ["auth", "login", "-u", "admin", "-p", "secret"])
    assert result.exit_code == 0, result.output
    return workdir


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_config(workdir):
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0, result.output
    assert (workdir / "configs" / "app.yaml").exists()
    assert (workdir / "data").is_dir()


def test_commands_require_login(workdir):
    result = runner.invoke(app, ["tenders", "list"])

    assert result.exit_code == 1
    assert "Not logged in" in result.output


def test_login_persists_session(logged_in):
    assert (logged_in / "data" / "session.json").exists()

    result = runner.invoke(app, ["auth", "whoami"])

    assert result.exit_code == 0, result.output
    assert "admin" in result.output


def test_logout(logged_in):
    result = runner.invoke(app, ["auth", "logout"])

    assert result.exit_code == 0, result.output
    assert runner.invoke(app, ["tenders", "list"]).exit_code == 1


def test_tenders_list_json(logged_in):
    result = runner.invoke(app, ["tenders", "list", "--format", "json"])

    assert result.exit_code == 0, result.output
    assert "PRN-2023-001" in result.output


def test_tender_without_document_is_rejected(logged_in):
    result = runner.invoke(app, ["tenders", "add", "--title", "Road works"])

    assert result.exit_code == 1
    assert "At least one document is required" in result.output


def test_expired_subscribers(logged_in):
    result = runner.invoke(app, ["subscribers", "list", "--view", "expired", "--format", "csv"])

    assert result.exit_code == 0, result.output
    assert "besnik" in result.output
    assert "arta" not in result.output


def test_reference_add(logged_in):
    result = runner.invoke(app, ["reference", "regions", "add", "--name", "Peja"])

    assert result.exit_code == 0, result.output
    assert "Region Created" in result.output


def test_reference_add_rejects_blank_name(logged_in):
    result = runner.invoke(app, ["reference", "regions", "add", "--name", "  "])

    assert result.exit_code == 1
    assert "Region name is required" in result.output


def test_invoice_generate(logged_in):
    result = runner.invoke(
        app,
        ["invoice", "generate", "--client", "arta", "--package", "1_month", "--price", "50", "--output", "out"],
    )

    assert result.exit_code == 0, result.output
    files = list((logged_in / "out").glob("UTENDER-Pro-Fatura-*.pdf"))
    assert len(files) == 1
    assert files[0].read_bytes().startswith(b"%PDF")


def test_subcategories_need_no_login(workdir):
    result = runner.invoke(app, ["reference", "subcategories", "--category", "Office Supplies", "--format", "csv"])

    assert result.exit_code == 0, result.output
    assert "Office Paper" in result.output


def test_names_with_brackets_are_shown_literally(logged_in):
    result = runner.invoke(app, ["reference", "regions", "add", "--name", "Peja [/north]"])

    assert result.exit_code == 0, result.output
    assert "Peja [/north]" in result.output


def test_tender_add_fills_blank_fields_from_document(logged_in):
    (logged_in / "notice.pdf").write_bytes(b"%PDF notice")

    result = runner.invoke(app, ["tenders", "add", "--document", "notice.pdf", "--autofill", "--upload"])

    assert result.exit_code == 0, result.output
    assert "Tender Created" in result.output
    assert "Documents Uploaded" in result.output
    assert "New tender ID: 2" in result.output


def test_tender_add_needs_a_title_without_autofill(logged_in):
    result = runner.invoke(app, ["tenders", "add", "--document", "notice.pdf"])

    assert result.exit_code == 1
    assert "A title is required" in result.output


def test_tender_extract_prints_document_fields(logged_in):
    (logged_in / "notice.pdf").write_bytes(b"%PDF notice")

    result = runner.invoke(app, ["tenders", "extract", "notice.pdf"])

    assert result.exit_code == 0, result.output
    assert "TN-2024-001" in result.output
    assert "Commercial Buildings" in result.output


def test_tender_upload(logged_in):
    (logged_in / "notice.pdf").write_bytes(b"%PDF notice")

    result = runner.invoke(app, ["tenders", "upload", "1", "notice.pdf"])

    assert result.exit_code == 0, result.output
    assert "file_1" in result.output
    assert "notice.pdf" in result.output


def test_send_password_finds_subscriber_by_id_beyond_first_page(logged_in, monkeypatch):
    base_seed = mock.default_seed

    def crowded_seed():
        seed = base_seed()
        seed["members"] = [
            {"id": n, "username": f"user{n}", "name": f"User {n}", "email": f"user{n}@example.com", "active": 1}
            for n in range(1, 61)
        ]
        return seed

    monkeypatch.setattr(mock, "default_seed", crowded_seed)

    result = runner.invoke(app, ["email", "send-password", "60", "--show"])

    assert result.exit_code == 0, result.output
    assert "Password Sent Successfully!" in result.output
    assert "Password for User 60" in result.output


def test_send_password_unknown_id(logged_in):
    result = runner.invoke(app, ["email", "send-password", "999"])

    assert result.exit_code == 1
    assert "Subscriber not found" in result.output


def test_tender_show_formats_price_and_days_left(logged_in):
    result = runner.invoke(app, ["tenders", "show", "1"])

    assert result.exit_code == 0, result.output
    assert "5,200,000.00 EUR" in result.output
    days_line = next(line for line in result.output.splitlines() if "Days left" in line)
    assert "30" in days_line
