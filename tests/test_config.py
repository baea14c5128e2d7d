from pathlib import Path

import pytest

from tenderadmin.core.config.loader import ConfigError, load_app_config, validate_app_config_file


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TENDERADMIN_CONFIG", "TENDERADMIN_API_URL", "TENDERADMIN_MOCK_API"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_file_missing(tmp_path):
    config = load_app_config(tmp_path / "missing.yaml")

    assert config.api.base_url == "http://localhost:3000/api"
    assert config.api.timeout_seconds == 10.0
    assert config.listing.page_size == 10
    assert config.listing.debounce_ms == 500
    assert config.invoice.currency == "EUR"


def test_yaml_values_and_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("API_HOST", "api.example.org")
    path = tmp_path / "app.yaml"
    path.write_text(
        "api:\n"
        "  base_url: https://${API_HOST}/api/\n"
        "  timeout_seconds: 30\n"
        "listing:\n"
        "  page_size: 25\n"
        "invoice:\n"
        "  output_dir: ${INVOICE_DIR:-out/invoices}\n",
        encoding="utf-8",
    )

    config = load_app_config(path)

    assert config.api.base_url == "https://api.example.org/api"
    assert config.api.timeout_seconds == 30
    assert config.listing.page_size == 25
    assert config.invoice.output_dir == Path("out/invoices")


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("TENDERADMIN_API_URL", "http://staging/api")
    monkeypatch.setenv("TENDERADMIN_MOCK_API", "yes")

    config = load_app_config(tmp_path / "missing.yaml")

    assert config.api.base_url == "http://staging/api"
    assert config.api.mock_mode is True


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("listing:\n  debounce_ms: 0\n", encoding="utf-8")
    monkeypatch.setenv("TENDERADMIN_CONFIG", str(path))

    assert load_app_config().listing.debounce_ms == 0


def test_invalid_values_raise_config_error(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("listing:\n  page_size: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_app_config(path)

    assert excinfo.value.path == path
    assert "page_size" in excinfo.value.details


def test_invalid_yaml_raises_config_error(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("api: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_app_config(path)


def test_validate_app_config_file_reports_locations(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("api:\n  timeout_seconds: 9999\n", encoding="utf-8")

    errors = validate_app_config_file(path)

    assert len(errors) == 1
    assert errors[0].startswith("api.timeout_seconds:")
