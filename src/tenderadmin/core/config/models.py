"""
Pydantic configuration models for TenderAdmin.

These models provide type-safe configuration with validation for:
- API connection settings
- Session storage
- List/table behaviour
- Invoice document details
- Logging
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# API Configuration
# =============================================================================


class ApiConfig(BaseModel):
    """Connection settings for the remote REST API."""

    base_url: str = Field(
        default="http://localhost:3000/api",
        description="API base URL",
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=300.0,
        description="Per-request timeout in seconds",
    )
    mock_mode: bool = Field(
        default=False,
        description="Serve requests from an in-memory mock API",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended directly."""
        v = v.strip()
        if not v:
            raise ValueError("base_url must not be empty")
        return v.rstrip("/")


# =============================================================================
# Auth Configuration
# =============================================================================


class AuthConfig(BaseModel):
    """Persistent session settings."""

    session_file: Path = Field(
        default=Path("data/session.json"),
        description="File holding the bearer token and user object",
    )
    max_token_age_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Maximum age of locally minted session tokens",
    )


# =============================================================================
# Listing Configuration
# =============================================================================


class ListingConfig(BaseModel):
    """Defaults for paginated list views."""

    page_size: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Rows per page",
    )
    debounce_ms: int = Field(
        default=500,
        ge=0,
        le=10000,
        description="Search input debounce window in milliseconds",
    )


# =============================================================================
# Invoice Configuration
# =============================================================================


class PartyConfig(BaseModel):
    """A titled block of address lines printed on the invoice."""

    title: str
    lines: list[str] = Field(default_factory=list)


def _default_buyer() -> PartyConfig:
    return PartyConfig(
        title="Blerësi:",
        lines=["Arber Bakija", "BBros L.L.C.", "Republika e Kosovës"],
    )


def _default_seller() -> PartyConfig:
    return PartyConfig(
        title="Shitësi:",
        lines=[
            "BBros LLC",
            "Rr. Rexhep Krasniqi Nr. 5",
            "10000 Prishtinë",
            "Republika e Kosovës",
            "Nr. Biz.: 71028968",
            "Nr. Fiskal: 601070890",
        ],
    )


def _default_bank() -> PartyConfig:
    return PartyConfig(
        title="Llogarita Bankare:",
        lines=[
            "Emri i Llogarisë: BBros LLC",
            "Nr. Llogarisë:",
            "1501200000199936",
        ],
    )


class InvoiceConfig(BaseModel):
    """Static content and output location for generated invoices."""

    output_dir: Path = Field(
        default=Path("invoices"),
        description="Directory generated PDFs are written to",
    )
    currency: str = Field(default="EUR")
    website: str = Field(default="www.utender.eu")
    tagline: str = Field(default=" - vendi ku oferta gjen kërkesën")
    buyer: PartyConfig = Field(default_factory=_default_buyer)
    seller: PartyConfig = Field(default_factory=_default_seller)
    bank: PartyConfig = Field(default_factory=_default_bank)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/tenderadmin.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    config_dir: Path = Field(
        default=Path("configs"),
        description="Configuration directory",
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Local state directory",
    )

    api: ApiConfig = Field(default_factory=ApiConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    listing: ListingConfig = Field(default_factory=ListingConfig)
    invoice: InvoiceConfig = Field(default_factory=InvoiceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        for dir_path in [self.config_dir, self.data_dir, self.invoice.output_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        self.auth.session_file.parent.mkdir(parents=True, exist_ok=True)
        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
