"""Configuration loading and validation."""

from .models import (
    AppConfig,
    ApiConfig,
    AuthConfig,
    ListingConfig,
    InvoiceConfig,
    PartyConfig,
    LoggingConfig,
)
from .loader import ConfigError, load_app_config, validate_app_config_file

__all__ = [
    # Config models
    "AppConfig",
    "ApiConfig",
    "AuthConfig",
    "ListingConfig",
    "InvoiceConfig",
    "PartyConfig",
    "LoggingConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
    "validate_app_config_file",
]
