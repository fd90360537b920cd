# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

Settings are loaded from environment variables (and an optional .env file)
exactly once, at process start, by load_settings(). The resulting Settings
value is frozen and is passed explicitly to every component that needs it.

Example:
    >>> from wbctl.core.config import load_settings
    >>> settings = load_settings()
    >>> settings.subdomain_for("demo")
    'demo.example.org'
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from wbctl.core.exceptions import ConfigError


class Settings(BaseSettings):
    """Fleet controller settings.

    Attributes:
        domain: Parent domain; each tenant is served at <id>.<domain>.
        servers_file_path: Path of the JSON tenant registry.
        mount_path: Directory holding one instance directory per tenant.
        sites_available_path: Reverse proxy sites-available directory.
        sites_enabled_path: Reverse proxy sites-enabled directory.
        postgres_password: Password given to each tenant database container.
        pg_password: Database password handed to the application container.
        clerk_publishable_key: Auth provider publishable key for the application.
        clerk_secret_key: Auth provider secret key for the application.
        anthropic_api_url: Upstream LLM service URL for the application.
        anthropic_api_key: Upstream LLM service key for the application.
        log_level: Logging level.
        log_format: "console" for human-readable logs, "json" for aggregation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    domain: str
    servers_file_path: Path
    mount_path: Path
    sites_available_path: Path
    sites_enabled_path: Path
    postgres_password: SecretStr
    pg_password: SecretStr
    clerk_publishable_key: str
    clerk_secret_key: SecretStr
    anthropic_api_url: str
    anthropic_api_key: SecretStr

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    def subdomain_for(self, tenant_id: str) -> str:
        """Return the public host name of a tenant."""
        return f"{tenant_id}.{self.domain}"


def load_settings(**overrides: Any) -> Settings:
    """Build the settings value for this process.

    Args:
        **overrides: Explicit field values taking precedence over the environment.

    Returns:
        Frozen Settings instance.

    Raises:
        ConfigError: If required variables are missing or malformed.
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        missing = sorted(
            str(err["loc"][0]).upper()
            for err in e.errors()
            if err["type"] == "missing" and err["loc"]
        )
        invalid = sorted(
            str(err["loc"][0]).upper()
            for err in e.errors()
            if err["type"] != "missing" and err["loc"]
        )
        parts = []
        if missing:
            parts.append(f"missing required environment variables: {', '.join(missing)}")
        if invalid:
            parts.append(f"invalid values for: {', '.join(invalid)}")
        raise ConfigError(
            "Configuration error: " + "; ".join(parts),
            details={"missing": missing, "invalid": invalid},
        ) from e
