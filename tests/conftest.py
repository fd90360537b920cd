# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Settings pointing at a temporary registry, mount and nginx tree
- A registry backed by a temporary JSON file
- A MagicMock Docker client wrapped in a ContainerRuntime
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog

from wbctl.core.config.settings import Settings, load_settings
from wbctl.domains.tenants.models import Tenant
from wbctl.domains.tenants.store import TenantRegistry
from wbctl.infrastructure.docker.runtime import ContainerRuntime
from wbctl.infrastructure.filesystem.instance_dirs import InstanceDirectories
from wbctl.utils.logging import clear_context

# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def test_environment(tmp_path: Path) -> dict[str, str]:
    """Provide a complete set of environment variables for testing.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "DOMAIN": "fleet.example.org",
        "SERVERS_FILE_PATH": str(tmp_path / "servers.json"),
        "MOUNT_PATH": str(tmp_path / "mnt"),
        "SITES_AVAILABLE_PATH": str(tmp_path / "sites-available"),
        "SITES_ENABLED_PATH": str(tmp_path / "sites-enabled"),
        "POSTGRES_PASSWORD": "postgres-secret",
        "PG_PASSWORD": "pg-secret",
        "CLERK_PUBLISHABLE_KEY": "pk_test_123",
        "CLERK_SECRET_KEY": "sk_test_456",
        "ANTHROPIC_API_URL": "https://llm.example.org",
        "ANTHROPIC_API_KEY": "llm-key",
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Provide settings rooted in the test's temporary directory."""
    for name in ("mnt", "sites-available", "sites-enabled"):
        (tmp_path / name).mkdir()
    return load_settings(
        domain="fleet.example.org",
        servers_file_path=tmp_path / "servers.json",
        mount_path=tmp_path / "mnt",
        sites_available_path=tmp_path / "sites-available",
        sites_enabled_path=tmp_path / "sites-enabled",
        postgres_password="postgres-secret",
        pg_password="pg-secret",
        clerk_publishable_key="pk_test_123",
        clerk_secret_key="sk_test_456",
        anthropic_api_url="https://llm.example.org",
        anthropic_api_key="llm-key",
    )


# =============================================================================
# Registry Fixtures
# =============================================================================


@pytest.fixture
def registry(settings: Settings) -> TenantRegistry:
    """Provide a registry backed by a file that does not exist yet."""
    return TenantRegistry(settings.servers_file_path)


@pytest.fixture
def make_tenant() -> Callable[..., Tenant]:
    """Provide a factory for valid tenants; keyword arguments override fields."""

    def _make(tenant_id: str = "demo", **fields: Any) -> Tenant:
        values: dict[str, Any] = {
            "id": tenant_id,
            "label": tenant_id.title(),
            "port": 9100,
            "server_version": "1.6.7",
        }
        values.update(fields)
        return Tenant(**values)

    return _make


@pytest.fixture
def instance_dirs(settings: Settings) -> InstanceDirectories:
    return InstanceDirectories(settings.mount_path)


# =============================================================================
# Docker Fixtures
# =============================================================================


@pytest.fixture
def docker_client() -> MagicMock:
    """Provide a mock Docker client with no networks or containers."""
    client = MagicMock()
    client.networks.list.return_value = []
    client.containers.list.return_value = []
    return client


@pytest.fixture
def runtime(docker_client: MagicMock) -> ContainerRuntime:
    return ContainerRuntime(docker_client=docker_client)


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Undo global logging configuration made by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("wbctl").setLevel(logging.NOTSET)
    structlog.reset_defaults()
    clear_context()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires Docker)"
    )
