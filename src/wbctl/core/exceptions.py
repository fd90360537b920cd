# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception hierarchy for wbctl.

This module defines the errors raised by the registry, the target resolver
and the lifecycle orchestrator:
- WbctlError: Base exception for all wbctl errors
- ValidationError: Tenant record fails field validation
- ConflictError: Tenant id already registered
- NotFoundError: Unknown tenant id or selector
- NoMatchError: Tag or version selector matched nothing
- RegistryFormatError: Registry file cannot be parsed
- ConfigError: Missing or unusable configuration
- ConfigMismatchError: Reverse proxy upstream port disagrees with the registry
- NotReadyError: Instance directories missing on disk
- ContainerStartError: A required container failed to start
"""

from pathlib import Path
from typing import Any


class WbctlError(Exception):
    """Base exception for all wbctl errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize wbctl error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return the error message."""
        return self.message


class ValidationError(WbctlError):
    """Raised when a tenant record violates one or more field rules.

    Attributes:
        violations: Ordered list of violated rule messages.
    """

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__(
            f"Validation failed: {', '.join(self.violations)}",
            details={"violations": self.violations},
        )


class ConflictError(WbctlError):
    """Raised when adding a tenant whose id is already registered."""

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Server with ID '{tenant_id}' already exists")


class NotFoundError(WbctlError):
    """Raised when a tenant id, or a selector, refers to nothing."""

    def __init__(self, target: str, message: str | None = None):
        self.target = target
        super().__init__(message or f"Server '{target}' not found")


class NoMatchError(WbctlError):
    """Raised when a tag or version selector matches no tenant.

    Attributes:
        kind: Selector kind ("tag" or "version").
        value: The tag or version that matched nothing.
    """

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"No servers found with {kind} '{value}'")


class RegistryFormatError(WbctlError):
    """Raised when the registry file exists but is not a JSON array of tenants."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse registry file '{path}': {reason}")


class ConfigError(WbctlError):
    """Raised when configuration needed for an operation is missing or invalid."""


class ConfigMismatchError(WbctlError):
    """Raised when the proxy upstream port does not match the registered port.

    Attributes:
        tenant_id: Tenant being brought up.
        expected: Port from the registry.
        actual: Port found in the proxy configuration.
    """

    def __init__(self, tenant_id: str, expected: int, actual: int):
        self.tenant_id = tenant_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Nginx configuration port mismatch for {tenant_id}: "
            f"config has {actual}, server uses {expected}"
        )


class NotReadyError(WbctlError):
    """Raised when a tenant's instance directories are not present.

    Attributes:
        tenant_id: Tenant being brought up.
        missing: Paths that do not exist.
    """

    def __init__(self, tenant_id: str, missing: list[Path]):
        self.tenant_id = tenant_id
        self.missing = list(missing)
        super().__init__(
            f"Directories not ready for server '{tenant_id}'",
            details={"missing": [str(p) for p in self.missing]},
        )


class ContainerStartError(WbctlError):
    """Raised when the container runtime fails to start a required container.

    Attributes:
        container: Name of the container that failed to start.
        reason: Error text reported by the runtime.
    """

    def __init__(self, container: str, reason: str):
        self.container = container
        self.reason = reason
        super().__init__(f"Failed to start container '{container}': {reason}")
