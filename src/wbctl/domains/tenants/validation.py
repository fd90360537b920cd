# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Field-level validation rules for tenant records.

validate_tenant() is pure: it reports every violated rule and never raises.
A tenant is valid iff the returned list is empty. The registry runs it on
every add and on the merged result of every update.
"""

import re
from collections.abc import Iterable

from wbctl.domains.tenants.models import Tenant

TENANT_ID_PATTERN = re.compile(r"^[a-z0-9-]+$")

MIN_PORT = 1000
MAX_PORT = 65535

ID_FORMAT_VIOLATION = "ID must be lowercase alphanumeric with hyphens"
LABEL_VIOLATION = "Label is required"
SERVER_VERSION_VIOLATION = "Server version is required"
PORT_VIOLATION = f"Port must be between {MIN_PORT} and {MAX_PORT}"


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def validate_tenant(tenant: Tenant) -> list[str]:
    """Check a tenant against the field rules.

    Args:
        tenant: Tenant record to check.

    Returns:
        Violated rule messages, in a fixed order. Empty if the tenant is valid.

    Example:
        >>> validate_tenant(Tenant(id="demo", label="Demo", port=9100, server_version="1.6.7"))
        []
        >>> validate_tenant(Tenant(id="DEMO", label="Demo", port=99, server_version="1.6.7"))
        ['ID must be lowercase alphanumeric with hyphens', 'Port must be between 1000 and 65535']
    """
    violations: list[str] = []

    if not tenant.id or not TENANT_ID_PATTERN.match(tenant.id):
        violations.append(ID_FORMAT_VIOLATION)

    if _is_blank(tenant.label):
        violations.append(LABEL_VIOLATION)

    if _is_blank(tenant.server_version):
        violations.append(SERVER_VERSION_VIOLATION)

    if tenant.port is None or not MIN_PORT <= tenant.port <= MAX_PORT:
        violations.append(PORT_VIOLATION)

    return violations


def find_id_conflict(
    tenants: Iterable[Tenant], tenant_id: str, exclude_id: str | None = None
) -> Tenant | None:
    """Return the tenant already using tenant_id, ignoring exclude_id."""
    for tenant in tenants:
        if tenant.id == tenant_id and tenant.id != exclude_id:
            return tenant
    return None
