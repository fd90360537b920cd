# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Port allocation for new tenants.

allocate_port() is a highest-plus-one allocator. It does not reuse gaps left
by removed tenants, and two processes reading the same registry snapshot can
compute the same port.
"""

from collections.abc import Iterable

from wbctl.domains.tenants.models import Tenant

PORT_RANGE_START = 3000
DATABASE_PORT_OFFSET = 10000


def allocate_port(tenants: Iterable[Tenant], exclude_id: str | None = None) -> int:
    """Return the next application port.

    Args:
        tenants: Currently registered tenants.
        exclude_id: Tenant whose own port should be ignored.

    Returns:
        One more than the highest port >= 3000, or 3000 if there is none.

    Example:
        >>> allocate_port([])
        3000
    """
    ports = [
        t.port
        for t in tenants
        if t.id != exclude_id and t.port >= PORT_RANGE_START
    ]
    if not ports:
        return PORT_RANGE_START
    return max(ports) + 1


def derived_port(port: int) -> int:
    """Return the host port published by a tenant's database container."""
    return port + DATABASE_PORT_OFFSET
