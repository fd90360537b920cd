# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant registry domain.

Components:
- models: Tenant record and TenantChanges change set
- validation: Field rules
- store: Atomically-written JSON registry
- ports: Application and database port allocation
- selectors: Selector (id, @tag, server=VERSION, all) resolution
"""

from wbctl.domains.tenants.models import Tenant, TenantChanges
from wbctl.domains.tenants.ports import allocate_port, derived_port
from wbctl.domains.tenants.selectors import resolve_targets
from wbctl.domains.tenants.store import TenantRegistry
from wbctl.domains.tenants.validation import validate_tenant

__all__ = [
    "Tenant",
    "TenantChanges",
    "TenantRegistry",
    "allocate_port",
    "derived_port",
    "resolve_targets",
    "validate_tenant",
]
