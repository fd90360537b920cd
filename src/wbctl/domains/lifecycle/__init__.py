# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant container lifecycle: image rules, orchestration and fleet operations."""

from wbctl.domains.lifecycle.fleet import FleetOperations, PullResult, fleet_images
from wbctl.domains.lifecycle.images import admin_image, server_image, server_image_family
from wbctl.domains.lifecycle.orchestrator import (
    LifecycleOrchestrator,
    LifecycleReport,
    StepOutcome,
    StepStatus,
)

__all__ = [
    "FleetOperations",
    "LifecycleOrchestrator",
    "LifecycleReport",
    "PullResult",
    "StepOutcome",
    "StepStatus",
    "admin_image",
    "fleet_images",
    "server_image",
    "server_image_family",
]
