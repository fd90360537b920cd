# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Docker infrastructure for tenant container management.

Each tenant runs on its own Docker network with up to three containers.

Naming convention:
    {tenant_id}             application container and network
    {tenant_id}-postgres    database container
    {tenant_id}-admin       admin container

Example:
    demo, demo-postgres, demo-admin
"""

from wbctl.infrastructure.docker.runtime import (
    ContainerRuntime,
    ContainerRuntimeError,
    ContainerSpec,
)

__all__ = [
    "ContainerRuntime",
    "ContainerRuntimeError",
    "ContainerSpec",
]
