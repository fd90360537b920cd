# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-invocation state shared by all commands.

Settings are loaded on first use so that `--help` works without any
environment configured. The Docker client is only created by commands that
touch containers.
"""

from collections.abc import Callable
from typing import Optional

import typer

from wbctl.core.config.settings import Settings, load_settings
from wbctl.domains.lifecycle.fleet import FleetOperations
from wbctl.domains.lifecycle.orchestrator import LifecycleOrchestrator
from wbctl.domains.tenants.store import TenantRegistry
from wbctl.infrastructure.docker.runtime import ContainerRuntime
from wbctl.infrastructure.filesystem.instance_dirs import InstanceDirectories
from wbctl.utils.logging import setup_logging


class CliState:
    """Lazily built settings, registry and container runtime."""

    def __init__(
        self,
        settings_loader: Callable[[], Settings] = load_settings,
        runtime_factory: Callable[[], ContainerRuntime] = ContainerRuntime,
        configure_logging: Callable[[Settings], None] = setup_logging,
    ) -> None:
        self._settings_loader = settings_loader
        self._runtime_factory = runtime_factory
        self._configure_logging = configure_logging
        self._settings: Optional[Settings] = None
        self._runtime: Optional[ContainerRuntime] = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = self._settings_loader()
            self._configure_logging(self._settings)
        return self._settings

    @property
    def registry(self) -> TenantRegistry:
        return TenantRegistry(self.settings.servers_file_path)

    @property
    def directories(self) -> InstanceDirectories:
        return InstanceDirectories(self.settings.mount_path)

    @property
    def runtime(self) -> ContainerRuntime:
        if self._runtime is None:
            self._runtime = self._runtime_factory()
        return self._runtime

    def orchestrator(self) -> LifecycleOrchestrator:
        return LifecycleOrchestrator(self.settings, self.runtime, directories=self.directories)

    def fleet(self) -> FleetOperations:
        return FleetOperations(self.runtime)


def get_state(ctx: typer.Context) -> CliState:
    if ctx.obj is None:
        ctx.obj = CliState()
    return ctx.obj
