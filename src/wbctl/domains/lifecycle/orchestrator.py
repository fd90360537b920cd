# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant container lifecycle orchestration.

This module brings a tenant's container set up or down in dependency order:

    bring-up:   pre-flight -> network -> database -> [admin] -> application
    tear-down:  application -> [admin] -> database -> network

Each step is classified as fatal or best-effort. Fatal errors raise and stop
the remaining steps for that tenant; containers already started stay running
(no rollback). Best-effort failures are logged as warnings and recorded in the
returned LifecycleReport.

Fatal:
    ConfigError          server version missing or unparsable
    NotReadyError        instance directories missing
    ConfigMismatchError  nginx upstream port differs from the registered port
    ContainerStartError  admin container failed to start

Example:
    >>> orchestrator = LifecycleOrchestrator(settings, ContainerRuntime())
    >>> report = orchestrator.bring_up(registry.require("demo"))
    >>> report.failed
    False
"""

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from wbctl.core.config.settings import Settings
from wbctl.core.exceptions import (
    ConfigError,
    ConfigMismatchError,
    ContainerStartError,
    NotReadyError,
    WbctlError,
)
from wbctl.domains.lifecycle.images import DATABASE_IMAGE, admin_image, server_image
from wbctl.domains.tenants.models import Tenant
from wbctl.domains.tenants.ports import derived_port
from wbctl.infrastructure.docker.runtime import (
    ContainerRuntime,
    ContainerRuntimeError,
    ContainerSpec,
)
from wbctl.infrastructure.filesystem.instance_dirs import InstanceDirectories
from wbctl.infrastructure.proxy.certificates import CertbotCertificates, CertificateStatus
from wbctl.infrastructure.proxy.nginx import NginxSites, ProxyConfigState
from wbctl.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

APPLICATION_PORT = 8000
ADMIN_PORT = 8001
DATABASE_PORT = 5432
DATABASE_STOP_TIMEOUT = 30
RESTART_SETTLE_SECONDS = 1.0
DOCKER_SOCKET = "/var/run/docker.sock"


def network_name(tenant_id: str) -> str:
    return tenant_id


def application_container(tenant_id: str) -> str:
    return tenant_id


def database_container(tenant_id: str) -> str:
    return f"{tenant_id}-postgres"


def admin_container(tenant_id: str) -> str:
    return f"{tenant_id}-admin"


class StepStatus(str, Enum):
    """Outcome of one lifecycle step."""

    OK = "ok"
    SKIPPED = "skipped"
    WARNING = "warning"
    FAILED = "failed"


@dataclass
class StepOutcome:
    """One recorded step of a bring-up or tear-down."""

    step: str
    status: StepStatus
    detail: str = ""


@dataclass
class LifecycleReport:
    """Ordered record of what happened to one tenant.

    Attributes:
        tenant_id: Tenant the operation ran for.
        operation: "bring_up" or "tear_down".
        steps: Step outcomes in execution order.
        error: Fatal error message, when the operation was aborted.
    """

    tenant_id: str
    operation: str
    steps: list[StepOutcome] = field(default_factory=list)
    error: Optional[str] = None

    def record(self, step: str, status: StepStatus, detail: str = "") -> None:
        self.steps.append(StepOutcome(step, status, detail))

    @property
    def failed(self) -> bool:
        return self.error is not None or any(
            s.status == StepStatus.FAILED for s in self.steps
        )

    @property
    def warnings(self) -> list[StepOutcome]:
        return [s for s in self.steps if s.status == StepStatus.WARNING]


class LifecycleOrchestrator:
    """Brings tenant container sets up and down.

    Attributes:
        settings: Process settings (domain, paths, shared credentials).
        runtime: Docker Engine wrapper.
        directories: Instance directory layout.
        sites: nginx site file lookup.
        certificates: certbot certificate lookup.
    """

    def __init__(
        self,
        settings: Settings,
        runtime: ContainerRuntime,
        directories: Optional[InstanceDirectories] = None,
        sites: Optional[NginxSites] = None,
        certificates: Optional[CertbotCertificates] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.runtime = runtime
        self.directories = directories or InstanceDirectories(settings.mount_path)
        self.sites = sites or NginxSites(
            settings.sites_available_path, settings.sites_enabled_path
        )
        self.certificates = certificates or CertbotCertificates()
        self._sleep = sleep

    # =========================================================================
    # Container specs
    # =========================================================================

    def database_spec(self, tenant: Tenant) -> ContainerSpec:
        """Build the database container spec for a tenant."""
        return ContainerSpec(
            name=database_container(tenant.id),
            image=DATABASE_IMAGE,
            network=network_name(tenant.id),
            ports={f"{DATABASE_PORT}/tcp": derived_port(tenant.port)},
            volumes={
                str(self.directories.subdirectory(tenant, "databases")): "/var/lib/postgresql/data",
                str(self.directories.subdirectory(tenant, "sandbox")): "/app/sandbox",
            },
            environment={
                "POSTGRES_PASSWORD": self.settings.postgres_password.get_secret_value(),
                "PGDATA": "/var/lib/postgresql/data/pgdata",
            },
            auto_remove=True,
        )

    def admin_spec(self, tenant: Tenant) -> ContainerSpec:
        """Build the admin container spec. Requires tenant.admin_version."""
        if not tenant.admin_version:
            raise ConfigError(f"Server '{tenant.id}' has no adminVersion")
        return ContainerSpec(
            name=admin_container(tenant.id),
            image=admin_image(tenant.admin_version),
            network=network_name(tenant.id),
            environment={"ADMIN_VERSION": tenant.admin_version},
            auto_remove=True,
        )

    def application_environment(self, tenant: Tenant) -> dict[str, str]:
        """Environment passed to the application container."""
        settings = self.settings
        env = {
            "SANDBOX_DIR_PATH_EXTERNAL": str(self.directories.subdirectory(tenant, "sandbox")),
            "SERVER_VERSION": tenant.server_version,
            "DATABASE_FOLDER": tenant.instance_dir_name,
            "CLERK_PUBLISHABLE_KEY": settings.clerk_publishable_key,
            "CLERK_SECRET_KEY": settings.clerk_secret_key.get_secret_value(),
            "INSTANCE_ID": tenant.id,
            "INSTANCE_NAME": tenant.label,
            "INSTANCE_REDIRECT_URL": f"https://{settings.subdomain_for(tenant.id)}",
            "PG_HOST": database_container(tenant.id),
            "PG_PORT": str(DATABASE_PORT),
            "PG_PASSWORD": settings.pg_password.get_secret_value(),
            "ANTHROPIC_API_URL": settings.anthropic_api_url,
            "ANTHROPIC_API_KEY": settings.anthropic_api_key.get_secret_value(),
        }
        if tenant.admin_version:
            env["ADMIN_VERSION"] = tenant.admin_version
            env["ADMIN_SERVER_HOST"] = f"http://{admin_container(tenant.id)}:{ADMIN_PORT}"
        if tenant.french:
            env["INSTANCE_LANGUAGE"] = "fr"
        if tenant.ethiopian:
            env["INSTANCE_CALENDAR"] = "ethiopian"
        if tenant.open_access:
            env["OPEN_ACCESS"] = "1"
        return env

    def application_spec(self, tenant: Tenant) -> ContainerSpec:
        """Build the application container spec for a tenant."""
        return ContainerSpec(
            name=application_container(tenant.id),
            image=server_image(tenant.server_version),
            network=network_name(tenant.id),
            ports={f"{APPLICATION_PORT}/tcp": tenant.port},
            volumes={
                DOCKER_SOCKET: DOCKER_SOCKET,
                str(self.directories.subdirectory(tenant, "databases")): "/app/databases",
                str(self.directories.subdirectory(tenant, "sandbox")): "/app/sandbox",
                str(self.directories.subdirectory(tenant, "assets")): "/app/assets",
            },
            environment=self.application_environment(tenant),
        )

    # =========================================================================
    # Step helpers
    # =========================================================================

    def _best_effort(
        self,
        report: LifecycleReport,
        step: str,
        action: Callable[..., Any],
        *args: Any,
        absent_detail: str = "absent",
        **kwargs: Any,
    ) -> None:
        """Run a runtime call whose failure is only a warning.

        Calls returning False mean "already in the desired state" and are
        recorded as skipped.
        """
        try:
            result = action(*args, **kwargs)
        except ContainerRuntimeError as e:
            logger.warning("Step failed, continuing", step=step, error=e.reason)
            report.record(step, StepStatus.WARNING, e.reason)
            return
        if result is False:
            report.record(step, StepStatus.SKIPPED, absent_detail)
        else:
            report.record(step, StepStatus.OK)

    # =========================================================================
    # Pre-flight
    # =========================================================================

    def preflight(self, tenant: Tenant, report: LifecycleReport) -> None:
        """Check everything that must hold before any container is touched.

        Raises:
            ConfigError: If the server version is missing or unparsable.
            NotReadyError: If instance directories are missing.
            ConfigMismatchError: If the nginx upstream port differs.
        """
        if not tenant.server_version or not tenant.server_version.strip():
            raise ConfigError(f"Server '{tenant.id}' must have a serverVersion specified")
        server_image(tenant.server_version)

        missing = self.directories.missing(tenant)
        if missing:
            raise NotReadyError(tenant.id, missing)
        report.record("check directories", StepStatus.OK)

        try:
            self.directories.ensure_sandbox_permissions(tenant)
        except OSError as e:
            logger.warning("Cannot set sandbox permissions", error=str(e))
            report.record("sandbox permissions", StepStatus.WARNING, str(e))
        else:
            report.record("sandbox permissions", StepStatus.OK)

        self._check_proxy(tenant, report)
        self._check_certificate(tenant, report)
        self._check_site_enabled(tenant, report)

    def _check_proxy(self, tenant: Tenant, report: LifecycleReport) -> None:
        subdomain = self.settings.subdomain_for(tenant.id)
        config = self.sites.read(subdomain)

        if config.state == ProxyConfigState.FOUND:
            if config.upstream_port != tenant.port:
                raise ConfigMismatchError(tenant.id, tenant.port, config.upstream_port)
            report.record("proxy config", StepStatus.OK, f"port {tenant.port}")
            return

        messages = {
            ProxyConfigState.MISSING: f"No nginx configuration found for {subdomain}",
            ProxyConfigState.UNPARSABLE: "Cannot parse port from nginx config",
            ProxyConfigState.UNREADABLE: "Cannot check nginx configuration",
        }
        logger.warning(messages[config.state], path=str(config.path))
        report.record("proxy config", StepStatus.WARNING, messages[config.state])

    def _check_certificate(self, tenant: Tenant, report: LifecycleReport) -> None:
        subdomain = self.settings.subdomain_for(tenant.id)
        status = self.certificates.status(subdomain)
        if status == CertificateStatus.PRESENT:
            report.record("certificate", StepStatus.OK)
        elif status == CertificateStatus.MISSING:
            logger.warning("No SSL certificate found", subdomain=subdomain)
            report.record("certificate", StepStatus.WARNING, f"No SSL certificate for {subdomain}")
        else:
            logger.warning("Cannot check SSL certificates (certbot not available)")
            report.record("certificate", StepStatus.WARNING, "certbot not available")

    def _check_site_enabled(self, tenant: Tenant, report: LifecycleReport) -> None:
        subdomain = self.settings.subdomain_for(tenant.id)
        if self.sites.is_enabled(subdomain):
            report.record("proxy enabled", StepStatus.OK)
        else:
            logger.warning("Nginx site not enabled", subdomain=subdomain)
            report.record("proxy enabled", StepStatus.WARNING, f"Nginx site not enabled for {subdomain}")

    # =========================================================================
    # Public operations
    # =========================================================================

    def bring_up(
        self, tenant: Tenant, report: Optional[LifecycleReport] = None
    ) -> LifecycleReport:
        """Start a tenant's network, database, optional admin and application.

        Args:
            tenant: Registered tenant record.
            report: Report to record steps into; a new one is created if omitted.

        Returns:
            Report of every step.

        Raises:
            ConfigError, NotReadyError, ConfigMismatchError: From pre-flight.
            ContainerStartError: If the admin container failed to start.
        """
        if report is None:
            report = LifecycleReport(tenant.id, "bring_up")
        bind_context(tenant_id=tenant.id)
        try:
            logger.info("Bringing up tenant", port=tenant.port, version=tenant.server_version)
            self.preflight(tenant, report)

            self._best_effort(
                report,
                "create network",
                self.runtime.ensure_network,
                network_name(tenant.id),
                absent_detail="already exists",
            )

            self._best_effort(
                report, "start database", self.runtime.run_container, self.database_spec(tenant)
            )

            if tenant.admin_version:
                self._start_admin(tenant, report)

            self._best_effort(
                report,
                "remove stale application",
                self.runtime.remove_container,
                application_container(tenant.id),
            )

            spec = self.application_spec(tenant)
            try:
                self.runtime.run_container(spec)
            except ContainerRuntimeError as e:
                logger.error("Application container failed to start", image=spec.image, error=e.reason)
                report.record("start application", StepStatus.FAILED, e.reason)
            else:
                report.record("start application", StepStatus.OK, spec.image)
        finally:
            clear_context()
        return report

    def _start_admin(self, tenant: Tenant, report: LifecycleReport) -> None:
        name = admin_container(tenant.id)
        self._best_effort(report, "remove stale admin", self.runtime.remove_container, name)

        spec = self.admin_spec(tenant)
        try:
            self.runtime.run_container(spec)
        except ContainerRuntimeError as e:
            logger.error("Admin container failed to start", image=spec.image, error=e.reason)
            raise ContainerStartError(name, e.reason) from e
        report.record("start admin", StepStatus.OK, spec.image)

    def tear_down(self, tenant: Tenant) -> LifecycleReport:
        """Stop a tenant's containers and remove its network.

        Every step is best-effort; absent containers are skipped.
        """
        report = LifecycleReport(tenant.id, "tear_down")
        bind_context(tenant_id=tenant.id)
        try:
            logger.info("Tearing down tenant", port=tenant.port)
            self._best_effort(
                report,
                "stop application",
                self.runtime.stop_container,
                application_container(tenant.id),
            )

            if tenant.admin_version:
                name = admin_container(tenant.id)
                self._best_effort(report, "stop admin", self.runtime.stop_container, name)
                self._best_effort(report, "remove admin", self.runtime.remove_container, name)

            self._best_effort(
                report,
                "stop database",
                self.runtime.stop_container,
                database_container(tenant.id),
                timeout=DATABASE_STOP_TIMEOUT,
            )

            self._best_effort(
                report, "remove network", self.runtime.remove_network, network_name(tenant.id)
            )
        finally:
            clear_context()
        return report

    def restart(
        self, tenants: Iterable[Tenant], settle_seconds: float = RESTART_SETTLE_SECONDS
    ) -> list[LifecycleReport]:
        """Tear down every tenant, wait, then bring every tenant up.

        The two passes are sequential over the whole list so one tenant's
        stop never overlaps another tenant's start. A fatal error bringing up
        one tenant is recorded in its report and the pass continues.
        """
        tenants = list(tenants)
        reports = [self.tear_down(tenant) for tenant in tenants]

        self._sleep(settle_seconds)

        for tenant in tenants:
            reports.append(self.bring_up_or_report(tenant))
        return reports

    def bring_up_or_report(self, tenant: Tenant) -> LifecycleReport:
        """bring_up(), converting a fatal error into a failed report.

        Steps recorded before the error are kept.
        """
        report = LifecycleReport(tenant.id, "bring_up")
        try:
            self.bring_up(tenant, report)
        except WbctlError as e:
            logger.error("Bring-up aborted", tenant_id=tenant.id, error=str(e))
            report.error = str(e)
        return report
