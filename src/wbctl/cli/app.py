# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""wbctl command line.

Commands:
- list: Show registered servers, optionally with running state
- run / stop / restart: Bring target servers up or down
- pull: Pre-pull every image the fleet needs
- prune: Remove unused Docker networks
- config ...: Edit the server registry
- dirs ...: Create or delete instance directories

Targets are selectors: a server id, @tag, server=VERSION, or all.
"""

from typing import List

import typer
from rich.table import Table

from wbctl.cli.config import app as config_app
from wbctl.cli.dirs import app as dirs_app
from wbctl.cli.output import (
    console,
    exit_on_error,
    finish,
    print_header,
    print_report,
    print_success,
    print_warning,
    print_wbctl_error,
)
from wbctl.cli.state import get_state
from wbctl.core.exceptions import WbctlError
from wbctl.domains.tenants.models import Tenant
from wbctl.domains.tenants.selectors import resolve_targets

app = typer.Typer(
    name="wbctl",
    help="Manage a fleet of tenant deployments.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config", help="Edit the server registry.")
app.add_typer(dirs_app, name="dirs", help="Manage instance directories.")

SELECTORS_ARGUMENT = typer.Argument(
    ..., help="Server ids, @tag, server=VERSION, or all"
)


@app.callback()
def root(ctx: typer.Context) -> None:
    """Manage a fleet of tenant deployments."""
    get_state(ctx)


def _flag(value: bool | None) -> str:
    return "✓" if value else ""


@app.command("list")
def list_servers(
    ctx: typer.Context,
    status: bool = typer.Option(False, "--status", "-s", help="Show whether containers are running"),
) -> None:
    """List registered servers."""
    state = get_state(ctx)
    with exit_on_error():
        tenants: list[Tenant] = state.registry.list()
        running = state.fleet().running_containers() if status and tenants else set()

    if not tenants:
        print_warning("No servers configured")
        return

    table = Table(title=f"Servers ({len(tenants)})")
    table.add_column("ID", style="cyan")
    table.add_column("Label")
    table.add_column("Port", justify="right")
    table.add_column("Server")
    table.add_column("Admin")
    table.add_column("FR", justify="center")
    table.add_column("ET", justify="center")
    table.add_column("Open", justify="center")
    table.add_column("Tags")
    if status:
        table.add_column("Status")

    for tenant in tenants:
        row = [
            tenant.id,
            tenant.label,
            str(tenant.port),
            tenant.server_version,
            tenant.admin_version or "",
            _flag(tenant.french),
            _flag(tenant.ethiopian),
            _flag(tenant.open_access),
            ", ".join(tenant.tags or []),
        ]
        if status:
            row.append("[green]running[/green]" if tenant.id in running else "[dim]stopped[/dim]")
        table.add_row(*row)

    console.print(table)


@app.command()
def run(ctx: typer.Context, selectors: List[str] = SELECTORS_ARGUMENT) -> None:
    """Start the container set of each target server."""
    state = get_state(ctx)
    with exit_on_error():
        ids = resolve_targets(state.registry, selectors)
        orchestrator = state.orchestrator()

    total_failed = 0
    for tenant_id in ids:
        print_header(f"Starting {tenant_id}")
        try:
            report = orchestrator.bring_up(state.registry.require(tenant_id))
        except WbctlError as e:
            print_wbctl_error(e)
            total_failed += 1
            continue
        total_failed += print_report(report)

    finish(total_failed, f"Started {len(ids)} server(s)", "Some servers failed to start")


@app.command()
def stop(ctx: typer.Context, selectors: List[str] = SELECTORS_ARGUMENT) -> None:
    """Stop the container set of each target server."""
    state = get_state(ctx)
    with exit_on_error():
        ids = resolve_targets(state.registry, selectors)
        orchestrator = state.orchestrator()

    total_failed = 0
    for tenant_id in ids:
        print_header(f"Stopping {tenant_id}")
        try:
            report = orchestrator.tear_down(state.registry.require(tenant_id))
        except WbctlError as e:
            print_wbctl_error(e)
            total_failed += 1
            continue
        total_failed += print_report(report)

    finish(total_failed, f"Stopped {len(ids)} server(s)", "Some servers failed to stop")


@app.command()
def restart(ctx: typer.Context, selectors: List[str] = SELECTORS_ARGUMENT) -> None:
    """Stop every target server, then start them all again."""
    state = get_state(ctx)
    with exit_on_error():
        ids = resolve_targets(state.registry, selectors)
        orchestrator = state.orchestrator()

    total_failed = 0
    tenants: list[Tenant] = []
    for tenant_id in ids:
        try:
            tenants.append(state.registry.require(tenant_id))
        except WbctlError as e:
            print_wbctl_error(e)
            total_failed += 1

    for report in orchestrator.restart(tenants):
        verb = "Stopping" if report.operation == "tear_down" else "Starting"
        print_header(f"{verb} {report.tenant_id}")
        total_failed += print_report(report)

    finish(total_failed, f"Restarted {len(tenants)} server(s)", "Some servers failed to restart")


@app.command()
def pull(ctx: typer.Context) -> None:
    """Pull the database image and every server and admin image in use."""
    state = get_state(ctx)
    with exit_on_error():
        tenants = state.registry.list()
        result = state.fleet().pull_images(tenants)

    for image in result.pulled:
        print_success(f"✓ Pulled {image}")
    for image, reason in result.failed.items():
        print_warning(f"⚠ Failed to pull {image}: {reason}")


@app.command()
def prune(ctx: typer.Context) -> None:
    """Remove Docker networks not used by any container."""
    state = get_state(ctx)
    with exit_on_error():
        removed = state.fleet().prune_networks()

    if not removed:
        print_success("No unused networks")
        return
    for name in removed:
        print_success(f"✓ Removed network {name}")


def main() -> None:
    app()
