# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""`wbctl config` commands: edit the server registry."""

import json
from pathlib import Path
from typing import List, Optional

import typer

from wbctl.cli.output import (
    console,
    exit_on_error,
    finish,
    print_detail,
    print_error,
    print_success,
    print_warning,
    print_wbctl_error,
)
from wbctl.cli.state import get_state
from wbctl.core.exceptions import WbctlError
from wbctl.domains.lifecycle.images import latest_version
from wbctl.domains.tenants.models import Tenant, TenantChanges
from wbctl.domains.tenants.ports import allocate_port
from wbctl.domains.tenants.selectors import resolve_targets

app = typer.Typer(no_args_is_help=True)


def label_from_id(tenant_id: str) -> str:
    """Turn "south-sudan" into "South Sudan"."""
    return " ".join(word[:1].upper() + word[1:] for word in tenant_id.replace("-", " ").split(" "))


@app.command()
def add(ctx: typer.Context, tenant_id: str = typer.Argument(..., help="New server id")) -> None:
    """Register a server with the next free port and the latest server version."""
    tenant_id = tenant_id.strip()
    if not tenant_id:
        print_error("Error: Server ID is required")
        raise typer.Exit(1)

    with exit_on_error():
        registry = get_state(ctx).registry
        existing = registry.list()
        tenant = Tenant(
            id=tenant_id,
            label=label_from_id(tenant_id),
            port=allocate_port(existing),
            server_version=latest_version([t.server_version for t in existing]),
            french=False,
            ethiopian=False,
            open_access=False,
        )
        registry.add(tenant)

    print_success(f"✓ Added server '{tenant.id}' on port {tenant.port}")
    print_detail(f"Label: {tenant.label}")
    print_detail(f"Server version: {tenant.server_version}")
    print_detail("Admin version: None")


@app.command()
def show(ctx: typer.Context, tenant_id: str = typer.Argument(..., help="Server id")) -> None:
    """Print one server record as JSON."""
    with exit_on_error():
        tenant = get_state(ctx).registry.require(tenant_id)
    console.print_json(json.dumps(tenant.to_record()))


@app.command()
def remove(ctx: typer.Context, tenant_id: str = typer.Argument(..., help="Server id")) -> None:
    """Remove a server from the registry. Containers and directories are left alone."""
    with exit_on_error():
        get_state(ctx).registry.remove(tenant_id)
    print_success(f"✓ Removed server '{tenant_id}'")


@app.command()
def update(
    ctx: typer.Context,
    selectors: List[str] = typer.Argument(..., help="Server ids, @tag, server=VERSION, or all"),
    label: Optional[str] = typer.Option(None, "--label", help="Display label"),
    server: Optional[str] = typer.Option(None, "--server", help="Server version"),
    admin: Optional[str] = typer.Option(None, "--admin", help="Admin version ('' or 'none' removes it)"),
    instance_dir: Optional[str] = typer.Option(None, "--instance-dir", help="Instance directory name"),
    french: Optional[bool] = typer.Option(None, "--french/--no-french", help="French interface"),
    ethiopian: Optional[bool] = typer.Option(None, "--ethiopian/--no-ethiopian", help="Ethiopian calendar"),
    open_access: Optional[bool] = typer.Option(None, "--open-access/--no-open-access", help="Open access"),
) -> None:
    """Change fields of every target server. Unset options are left unchanged."""
    fields: dict[str, object] = {}
    if label is not None:
        fields["label"] = label
    if server is not None:
        fields["server_version"] = server
    if admin is not None:
        fields["admin_version"] = None if admin == "" or admin.lower() == "none" else admin
    if instance_dir is not None:
        fields["instance_dir"] = instance_dir
    if french is not None:
        fields["french"] = french
    if ethiopian is not None:
        fields["ethiopian"] = ethiopian
    if open_access is not None:
        fields["open_access"] = open_access

    changes = TenantChanges(**fields)
    if changes.is_empty:
        print_warning("No changes specified. Use --help to see available options.")
        raise typer.Exit(1)

    with exit_on_error():
        registry = get_state(ctx).registry
        ids = resolve_targets(registry, selectors)

    total_failed = 0
    for tenant_id in ids:
        try:
            registry.update(tenant_id, changes)
        except WbctlError as e:
            print_error(f"Error updating '{tenant_id}':")
            print_wbctl_error(e)
            total_failed += 1
            continue
        print_success(f"✓ Updated server '{tenant_id}':")
        for name, value in changes.explicit_fields().items():
            print_detail(f"{name}: {'None (removed)' if value is None else value}")

    finish(total_failed, f"Updated {len(ids) - total_failed} server(s)", "Some updates failed")


@app.command()
def tag(
    ctx: typer.Context,
    selector: str = typer.Argument(..., help="Server id, @tag, server=VERSION, or all"),
    tags: List[str] = typer.Argument(..., help="Tags to add"),
) -> None:
    """Add tags to every target server."""
    with exit_on_error():
        registry = get_state(ctx).registry
        for tenant_id in resolve_targets(registry, [selector]):
            registry.add_tags(tenant_id, tags)
            print_success(f"✓ Added tags to server '{tenant_id}':")
            for name in tags:
                print_detail(name)


@app.command()
def untag(
    ctx: typer.Context,
    selector: str = typer.Argument(..., help="Server id, @tag, server=VERSION, or all"),
    tags: List[str] = typer.Argument(..., help="Tags to remove"),
) -> None:
    """Remove tags from every target server."""
    with exit_on_error():
        registry = get_state(ctx).registry
        for tenant_id in resolve_targets(registry, [selector]):
            registry.remove_tags(tenant_id, tags)
            print_success(f"✓ Removed tags from server '{tenant_id}':")
            for name in tags:
                print_detail(name)


@app.command()
def validate(ctx: typer.Context) -> None:
    """Check every registry record against the field rules."""
    with exit_on_error():
        registry = get_state(ctx).registry
        tenants = registry.list()
        report = registry.validate_all()

    if not report:
        print_success(f"✓ {registry.path.name} is valid")
        print_detail(f"Found {len(tenants)} server(s)")
        return

    print_error("✗ Found validation errors:")
    for tenant_id, violations in report.items():
        print_error(f"  {tenant_id}:")
        for violation in violations:
            print_detail(f"  - {violation}")
    raise typer.Exit(1)


@app.command()
def backup(ctx: typer.Context) -> None:
    """Copy the registry file to a timestamped backup next to it."""
    with exit_on_error():
        registry = get_state(ctx).registry
        backup_path = registry.backup()
    if backup_path.exists():
        print_success(f"✓ Backed up to {backup_path}")
    else:
        print_warning(f"No registry file at {registry.path}, nothing to back up")


@app.command()
def restore(
    ctx: typer.Context,
    backup_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Backup file"),
) -> None:
    """Replace the registry file with a backup."""
    with exit_on_error():
        registry = get_state(ctx).registry
        registry.restore(backup_path)
    print_success(f"✓ Restored {registry.path} from {backup_path}")
