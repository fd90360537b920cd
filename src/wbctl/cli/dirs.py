# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""`wbctl dirs` commands: create or delete a server's instance directory."""

import typer

from wbctl.cli.output import exit_on_error, print_detail, print_error, print_success, print_warning
from wbctl.cli.state import get_state

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(ctx: typer.Context, tenant_id: str = typer.Argument(..., help="Server id")) -> None:
    """Create the instance directory and its subdirectories."""
    state = get_state(ctx)
    with exit_on_error():
        tenant = state.registry.require(tenant_id)
    directories = state.directories

    print_detail(f"Instance directory: {directories.path_for(tenant)}")
    with exit_on_error():
        created = directories.init(tenant)
    for path in created:
        print_success(f"✓ Created {path}")
    if not created:
        print_warning("All directories already exist")
    print_success(f"✓ Directory initialization complete for {tenant_id}")


@app.command()
def remove(
    ctx: typer.Context,
    tenant_id: str = typer.Argument(..., help="Server id"),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation"),
) -> None:
    """Delete the instance directory and all its data."""
    state = get_state(ctx)
    with exit_on_error():
        tenant = state.registry.require(tenant_id)
    directories = state.directories
    path = directories.path_for(tenant)

    if not force:
        print_warning("WARNING: This will permanently delete all data in:")
        print_error(f"   {path}")
        print_warning("   This includes databases, exports, assets, and sandbox files.")
        confirmation = typer.prompt(f'Type "{tenant_id}" to confirm deletion', default="", show_default=False)
        if confirmation != tenant_id:
            print_success("✓ Deletion cancelled")
            return

    with exit_on_error():
        removed = directories.remove(tenant)
    if removed:
        print_success("✓ Removed instance directory and all contents")
    else:
        print_warning(f"Directory does not exist: {path}")
