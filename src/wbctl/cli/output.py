# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Console output helpers for the command line."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape

from wbctl.core.exceptions import ValidationError, WbctlError
from wbctl.domains.lifecycle.orchestrator import LifecycleReport, StepStatus

console = Console(highlight=False)

_STEP_STYLES = {
    StepStatus.OK: ("green", "✓"),
    StepStatus.SKIPPED: ("dim", "-"),
    StepStatus.WARNING: ("yellow", "⚠"),
    StepStatus.FAILED: ("red", "✗"),
}


def print_success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]{escape(message)}[/yellow]")


def print_error(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")


def print_detail(message: str) -> None:
    console.print(f"[dim]  {escape(message)}[/dim]")


def print_header(message: str) -> None:
    console.print(f"\n[bold]{escape(message)}[/bold]")


def print_report(report: LifecycleReport) -> int:
    """Print every step of a lifecycle report.

    Returns:
        1 if the report failed, else 0, so callers can sum failures.
    """
    for outcome in report.steps:
        style, symbol = _STEP_STYLES[outcome.status]
        line = f"{symbol} {outcome.step}"
        if outcome.detail:
            line += f": {outcome.detail}"
        console.print(f"[{style}]  {escape(line)}[/{style}]")
    if report.error:
        print_error(f"✗ {report.tenant_id}: {report.error}")
    return 1 if report.failed else 0


def print_wbctl_error(error: WbctlError) -> None:
    print_error(f"Error: {error}")
    if isinstance(error, ValidationError):
        for violation in error.violations:
            print_detail(violation)


def finish(total_failed: int, success: str, failure: str) -> None:
    """Print the batch summary and exit 1 when anything failed."""
    console.print()
    if total_failed:
        print_error(f"{failure} ({total_failed} failed)")
        raise typer.Exit(1)
    print_success(success)


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a WbctlError or file error raised inside the block and exit with status 1."""
    try:
        yield
    except WbctlError as e:
        print_wbctl_error(e)
        raise typer.Exit(1) from e
    except OSError as e:
        print_error(f"Error: {e}")
        raise typer.Exit(1) from e
