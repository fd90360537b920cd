# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Command line interface."""

from wbctl.cli.app import app, main
from wbctl.cli.state import CliState

__all__ = ["CliState", "app", "main"]
