# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Filesystem collaborators."""

from wbctl.infrastructure.filesystem.instance_dirs import (
    SUBDIRECTORIES,
    InstanceDirectories,
)

__all__ = [
    "InstanceDirectories",
    "SUBDIRECTORIES",
]
