# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for wbctl.

Example:
    >>> from wbctl.core.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.servers_file_path)
"""

from wbctl.core.config.settings import Settings, load_settings

__all__ = [
    "Settings",
    "load_settings",
]
