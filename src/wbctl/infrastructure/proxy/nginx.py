# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only access to per-tenant nginx site files.

Site files are named after the tenant's subdomain (e.g. demo.example.org) in
sites-available, with a symlink of the same name in sites-enabled. Only the
upstream port is read; the files are generated and reloaded elsewhere.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

UPSTREAM_PORT_PATTERN = re.compile(r"proxy_pass\s+http://localhost:(\d+)")


class ProxyConfigState(str, Enum):
    """Result of looking up a tenant's site file."""

    FOUND = "found"
    MISSING = "missing"
    UNPARSABLE = "unparsable"
    UNREADABLE = "unreadable"


@dataclass
class ProxyConfig:
    """Upstream information for one subdomain.

    Attributes:
        subdomain: Site file name.
        path: Path of the site file in sites-available.
        state: Whether the file was found and parsed.
        upstream_port: Port of the proxy_pass upstream, when parsed.
    """

    subdomain: str
    path: Path
    state: ProxyConfigState
    upstream_port: Optional[int] = None


def extract_upstream_port(text: str) -> Optional[int]:
    """Return the localhost upstream port of a site file, or None.

    Example:
        >>> extract_upstream_port("location / { proxy_pass http://localhost:9100; }")
        9100
    """
    match = UPSTREAM_PORT_PATTERN.search(text)
    return int(match.group(1)) if match else None


class NginxSites:
    """Lookup of site files in sites-available / sites-enabled.

    Attributes:
        available_path: sites-available directory.
        enabled_path: sites-enabled directory.
    """

    def __init__(self, available_path: Path, enabled_path: Path) -> None:
        self.available_path = Path(available_path)
        self.enabled_path = Path(enabled_path)

    def read(self, subdomain: str) -> ProxyConfig:
        """Read the upstream port configured for a subdomain."""
        path = self.available_path / subdomain
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ProxyConfig(subdomain, path, ProxyConfigState.MISSING)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", path, e)
            return ProxyConfig(subdomain, path, ProxyConfigState.UNREADABLE)

        port = extract_upstream_port(text)
        if port is None:
            return ProxyConfig(subdomain, path, ProxyConfigState.UNPARSABLE)
        return ProxyConfig(subdomain, path, ProxyConfigState.FOUND, port)

    def is_enabled(self, subdomain: str) -> bool:
        """Whether sites-enabled holds an entry (file or symlink) for the subdomain."""
        entry = self.enabled_path / subdomain
        return entry.is_symlink() or entry.exists()
