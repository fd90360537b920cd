# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""TLS certificate presence check via the certbot CLI.

Certificates are issued outside wbctl. This module only asks certbot which
certificates it manages. Any failure to run certbot is reported as
"unknown" rather than raised, since certificates never block a bring-up.
"""

import logging
import subprocess
from enum import Enum

logger = logging.getLogger(__name__)

CERTBOT_COMMAND = ["certbot", "certificates"]


class CertificateStatus(str, Enum):
    """Whether certbot manages a certificate for a subdomain."""

    PRESENT = "present"
    MISSING = "missing"
    UNKNOWN = "unknown"


class CertbotCertificates:
    """Queries `certbot certificates`."""

    def __init__(self, command: list[str] | None = None) -> None:
        self._command = command or CERTBOT_COMMAND

    def listing(self) -> str | None:
        """Return certbot's listing output, or None if certbot cannot be run."""
        try:
            result = subprocess.run(
                self._command, capture_output=True, text=True, check=False
            )
        except OSError as e:
            logger.debug("certbot not available: %s", e)
            return None
        if result.returncode != 0:
            logger.debug("certbot exited with %d: %s", result.returncode, result.stderr.strip())
            return None
        return result.stdout

    def status(self, subdomain: str) -> CertificateStatus:
        output = self.listing()
        if output is None:
            return CertificateStatus.UNKNOWN
        if f"Certificate Name: {subdomain}" in output:
            return CertificateStatus.PRESENT
        return CertificateStatus.MISSING
