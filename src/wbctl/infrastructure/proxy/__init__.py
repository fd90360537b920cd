# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reverse proxy and TLS collaborators (read-only).

- nginx: upstream port and enablement of per-tenant site files
- certificates: certbot-managed certificate presence
"""

from wbctl.infrastructure.proxy.certificates import CertbotCertificates, CertificateStatus
from wbctl.infrastructure.proxy.nginx import (
    NginxSites,
    ProxyConfig,
    ProxyConfigState,
    extract_upstream_port,
)

__all__ = [
    "CertbotCertificates",
    "CertificateStatus",
    "NginxSites",
    "ProxyConfig",
    "ProxyConfigState",
    "extract_upstream_port",
]
