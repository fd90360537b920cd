# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-tenant instance directory layout.

    <mount>/<instanceDir or id>/
        databases/   database storage (mounted into both containers)
        sandbox/     shared scratch space, mode 0777
        assets/      application assets
        exports/     application exports

Directories are created only by an explicit init(). bring-up checks for them
but never creates them.
"""

import logging
import os
import shutil
from pathlib import Path

from wbctl.domains.tenants.models import Tenant

logger = logging.getLogger(__name__)

SUBDIRECTORIES = ("databases", "sandbox", "assets", "exports")
SANDBOX_DIR = "sandbox"
SANDBOX_MODE = 0o777


class InstanceDirectories:
    """Creates, checks and removes tenant instance directories.

    Attributes:
        mount_path: Directory holding one instance directory per tenant.
    """

    def __init__(self, mount_path: Path) -> None:
        self.mount_path = Path(mount_path)

    def path_for(self, tenant: Tenant) -> Path:
        return self.mount_path / tenant.instance_dir_name

    def subdirectory(self, tenant: Tenant, name: str) -> Path:
        return self.path_for(tenant) / name

    def missing(self, tenant: Tenant) -> list[Path]:
        """Return required directories that do not exist, instance dir first."""
        root = self.path_for(tenant)
        if not root.is_dir():
            return [root]
        return [root / name for name in SUBDIRECTORIES if not (root / name).is_dir()]

    def ensure_sandbox_permissions(self, tenant: Tenant) -> None:
        os.chmod(self.subdirectory(tenant, SANDBOX_DIR), SANDBOX_MODE)

    def init(self, tenant: Tenant) -> list[Path]:
        """Create the instance directory and its subdirectories.

        Existing directories are left as they are.

        Returns:
            Directories that were created.
        """
        created: list[Path] = []
        root = self.path_for(tenant)
        for path in [root, *(root / name for name in SUBDIRECTORIES)]:
            if path.is_dir():
                continue
            path.mkdir(parents=True)
            created.append(path)
        self.ensure_sandbox_permissions(tenant)
        logger.info("Initialized %s (%d created)", root, len(created))
        return created

    def remove(self, tenant: Tenant) -> bool:
        """Delete the instance directory and everything in it.

        Returns:
            True if removed, False if it did not exist.
        """
        root = self.path_for(tenant)
        try:
            shutil.rmtree(root)
        except FileNotFoundError:
            return False
        logger.info("Removed %s", root)
        return True
