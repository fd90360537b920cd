# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JSON-file tenant registry.

The registry file is the only canonical copy of the tenant collection. Every
public method re-reads it, and every mutation rewrites the whole collection:
the JSON is written to a temporary file in the same directory which is then
renamed over the target, so a reader never sees a partially-written file.

The file is always a JSON array sorted by tenant id after a mutation.

There is no cross-process locking. Two processes writing concurrently each
rename their own complete snapshot and the last rename wins, discarding the
other writer's change.

Example:
    >>> registry = TenantRegistry(Path("/srv/wb/servers.json"))
    >>> registry.add(Tenant(id="demo", label="Demo", port=9100, server_version="1.6.7"))
    >>> registry.update("demo", TenantChanges(port=9200))
    >>> registry.add_tags("demo", ["production"])
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from wbctl.core.exceptions import (
    ConflictError,
    NotFoundError,
    RegistryFormatError,
    ValidationError,
)
from wbctl.domains.tenants.models import Tenant, TenantChanges
from wbctl.domains.tenants.validation import find_id_conflict, validate_tenant
from wbctl.utils.datetime import filename_timestamp

logger = logging.getLogger(__name__)


class TenantRegistry:
    """CRUD operations over the JSON tenant registry file.

    Attributes:
        path: Location of the registry file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _read(self) -> list[Tenant]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []

        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise RegistryFormatError(self.path, f"invalid JSON: {e}") from e

        if not isinstance(records, list):
            raise RegistryFormatError(
                self.path, f"expected a JSON array, got {type(records).__name__}"
            )

        try:
            return [Tenant.from_record(record) for record in records]
        except PydanticValidationError as e:
            raise RegistryFormatError(self.path, str(e)) from e

    def _write(self, tenants: list[Tenant]) -> None:
        tenants = sorted(tenants, key=lambda t: t.id)
        payload = json.dumps(
            [t.to_record() for t in tenants], indent=2, ensure_ascii=False
        )
        self._replace_contents(payload.encode("utf-8") + b"\n")
        logger.debug("Wrote %d tenant(s) to %s", len(tenants), self.path)

    def _replace_contents(self, data: bytes) -> None:
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=directory, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
        ) as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
            temp_path = Path(handle.name)
        try:
            os.replace(temp_path, self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    # =========================================================================
    # Queries
    # =========================================================================

    def list(self) -> list[Tenant]:
        """Return every registered tenant in file order."""
        return self._read()

    def get(self, tenant_id: str) -> Tenant | None:
        """Return the tenant with the given id, or None."""
        return next((t for t in self._read() if t.id == tenant_id), None)

    def require(self, tenant_id: str) -> Tenant:
        """Return the tenant with the given id.

        Raises:
            NotFoundError: If the id is not registered.
        """
        tenant = self.get(tenant_id)
        if tenant is None:
            raise NotFoundError(tenant_id)
        return tenant

    def get_by_tag(self, tag: str) -> list[Tenant]:
        return [t for t in self._read() if t.has_tag(tag)]

    def get_by_version(self, version: str) -> list[Tenant]:
        """Return tenants whose server version equals version exactly."""
        return [t for t in self._read() if t.server_version == version]

    def validate_all(self) -> dict[str, list[str]]:
        """Validate every stored record.

        Returns:
            Mapping of tenant id to its violations, for invalid records only.
        """
        report: dict[str, list[str]] = {}
        for tenant in self._read():
            violations = validate_tenant(tenant)
            if violations:
                report[tenant.id] = violations
        return report

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, tenant: Tenant) -> None:
        """Register a new tenant.

        Raises:
            ValidationError: If the tenant violates a field rule.
            ConflictError: If the id is already registered.
        """
        tenants = self._read()

        violations = validate_tenant(tenant)
        if violations:
            raise ValidationError(violations)

        if find_id_conflict(tenants, tenant.id):
            raise ConflictError(tenant.id)

        tenants.append(tenant)
        self._write(tenants)
        logger.info("Added tenant %s on port %d", tenant.id, tenant.port)

    def update(self, tenant_id: str, changes: TenantChanges) -> Tenant:
        """Merge explicit changes onto a tenant and re-validate the result.

        Returns:
            The updated tenant.

        Raises:
            NotFoundError: If the id is not registered.
            ValidationError: If the merged record violates a field rule.
        """
        tenants = self._read()
        index = self._index_of(tenants, tenant_id)

        updated = changes.apply_to(tenants[index])
        violations = validate_tenant(updated)
        if violations:
            raise ValidationError(violations)

        tenants[index] = updated
        self._write(tenants)
        logger.info(
            "Updated tenant %s: %s", tenant_id, ", ".join(sorted(changes.model_fields_set))
        )
        return updated

    def remove(self, tenant_id: str) -> None:
        """Delete a tenant's registry entry.

        Containers and instance directories are left untouched.

        Raises:
            NotFoundError: If the id is not registered.
        """
        tenants = self._read()
        remaining = [t for t in tenants if t.id != tenant_id]
        if len(remaining) == len(tenants):
            raise NotFoundError(tenant_id)

        self._write(remaining)
        logger.info("Removed tenant %s", tenant_id)

    def add_tags(self, tenant_id: str, tags: Iterable[str]) -> Tenant:
        """Add tags to a tenant (set union, idempotent)."""
        tenants = self._read()
        index = self._index_of(tenants, tenant_id)

        tenant = tenants[index]
        merged = list(dict.fromkeys([*(tenant.tags or []), *tags]))
        tenants[index] = tenant.model_copy(update={"tags": merged or None})
        self._write(tenants)
        return tenants[index]

    def remove_tags(self, tenant_id: str, tags: Iterable[str]) -> Tenant:
        """Remove tags from a tenant. An emptied tag set becomes absent."""
        tenants = self._read()
        index = self._index_of(tenants, tenant_id)

        tenant = tenants[index]
        to_remove = set(tags)
        remaining = [tag for tag in (tenant.tags or []) if tag not in to_remove]
        tenants[index] = tenant.model_copy(update={"tags": remaining or None})
        self._write(tenants)
        return tenants[index]

    # =========================================================================
    # Backup / restore
    # =========================================================================

    def backup(self) -> Path:
        """Copy the registry file to <file>.backup.<timestamp>.

        A missing registry file is not an error; the backup path is returned
        without anything being written.
        """
        backup_path = self.path.with_name(
            f"{self.path.name}.backup.{filename_timestamp()}"
        )
        try:
            shutil.copyfile(self.path, backup_path)
        except FileNotFoundError:
            logger.info("No registry file at %s, nothing to back up", self.path)
        else:
            logger.info("Backed up registry to %s", backup_path)
        return backup_path

    def restore(self, backup_path: Path | str) -> None:
        """Overwrite the live registry file with the bytes of a backup."""
        data = Path(backup_path).read_bytes()
        self._replace_contents(data)
        logger.info("Restored registry from %s", backup_path)

    @staticmethod
    def _index_of(tenants: list[Tenant], tenant_id: str) -> int:
        for index, tenant in enumerate(tenants):
            if tenant.id == tenant_id:
                return index
        raise NotFoundError(tenant_id)
