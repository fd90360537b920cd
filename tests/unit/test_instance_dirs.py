# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for instance directory management."""

import stat
from collections.abc import Callable

from wbctl.domains.tenants.models import Tenant
from wbctl.infrastructure.filesystem.instance_dirs import SUBDIRECTORIES, InstanceDirectories


class TestInstanceDirectories:
    """Tests for InstanceDirectories."""

    def test_path_uses_instance_dir_override(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        tenant = make_tenant(instance_dir="demo-data")

        assert instance_dirs.path_for(tenant) == instance_dirs.mount_path / "demo-data"

    def test_missing_root_reported_alone(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        tenant = make_tenant()

        assert instance_dirs.missing(tenant) == [instance_dirs.mount_path / "demo"]

    def test_missing_subdirectories(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        tenant = make_tenant()
        root = instance_dirs.path_for(tenant)
        (root / "databases").mkdir(parents=True)
        (root / "sandbox").mkdir()

        assert instance_dirs.missing(tenant) == [root / "assets", root / "exports"]

    def test_init_creates_layout(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        tenant = make_tenant()

        created = instance_dirs.init(tenant)

        root = instance_dirs.path_for(tenant)
        assert created == [root, *(root / name for name in SUBDIRECTORIES)]
        assert instance_dirs.missing(tenant) == []
        assert stat.S_IMODE((root / "sandbox").stat().st_mode) == 0o777

    def test_init_is_idempotent(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        tenant = make_tenant()
        instance_dirs.init(tenant)
        (instance_dirs.subdirectory(tenant, "databases") / "keep.txt").write_text("x")

        assert instance_dirs.init(tenant) == []
        assert (instance_dirs.subdirectory(tenant, "databases") / "keep.txt").exists()

    def test_remove(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        tenant = make_tenant()
        instance_dirs.init(tenant)

        assert instance_dirs.remove(tenant) is True
        assert not instance_dirs.path_for(tenant).exists()

    def test_remove_absent(
        self, instance_dirs: InstanceDirectories, make_tenant: Callable[..., Tenant]
    ) -> None:
        assert instance_dirs.remove(make_tenant()) is False
