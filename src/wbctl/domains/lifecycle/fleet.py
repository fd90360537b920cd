# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fleet-wide container operations.

These act on the whole registry rather than on one tenant: pre-pulling every
image the fleet needs, pruning unused networks and reporting which tenant
containers are running.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from wbctl.core.exceptions import ConfigError
from wbctl.domains.lifecycle.images import BASE_IMAGES, admin_image, server_image
from wbctl.domains.tenants.models import Tenant
from wbctl.infrastructure.docker.runtime import ContainerRuntime, ContainerRuntimeError

logger = logging.getLogger(__name__)


@dataclass
class PullResult:
    """Images pulled and images that failed, in pull order."""

    pulled: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def fleet_images(tenants: Iterable[Tenant]) -> list[str]:
    """Return every image the fleet needs without duplicates.

    Base images come first, then server images, then admin images. Tenants
    with a missing or unparsable server version are skipped.
    """
    servers: dict[str, None] = {}
    admins: dict[str, None] = {}
    for tenant in tenants:
        if tenant.server_version:
            try:
                servers.setdefault(server_image(tenant.server_version))
            except ConfigError as e:
                logger.warning("Skipping %s: %s", tenant.id, e)
        if tenant.admin_version:
            admins.setdefault(admin_image(tenant.admin_version))
    return list({**dict.fromkeys(BASE_IMAGES), **servers, **admins})


class FleetOperations:
    """Registry-wide operations on the container runtime."""

    def __init__(self, runtime: ContainerRuntime) -> None:
        self.runtime = runtime

    def pull_images(self, tenants: Iterable[Tenant]) -> PullResult:
        """Pull base images then every distinct application and admin image.

        Pull failures are recorded and the remaining images are still pulled.
        """
        result = PullResult()
        for image in fleet_images(tenants):
            logger.info("Pulling %s", image)
            try:
                self.runtime.pull_image(image)
            except ContainerRuntimeError as e:
                logger.warning("Failed to pull %s: %s", image, e.reason)
                result.failed[image] = e.reason
            else:
                result.pulled.append(image)
        return result

    def prune_networks(self) -> list[str]:
        removed = self.runtime.prune_networks()
        logger.info("Pruned %d network(s)", len(removed))
        return removed

    def running_containers(self) -> set[str]:
        return self.runtime.running_container_names()
