# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Docker SDK container runtime.

This module is the only place that talks to the Docker Engine. Every call is
synchronous. The orchestrator only needs three kinds of answers from it:

- success,
- "already in the desired state" (network exists, container absent),
- failure, raised as ContainerRuntimeError with the engine's error text.

Containers:
    <id>            application container
    <id>-postgres   database container (auto-removed on stop)
    <id>-admin      admin container (auto-removed on stop)
Network:
    <id>            one isolated bridge network per tenant
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import docker
from docker.errors import APIError, DockerException, NotFound
from docker.models.containers import Container
from docker.utils import parse_repository_tag

from wbctl.core.exceptions import WbctlError

logger = logging.getLogger(__name__)


class ContainerRuntimeError(WbctlError):
    """Raised when the Docker Engine reports a failure.

    Attributes:
        operation: Runtime operation that failed (e.g. "run", "stop").
        target: Container, network or image name.
        reason: Error text from the engine.
    """

    def __init__(self, operation: str, target: str, reason: str) -> None:
        self.operation = operation
        self.target = target
        self.reason = reason
        super().__init__(f"docker {operation} {target} failed: {reason}")


@dataclass
class ContainerSpec:
    """Everything needed to start one container.

    Attributes:
        name: Container name.
        image: Image reference including tag.
        network: Network to attach to.
        ports: Container port ("8000/tcp") to host port.
        volumes: Host path to container path (read-write bind mounts).
        environment: Environment variables.
        auto_remove: Remove the container when it stops.
    """

    name: str
    image: str
    network: str
    ports: dict[str, int] = field(default_factory=dict)
    volumes: dict[str, str] = field(default_factory=dict)
    environment: dict[str, str] = field(default_factory=dict)
    auto_remove: bool = False


def _is_conflict(error: APIError) -> bool:
    return error.status_code == 409 or "already exists" in str(error)


class ContainerRuntime:
    """Container and network operations on the local Docker Engine.

    Example:
        runtime = ContainerRuntime()
        runtime.ensure_network("demo")
        runtime.run_container(ContainerSpec(name="demo", image="...", network="demo"))
        runtime.stop_container("demo")
    """

    def __init__(self, docker_client: Optional[docker.DockerClient] = None) -> None:
        """Initialize the runtime.

        Args:
            docker_client: Docker client instance. If None, creates from environment.

        Raises:
            ContainerRuntimeError: If no Docker Engine is reachable.
        """
        if docker_client is None:
            try:
                docker_client = docker.from_env()
            except DockerException as e:
                raise ContainerRuntimeError("connect", "engine", str(e)) from e
        self._client = docker_client

    def _get_container(self, name: str) -> Optional[Container]:
        try:
            return self._client.containers.get(name)
        except NotFound:
            return None

    # =========================================================================
    # Networks
    # =========================================================================

    def ensure_network(self, name: str) -> bool:
        """Create a bridge network unless one with this name exists.

        Returns:
            True if the network was created, False if it already existed.

        Raises:
            ContainerRuntimeError: If creation failed for another reason.
        """
        try:
            existing = self._client.networks.list(names=[name])
            if any(network.name == name for network in existing):
                return False
            self._client.networks.create(name, driver="bridge")
        except APIError as e:
            if _is_conflict(e):
                return False
            raise ContainerRuntimeError("network create", name, str(e)) from e
        except DockerException as e:
            raise ContainerRuntimeError("network create", name, str(e)) from e
        return True

    def remove_network(self, name: str) -> bool:
        """Remove a network.

        Returns:
            True if removed, False if it did not exist.

        Raises:
            ContainerRuntimeError: If the engine refused (e.g. still in use).
        """
        try:
            self._client.networks.get(name).remove()
        except NotFound:
            return False
        except DockerException as e:
            raise ContainerRuntimeError("network rm", name, str(e)) from e
        return True

    def prune_networks(self) -> list[str]:
        """Remove every network not used by a container.

        Returns:
            Names of the removed networks.
        """
        try:
            result = self._client.networks.prune()
        except DockerException as e:
            raise ContainerRuntimeError("network prune", "-", str(e)) from e
        return list((result or {}).get("NetworksDeleted") or [])

    # =========================================================================
    # Containers
    # =========================================================================

    def run_container(self, spec: ContainerSpec) -> str:
        """Start a detached container.

        Returns:
            The new container id.

        Raises:
            ContainerRuntimeError: If the engine could not create or start it.
        """
        logger.debug("Running container %s from %s", spec.name, spec.image)
        try:
            container = self._client.containers.run(
                image=spec.image,
                name=spec.name,
                network=spec.network,
                ports=spec.ports,
                volumes={
                    host: {"bind": bind, "mode": "rw"}
                    for host, bind in spec.volumes.items()
                },
                environment=spec.environment,
                detach=True,
                tty=True,
                auto_remove=spec.auto_remove,
            )
        except DockerException as e:
            raise ContainerRuntimeError("run", spec.name, str(e)) from e
        return container.id

    def stop_container(self, name: str, timeout: Optional[int] = None) -> bool:
        """Stop a running container.

        Args:
            name: Container name.
            timeout: Seconds to wait before killing. None uses the engine default.

        Returns:
            True if stopped, False if the container does not exist.

        Raises:
            ContainerRuntimeError: If the engine reported another failure.
        """
        try:
            container = self._get_container(name)
            if container is None:
                return False
            if timeout is None:
                container.stop()
            else:
                container.stop(timeout=timeout)
        except NotFound:
            return False
        except DockerException as e:
            raise ContainerRuntimeError("stop", name, str(e)) from e
        return True

    def remove_container(self, name: str) -> bool:
        """Remove a stopped container.

        Returns:
            True if removed, False if the container does not exist.

        Raises:
            ContainerRuntimeError: If the engine refused (e.g. still running).
        """
        try:
            container = self._get_container(name)
            if container is None:
                return False
            container.remove()
        except NotFound:
            return False
        except DockerException as e:
            raise ContainerRuntimeError("container rm", name, str(e)) from e
        return True

    def running_container_names(self) -> set[str]:
        """Return names of running containers, or an empty set if unavailable."""
        try:
            return {container.name for container in self._client.containers.list()}
        except DockerException as e:
            logger.warning("Cannot list running containers: %s", e)
            return set()

    # =========================================================================
    # Images
    # =========================================================================

    def pull_image(self, image: str) -> None:
        """Pull an image reference such as "postgres:17.4".

        Raises:
            ContainerRuntimeError: If the pull failed.
        """
        repository, tag = parse_repository_tag(image)
        try:
            self._client.images.pull(repository, tag=tag or "latest")
        except DockerException as e:
            raise ContainerRuntimeError("pull", image, str(e)) from e
