# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Docker SDK container runtime."""

from unittest.mock import MagicMock, patch

import pytest
from docker.errors import APIError, DockerException, NotFound

from wbctl.infrastructure.docker.runtime import (
    ContainerRuntime,
    ContainerRuntimeError,
    ContainerSpec,
)


def _api_error(message: str, status_code: int) -> APIError:
    response = MagicMock(status_code=status_code)
    return APIError(message, response=response, explanation=message)


class TestContainerRuntimeInit:
    """Tests for runtime construction."""

    def test_unreachable_engine_raises(self) -> None:
        """Test that a missing Docker Engine is reported as a runtime error."""
        with patch("wbctl.infrastructure.docker.runtime.docker.from_env") as from_env:
            from_env.side_effect = DockerException("Error while fetching server API version")

            with pytest.raises(ContainerRuntimeError) as exc_info:
                ContainerRuntime()

        assert exc_info.value.operation == "connect"


class TestNetworks:
    """Tests for network operations."""

    def test_ensure_network_creates_bridge(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        assert runtime.ensure_network("demo") is True

        docker_client.networks.create.assert_called_once_with("demo", driver="bridge")

    def test_ensure_network_existing(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        """Test that an existing network is not created again."""
        existing = MagicMock()
        existing.name = "demo"
        docker_client.networks.list.return_value = [existing]

        assert runtime.ensure_network("demo") is False
        docker_client.networks.create.assert_not_called()

    def test_ensure_network_prefix_match_is_not_existing(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        """Test that the engine's prefix matching on names is not trusted."""
        other = MagicMock()
        other.name = "demo-2"
        docker_client.networks.list.return_value = [other]

        assert runtime.ensure_network("demo") is True

    def test_ensure_network_conflict_means_exists(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.networks.create.side_effect = _api_error("network demo already exists", 409)

        assert runtime.ensure_network("demo") is False

    def test_ensure_network_other_failure_raises(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.networks.create.side_effect = _api_error("no space left", 500)

        with pytest.raises(ContainerRuntimeError, match="no space left"):
            runtime.ensure_network("demo")

    def test_remove_missing_network(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.networks.get.side_effect = NotFound("network demo not found")

        assert runtime.remove_network("demo") is False

    def test_remove_network_in_use_raises(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.networks.get.return_value.remove.side_effect = _api_error(
            "network has active endpoints", 403
        )

        with pytest.raises(ContainerRuntimeError):
            runtime.remove_network("demo")

    def test_prune_networks(self, runtime: ContainerRuntime, docker_client: MagicMock) -> None:
        docker_client.networks.prune.return_value = {"NetworksDeleted": ["old-a", "old-b"]}

        assert runtime.prune_networks() == ["old-a", "old-b"]

    def test_prune_networks_nothing_deleted(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.networks.prune.return_value = {"NetworksDeleted": None}

        assert runtime.prune_networks() == []


class TestContainers:
    """Tests for container operations."""

    def test_run_container_arguments(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        """Test that a spec maps onto a detached containers.run call."""
        docker_client.containers.run.return_value.id = "abc123"
        spec = ContainerSpec(
            name="demo-postgres",
            image="postgres:17.4",
            network="demo",
            ports={"5432/tcp": 19100},
            volumes={"/mnt/demo/databases": "/var/lib/postgresql/data"},
            environment={"PGDATA": "/var/lib/postgresql/data/pgdata"},
            auto_remove=True,
        )

        assert runtime.run_container(spec) == "abc123"

        docker_client.containers.run.assert_called_once_with(
            image="postgres:17.4",
            name="demo-postgres",
            network="demo",
            ports={"5432/tcp": 19100},
            volumes={"/mnt/demo/databases": {"bind": "/var/lib/postgresql/data", "mode": "rw"}},
            environment={"PGDATA": "/var/lib/postgresql/data/pgdata"},
            detach=True,
            tty=True,
            auto_remove=True,
        )

    def test_run_container_failure(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.run.side_effect = _api_error(
            'Conflict. The container name "/demo" is already in use', 409
        )

        with pytest.raises(ContainerRuntimeError) as exc_info:
            runtime.run_container(ContainerSpec(name="demo", image="x:1", network="demo"))

        assert exc_info.value.operation == "run"
        assert exc_info.value.target == "demo"

    def test_stop_missing_container(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.get.side_effect = NotFound("No such container: demo")

        assert runtime.stop_container("demo") is False

    def test_stop_uses_engine_default_timeout(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        container = docker_client.containers.get.return_value

        assert runtime.stop_container("demo") is True
        container.stop.assert_called_once_with()

    def test_stop_with_grace_period(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        container = docker_client.containers.get.return_value

        runtime.stop_container("demo-postgres", timeout=30)

        container.stop.assert_called_once_with(timeout=30)

    def test_stop_race_with_auto_remove(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        """Test that a container vanishing during stop counts as absent."""
        docker_client.containers.get.return_value.stop.side_effect = NotFound("gone")

        assert runtime.stop_container("demo-postgres") is False

    def test_remove_container(self, runtime: ContainerRuntime, docker_client: MagicMock) -> None:
        container = docker_client.containers.get.return_value

        assert runtime.remove_container("demo") is True
        container.remove.assert_called_once_with()

    def test_remove_running_container_raises(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.get.return_value.remove.side_effect = _api_error(
            "You cannot remove a running container", 409
        )

        with pytest.raises(ContainerRuntimeError):
            runtime.remove_container("demo")

    def test_running_container_names(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        first, second = MagicMock(), MagicMock()
        first.name, second.name = "demo", "demo-postgres"
        docker_client.containers.list.return_value = [first, second]

        assert runtime.running_container_names() == {"demo", "demo-postgres"}

    def test_running_container_names_unavailable(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.list.side_effect = DockerException("connection refused")

        assert runtime.running_container_names() == set()


class TestImages:
    """Tests for image pulls."""

    def test_pull_splits_repository_and_tag(
        self, runtime: ContainerRuntime, docker_client: MagicMock
    ) -> None:
        runtime.pull_image("timroberton/comb:wb-fastr-server-v1.6.7")

        docker_client.images.pull.assert_called_once_with(
            "timroberton/comb", tag="wb-fastr-server-v1.6.7"
        )

    def test_pull_failure(self, runtime: ContainerRuntime, docker_client: MagicMock) -> None:
        docker_client.images.pull.side_effect = NotFound("manifest unknown")

        with pytest.raises(ContainerRuntimeError, match="manifest unknown"):
            runtime.pull_image("postgres:99")
