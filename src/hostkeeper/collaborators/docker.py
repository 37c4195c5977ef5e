"""Docker container runtime control."""

from __future__ import annotations

from typing import Any

from hostkeeper.utils.errors import ApplyError, ProbeError
from hostkeeper.utils.logging import get_logger
from hostkeeper.utils.units import ZERO_SIZE, human_size

logger = get_logger("collaborators.docker")

PRUNE_CLASSES = ("containers", "images", "volumes", "build_cache", "networks")


class DockerRuntime:
    """Container runtime backed by the Docker SDK and the local daemon.

    Reclaimed space leaves this adapter as a formatted string; callers never
    do arithmetic on it.

    Example:
        runtime = DockerRuntime()
        print(runtime.counts())
        print(runtime.prune("images"))
    """

    def __init__(self) -> None:
        self._client: Any = None

    @property
    def client(self) -> Any:
        """Get the Docker client, creating it if necessary."""
        if self._client is None:
            import docker

            try:
                self._client = docker.from_env()
            except docker.errors.DockerException as e:
                raise ProbeError(f"Failed to connect to Docker daemon: {e}")
        return self._client

    def is_available(self) -> bool:
        """Check that the daemon answers."""
        try:
            self.client.ping()
            return True
        except Exception as e:
            logger.debug(f"Docker daemon not available: {e}")
            return False

    def prune(self, resource_class: str) -> str:
        """Prune one resource class.

        Images are pruned including unused tagged images, like
        ``docker image prune -a``.

        Raises:
            ApplyError: If the daemon rejects the prune
            ValueError: For an unknown resource class
        """
        if resource_class not in PRUNE_CLASSES:
            raise ValueError(f"Unknown resource class: {resource_class}")

        try:
            if resource_class == "containers":
                result = self.client.containers.prune()
            elif resource_class == "images":
                result = self.client.images.prune(filters={"dangling": False})
            elif resource_class == "volumes":
                result = self.client.volumes.prune()
            elif resource_class == "build_cache":
                result = self.client.api.prune_builds()
            else:
                self.client.networks.prune()
                return ZERO_SIZE
        except ProbeError as e:
            raise ApplyError(e.message, resource_id=resource_class)
        except Exception as e:
            raise ApplyError(f"Failed to prune {resource_class}: {e}", resource_id=resource_class)

        reclaimed = (result or {}).get("SpaceReclaimed") or 0
        return human_size(reclaimed)

    def counts(self) -> dict[str, int]:
        """Count images, containers (all states) and volumes.

        Raises:
            ProbeError: If the daemon cannot be queried
        """
        try:
            return {
                "images": len(self.client.images.list()),
                "containers": len(self.client.containers.list(all=True)),
                "volumes": len(self.client.volumes.list()),
            }
        except ProbeError:
            raise
        except Exception as e:
            raise ProbeError(f"Failed to query Docker: {e}")
