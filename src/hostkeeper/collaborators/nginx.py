"""nginx control."""

from hostkeeper.collaborators.base import CommandRunner, ServiceManager
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.nginx")


class NginxServer:
    """Web server control backed by the ``nginx`` binary and the service manager."""

    def __init__(self, runner: CommandRunner, services: ServiceManager, service: str = "nginx") -> None:
        self._runner = runner
        self._services = services
        self._service = service

    def validate_config(self) -> bool:
        result = self._runner.run(["nginx", "-t"])
        if not result.ok:
            logger.error(f"nginx configuration test failed: {result.output}")
        return result.ok

    def reload(self) -> bool:
        return self._services.reload(self._service)
