"""systemd service control."""

from hostkeeper.collaborators.base import CommandRunner
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.systemd")


class SystemdServices:
    """Service manager backed by ``systemctl``."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def _systemctl(self, *args: str) -> bool:
        result = self._runner.run(["systemctl", *args])
        if not result.ok:
            logger.debug(f"systemctl {' '.join(args)} failed: {result.output}")
        return result.ok

    def is_enabled(self, service: str) -> bool:
        return self._systemctl("is-enabled", "--quiet", service)

    def is_active(self, service: str) -> bool:
        return self._systemctl("is-active", "--quiet", service)

    def enable(self, service: str) -> bool:
        logger.info(f"Enabling {service}")
        return self._systemctl("enable", service)

    def start(self, service: str) -> bool:
        logger.info(f"Starting {service}")
        return self._systemctl("start", service)

    def restart(self, service: str) -> bool:
        logger.info(f"Restarting {service}")
        return self._systemctl("restart", service)

    def reload(self, service: str) -> bool:
        logger.info(f"Reloading {service}")
        return self._systemctl("reload", service)
