"""fail2ban control."""

from __future__ import annotations

import re

from hostkeeper.collaborators.base import CommandRunner, ServiceManager

_JAIL_COUNT = re.compile(r"Number of jail:\s*(\d+)")


class Fail2banControl:
    """Intrusion-prevention control backed by ``fail2ban-client``."""

    def __init__(self, runner: CommandRunner, services: ServiceManager, service: str = "fail2ban") -> None:
        self._runner = runner
        self._services = services
        self._service = service

    def is_installed(self) -> bool:
        return self._runner.which("fail2ban-client")

    def status(self) -> tuple[bool, int]:
        if not self._services.is_active(self._service):
            return False, 0
        result = self._runner.run(["fail2ban-client", "status"])
        match = _JAIL_COUNT.search(result.stdout) if result.ok else None
        return True, int(match.group(1)) if match else 0

    def test_config(self) -> bool:
        return self._runner.run(["fail2ban-client", "-t"]).ok

    def restart(self) -> bool:
        return self._services.restart(self._service)
