"""ufw firewall control."""

from __future__ import annotations

import re

from hostkeeper.collaborators.base import CommandRunner
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.ufw")

_ADDED_RULE = re.compile(r"^ufw allow (\d+)(?:/(tcp|udp))?\b")
_DEFAULTS = re.compile(r"Default:\s*(\w+)\s*\(incoming\),\s*(\w+)\s*\(outgoing\)")


class UfwFirewall:
    """Firewall control backed by the ``ufw`` CLI."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_installed(self) -> bool:
        return self._runner.which("ufw")

    def is_active(self) -> bool:
        result = self._runner.run(["ufw", "status"])
        if not result.ok:
            return False
        first = result.stdout.strip().splitlines()[:1]
        return bool(first) and first[0].strip().lower() == "status: active"

    def default_policies(self) -> dict[str, str]:
        result = self._runner.run(["ufw", "status", "verbose"])
        match = _DEFAULTS.search(result.stdout) if result.ok else None
        if not match:
            return {}
        return {"incoming": match.group(1), "outgoing": match.group(2)}

    def set_default(self, direction: str, policy: str) -> bool:
        result = self._runner.run(["ufw", "default", policy, direction])
        return result.ok

    def allow(self, port: int, proto: str = "tcp", comment: str | None = None) -> bool:
        args = ["ufw", "allow", f"{port}/{proto}"]
        if comment:
            args += ["comment", comment]
        result = self._runner.run(args)
        if result.ok:
            logger.info(f"Port {port}/{proto} allowed")
        else:
            logger.error(f"Failed to allow {port}/{proto}: {result.output}")
        return result.ok

    def delete_rule(self, key: str) -> bool:
        result = self._runner.run(["ufw", "--force", "delete", "allow", key])
        if not result.ok:
            logger.error(f"Failed to delete rule {key}: {result.output}")
        return result.ok

    def list_rules(self) -> list[str]:
        """Rules added with ``ufw allow``, active or not."""
        result = self._runner.run(["ufw", "show", "added"])
        rules: list[str] = []
        if not result.ok:
            return rules
        for line in result.stdout.splitlines():
            match = _ADDED_RULE.match(line.strip())
            if match:
                rules.append(f"{match.group(1)}/{match.group(2) or 'tcp'}")
        return rules

    def enable(self) -> bool:
        result = self._runner.run(["ufw", "--force", "enable"])
        return result.ok
