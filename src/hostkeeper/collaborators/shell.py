"""Subprocess-backed command runner."""

from __future__ import annotations

import os
import shutil
import subprocess

from hostkeeper.collaborators.base import CommandResult
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.shell")


class SubprocessRunner:
    """Runs commands with ``subprocess.run``.

    No timeout is imposed: long-running tools (package installs, certificate
    issuance) rely on their own timeouts.

    Example:
        runner = SubprocessRunner()
        result = runner.run(["nginx", "-t"])
        if not result.ok:
            print(result.output)
    """

    def run(
        self,
        args: list[str],
        input: str | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run a command and capture its output."""
        logger.debug(f"Running: {' '.join(args)}")
        full_env = None
        if env:
            full_env = {**os.environ, **env}

        try:
            completed = subprocess.run(
                args,
                input=input,
                capture_output=True,
                text=True,
                env=full_env,
            )
        except FileNotFoundError:
            return CommandResult(args=args, returncode=127, stderr=f"{args[0]}: command not found")

        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def which(self, name: str) -> bool:
        """Check whether a command is on PATH."""
        return shutil.which(name) is not None
