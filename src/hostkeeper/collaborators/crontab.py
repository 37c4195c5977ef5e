"""crontab-backed task scheduler."""

from hostkeeper.collaborators.base import CommandRunner
from hostkeeper.utils.errors import ProbeError
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.crontab")


class CrontabScheduler:
    """Scheduler backed by the invoking user's crontab."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def list_entries(self) -> list[str]:
        result = self._runner.run(["crontab", "-l"])
        if result.ok:
            return [line for line in result.stdout.splitlines() if line.strip()]
        # An empty crontab is reported as an error by cron
        if "no crontab" in result.stderr.lower():
            return []
        raise ProbeError(f"Cannot read crontab: {result.output}")

    def append_entry(self, entry: str) -> bool:
        try:
            existing = self.list_entries()
        except ProbeError as e:
            logger.error(e.message)
            return False
        content = "\n".join([*existing, entry]) + "\n"
        result = self._runner.run(["crontab", "-"], input=content)
        if not result.ok:
            logger.error(f"Failed to install crontab: {result.output}")
        return result.ok
