"""Auxiliary status checks of the hardening controls."""

from __future__ import annotations

from pathlib import Path

from hostkeeper.collaborators.system import HostCollaborators
from hostkeeper.models.status import ControlState, StatusCheckResult
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)


class StatusChecker:
    """Reports whether each hardening control is installed and active.

    Read-only. Every check yields a result; a control that is not healthy
    carries a warning for the report.
    """

    def __init__(
        self,
        collaborators: HostCollaborators,
        sysctl_file: Path | str = "/etc/sysctl.d/99-security.conf",
    ) -> None:
        self._c = collaborators
        self._sysctl_file = Path(sysctl_file)

    def collect(self) -> list[StatusCheckResult]:
        """Run every check in report order."""
        results = [
            self.check_firewall(),
            self.check_intrusion_prevention(),
            self.check_auto_updates(),
            self.check_kernel_hardening(),
            self.check_container_runtime(),
        ]
        unhealthy = [r.name for r in results if not r.healthy]
        if unhealthy:
            logger.info(f"Controls needing attention: {', '.join(unhealthy)}")
        return results

    def check_firewall(self) -> StatusCheckResult:
        firewall = self._c.firewall
        if not firewall.is_installed():
            return StatusCheckResult(
                name="UFW",
                state=ControlState.MISSING,
                detail="Not installed",
                warning="UFW is not installed",
            )
        if firewall.is_active():
            return StatusCheckResult(name="UFW", state=ControlState.INSTALLED, detail="Active")
        return StatusCheckResult(
            name="UFW",
            state=ControlState.DISABLED,
            detail="Inactive",
            warning="UFW firewall is not active",
        )

    def check_intrusion_prevention(self) -> StatusCheckResult:
        ips = self._c.intrusion_prevention
        if not ips.is_installed():
            return StatusCheckResult(
                name="fail2ban",
                state=ControlState.MISSING,
                detail="Not installed",
                warning="fail2ban is not installed",
            )
        active, jails = ips.status()
        if active:
            return StatusCheckResult(
                name="fail2ban",
                state=ControlState.INSTALLED,
                detail=f"Running ({jails} jails)",
            )
        return StatusCheckResult(
            name="fail2ban",
            state=ControlState.DISABLED,
            detail="Stopped",
            warning="fail2ban is not running",
        )

    def check_auto_updates(self) -> StatusCheckResult:
        if not self._c.packages.is_installed("unattended-upgrades"):
            return StatusCheckResult(
                name="AutoUpdate",
                state=ControlState.MISSING,
                detail="Not installed",
                warning="unattended-upgrades is not installed",
            )
        if self._c.services.is_active("unattended-upgrades"):
            return StatusCheckResult(name="AutoUpdate", state=ControlState.INSTALLED, detail="Enabled")
        return StatusCheckResult(
            name="AutoUpdate",
            state=ControlState.DISABLED,
            detail="Disabled",
            warning="Auto-updates service is not running",
        )

    def check_kernel_hardening(self) -> StatusCheckResult:
        if self._sysctl_file.is_file():
            return StatusCheckResult(name="Sysctl", state=ControlState.INSTALLED, detail="Hardened")
        return StatusCheckResult(
            name="Sysctl",
            state=ControlState.MISSING,
            detail="Default",
            warning="Kernel hardening not applied",
        )

    def check_container_runtime(self) -> StatusCheckResult:
        if not self._c.runner.which("docker"):
            return StatusCheckResult(
                name="Docker",
                state=ControlState.MISSING,
                detail="Not installed",
                warning="Docker is not installed",
            )
        if self._c.services.is_active("docker"):
            return StatusCheckResult(name="Docker", state=ControlState.INSTALLED, detail="Running")
        return StatusCheckResult(
            name="Docker",
            state=ControlState.DISABLED,
            detail="Stopped",
            warning="Docker service is not running",
        )
