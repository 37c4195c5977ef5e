"""Collaborator protocols and shared types.

The core never talks to system tools directly. Each tool is reached through
one of the protocols below; production binds the process-invoking adapters in
this package and tests bind fakes.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Result of running an external command."""

    model_config = {"frozen": True}

    args: list[str] = Field(description="Command line that was run")
    returncode: int = Field(description="Process exit status")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined output, for error messages."""
        return (self.stdout + self.stderr).strip()


class DiskUsage(BaseModel):
    """Filesystem usage of one mount."""

    model_config = {"frozen": True}

    total: str = Field(description="Total size, formatted")
    used: str = Field(description="Used size, formatted")
    free: str = Field(description="Available size, formatted")
    percent: int = Field(description="Used percent, 0-100")


class MemoryUsage(BaseModel):
    """Physical memory usage."""

    model_config = {"frozen": True}

    total: str = Field(description="Total memory, formatted")
    used: str = Field(description="Used memory, formatted")
    percent: int = Field(description="Used percent, 0-100")


class CertificateOutcome(BaseModel):
    """Result of a certificate issuance attempt."""

    model_config = {"frozen": True}

    success: bool = Field(description="Certificate was issued and installed")
    detail: str = Field(default="", description="Cause of failure or tool summary")


@runtime_checkable
class CommandRunner(Protocol):
    """Runs external commands."""

    def run(
        self,
        args: list[str],
        input: str | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run a command to completion and capture its output.

        Never raises on a non-zero exit status; a missing executable is
        reported as exit status 127.
        """
        ...

    def which(self, name: str) -> bool:
        """Check whether a command is on PATH."""
        ...


@runtime_checkable
class ServiceManager(Protocol):
    """Controls system services."""

    def is_enabled(self, service: str) -> bool: ...

    def is_active(self, service: str) -> bool: ...

    def enable(self, service: str) -> bool: ...

    def start(self, service: str) -> bool: ...

    def restart(self, service: str) -> bool: ...

    def reload(self, service: str) -> bool: ...


@runtime_checkable
class PackageManager(Protocol):
    """Installs and inspects system packages."""

    def is_available(self) -> bool:
        """Whether this package manager exists on the host."""
        ...

    def is_installed(self, package: str) -> bool: ...

    def install(self, packages: list[str]) -> bool: ...

    def update_index(self) -> bool: ...

    def upgrade(self) -> bool: ...

    def install_from_script(self, url: str) -> bool:
        """Download and run a vendor install script."""
        ...


@runtime_checkable
class WebServer(Protocol):
    """Web server control."""

    def validate_config(self) -> bool:
        """Run the server's configuration syntax check."""
        ...

    def reload(self) -> bool: ...


@runtime_checkable
class CertificateClient(Protocol):
    """Certificate authority client."""

    def issue(self, domain: str, email: str) -> CertificateOutcome:
        """Obtain and install a certificate non-interactively."""
        ...

    def expiry(self, cert_path: str) -> str | None:
        """Expiry date of an installed certificate, as printed by the tool."""
        ...


@runtime_checkable
class ContainerRuntime(Protocol):
    """Container runtime control."""

    def is_available(self) -> bool: ...

    def prune(self, resource_class: str) -> str:
        """Prune one resource class and return the reclaimed size, formatted.

        Resource classes: containers, images, volumes, build_cache, networks.
        """
        ...

    def counts(self) -> dict[str, int]:
        """Number of images, containers and volumes."""
        ...


@runtime_checkable
class Firewall(Protocol):
    """Host firewall control."""

    def is_installed(self) -> bool: ...

    def is_active(self) -> bool: ...

    def default_policies(self) -> dict[str, str]:
        """Current defaults, e.g. ``{"incoming": "deny", "outgoing": "allow"}``."""
        ...

    def set_default(self, direction: str, policy: str) -> bool: ...

    def allow(self, port: int, proto: str = "tcp", comment: str | None = None) -> bool: ...

    def delete_rule(self, key: str) -> bool:
        """Remove an allow rule given as ``port/proto``."""
        ...

    def list_rules(self) -> list[str]:
        """Allowed rules as ``port/proto`` keys."""
        ...

    def enable(self) -> bool: ...


@runtime_checkable
class IntrusionPrevention(Protocol):
    """Intrusion-prevention daemon control."""

    def is_installed(self) -> bool: ...

    def status(self) -> tuple[bool, int]:
        """Whether the daemon is active and how many jails it runs."""
        ...

    def test_config(self) -> bool: ...

    def restart(self) -> bool: ...


@runtime_checkable
class Scheduler(Protocol):
    """Host task scheduler."""

    def list_entries(self) -> list[str]:
        """Current entries, one per line.

        Raises:
            ProbeError: If the listing cannot be read
        """
        ...

    def append_entry(self, entry: str) -> bool:
        """Append one entry, keeping existing ones."""
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """External notification endpoint."""

    def deliver(self, payload: dict[str, Any]) -> None:
        """Send a payload.

        Raises:
            DeliveryError: If the payload could not be delivered
        """
        ...


@runtime_checkable
class HostProbe(Protocol):
    """Reads host resource usage."""

    def disk_usage(self, path: str = "/") -> DiskUsage: ...

    def cpu_percent(self) -> int: ...

    def memory(self) -> MemoryUsage: ...
