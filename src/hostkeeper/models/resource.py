"""Managed resource models: what the reconciler is asked to converge."""

from enum import Enum
from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field, model_validator


class ResourceKind(str, Enum):
    """Kind of managed resource."""

    SITE_CONFIG = "site_config"
    SECURITY_CONTROL = "security_control"
    SCHEDULED_TASK = "scheduled_task"


class ControlName(str, Enum):
    """Host components managed as security controls."""

    WEB_SERVER = "web_server"
    CERTIFICATE_CLIENT = "certificate_client"
    FIREWALL = "firewall"
    INTRUSION_PREVENTION = "intrusion_prevention"
    SSH_HARDENING = "ssh_hardening"
    AUTO_UPDATES = "auto_updates"
    KERNEL_HARDENING = "kernel_hardening"
    CONTAINER_RUNTIME = "container_runtime"


class SiteSpec(BaseModel):
    """Desired state of one web site."""

    model_config = {"frozen": True}

    domain: str = Field(description="Server name of the site")
    web_root: Path = Field(default=Path("/var/www"), description="Parent of the site directory")
    index_files: list[str] = Field(
        default_factory=lambda: ["index.html", "index.htm", "index.php"],
        description="nginx index directive",
    )
    php_socket: str | None = Field(
        default="/var/run/php/php-fpm.sock",
        description="php-fpm socket; None omits the PHP location",
    )
    security_headers: bool = Field(default=True, description="Emit security headers")
    owner: str | None = Field(default="www-data", description="Owner of a created web directory")

    @property
    def web_dir(self) -> Path:
        """Document root of the site."""
        return self.web_root / self.domain


class PortRule(BaseModel):
    """A single firewall allow rule."""

    model_config = {"frozen": True}

    port: int = Field(description="Port number")
    proto: str = Field(default="tcp", description="Protocol")
    comment: str | None = Field(default=None, description="Rule comment")

    @property
    def key(self) -> str:
        """Identity of the rule as listed by the firewall."""
        return f"{self.port}/{self.proto}"


class FirewallPolicy(BaseModel):
    """Desired firewall baseline."""

    model_config = {"frozen": True}

    default_incoming: str = Field(default="deny", description="Default incoming policy")
    default_outgoing: str = Field(default="allow", description="Default outgoing policy")
    rules: list[PortRule] = Field(default_factory=list, description="Allow rules")
    required_port: int | None = Field(
        default=None,
        description="Port that must be allowed before the firewall is enabled (SSH)",
    )


class SecurityControlSpec(BaseModel):
    """Desired state of one host security control or component."""

    model_config = {"frozen": True}

    control: ControlName = Field(description="Which control this is")
    packages: list[str] = Field(default_factory=list, description="Packages to install if absent")
    binary: str | None = Field(default=None, description="Command whose presence marks installation")
    installer_url: str | None = Field(
        default=None,
        description="Vendor install script used instead of the package manager",
    )
    service: str | None = Field(default=None, description="Service to enable and run")
    files: dict[str, str] = Field(
        default_factory=dict,
        description="Managed files, path to full content",
    )
    directives_file: str | None = Field(default=None, description="File holding Key Value directives")
    directives: dict[str, str] = Field(default_factory=dict, description="Directives to enforce")
    firewall: FirewallPolicy | None = Field(default=None, description="Firewall baseline")

    @model_validator(mode="after")
    def _directives_need_file(self) -> "SecurityControlSpec":
        if self.directives and not self.directives_file:
            raise ValueError("directives require directives_file")
        return self


class ScheduledTaskSpec(BaseModel):
    """Desired recurring task registration."""

    model_config = {"frozen": True}

    marker: str = Field(description="Unique substring identifying the entry")
    schedule: str = Field(description="Cron schedule expression")
    command: str = Field(description="Command line to run")

    @property
    def entry(self) -> str:
        """The crontab line for this task."""
        return f"{self.schedule} {self.command}"

    @model_validator(mode="after")
    def _marker_in_entry(self) -> "ScheduledTaskSpec":
        if not self.marker:
            raise ValueError("marker cannot be empty")
        if self.marker not in self.entry:
            raise ValueError(f"marker {self.marker!r} must occur in the entry")
        return self


DesiredSpec = Union[SiteSpec, SecurityControlSpec, ScheduledTaskSpec]

_SPEC_TYPES: dict[ResourceKind, type[BaseModel]] = {
    ResourceKind.SITE_CONFIG: SiteSpec,
    ResourceKind.SECURITY_CONTROL: SecurityControlSpec,
    ResourceKind.SCHEDULED_TASK: ScheduledTaskSpec,
}


class ManagedResource(BaseModel):
    """One unit under reconciliation."""

    model_config = {"frozen": True}

    id: str = Field(description="Unique key within the kind")
    kind: ResourceKind = Field(description="Resource kind")
    desired_spec: DesiredSpec = Field(description="Kind-specific desired state")

    @model_validator(mode="after")
    def _spec_matches_kind(self) -> "ManagedResource":
        expected = _SPEC_TYPES[self.kind]
        if not isinstance(self.desired_spec, expected):
            raise ValueError(
                f"{self.kind.value} resource needs {expected.__name__}, "
                f"got {type(self.desired_spec).__name__}"
            )
        return self

    @classmethod
    def site(cls, spec: SiteSpec) -> "ManagedResource":
        """Create a site resource keyed by its domain."""
        return cls(id=spec.domain, kind=ResourceKind.SITE_CONFIG, desired_spec=spec)

    @classmethod
    def control(cls, spec: SecurityControlSpec) -> "ManagedResource":
        """Create a security control resource keyed by its control name."""
        return cls(id=spec.control.value, kind=ResourceKind.SECURITY_CONTROL, desired_spec=spec)

    @classmethod
    def scheduled_task(cls, spec: ScheduledTaskSpec) -> "ManagedResource":
        """Create a scheduled task resource keyed by its marker."""
        return cls(id=spec.marker, kind=ResourceKind.SCHEDULED_TASK, desired_spec=spec)
