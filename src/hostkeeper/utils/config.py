"""Configuration file support for hostkeeper.

Two files are involved:

- the optional tool configuration (YAML), which describes host layout such
  as the web root and nginx directories;
- the cleanup settings file (``KEY=value`` lines), which is the one piece of
  state the cleanup workflow persists between runs. It is written with mode
  0600 because it carries the notification webhook.
"""

from __future__ import annotations

import os
import socket
from datetime import datetime
from pathlib import Path

import httpx
import yaml
from pydantic import BaseModel, Field, field_validator

from hostkeeper.utils.errors import ConfigurationError


class PathsConfig(BaseModel):
    """Filesystem locations on the managed host."""

    web_root: str = Field(default="/var/www", description="Parent of per-domain web directories")
    sites_available: str = Field(
        default="/etc/nginx/sites-available", description="nginx site configuration directory"
    )
    sites_enabled: str = Field(
        default="/etc/nginx/sites-enabled", description="nginx enabled-site link directory"
    )
    letsencrypt_live: str = Field(
        default="/etc/letsencrypt/live", description="certbot live certificate directory"
    )
    cleanup_settings: str = Field(
        default="/etc/hostkeeper/cleanup.conf", description="Persisted cleanup settings file"
    )
    cleanup_log: str = Field(
        default="/var/log/hostkeeper-cleanup.log", description="Durable cleanup run log"
    )
    sysctl_file: str = Field(
        default="/etc/sysctl.d/99-security.conf", description="Kernel hardening drop-in"
    )
    sshd_config: str = Field(default="/etc/ssh/sshd_config", description="sshd configuration")


class ScheduleConfig(BaseModel):
    """Recurring registration settings."""

    cleanup_cron: str = Field(default="0 3 * * *", description="Cleanup schedule")
    renewal_cron: str = Field(default="0 0,12 * * *", description="Certificate renewal schedule")


class SiteConfig(BaseModel):
    """Defaults for provisioned sites."""

    owner: str | None = Field(default="www-data", description="Owner of created web directories")
    php_socket: str | None = Field(
        default="/var/run/php/php-fpm.sock", description="php-fpm socket, None disables PHP"
    )
    security_headers: bool = Field(default=True, description="Emit security headers")


class NotifyConfig(BaseModel):
    """Notification delivery settings."""

    timeout: float = Field(default=10.0, description="Webhook request timeout in seconds")
    max_attempts: int = Field(default=3, description="Delivery attempts before giving up")


class HostkeeperConfig(BaseModel):
    """Main configuration for hostkeeper."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)


def get_config_paths() -> list[Path]:
    """Get possible configuration file paths.

    Returns:
        List of paths to check for configuration files
    """
    paths = []

    # Current directory
    paths.append(Path.cwd() / ".hostkeeper.yaml")
    paths.append(Path.cwd() / "hostkeeper.yaml")

    # Home directory
    home = Path.home()
    paths.append(home / ".hostkeeper.yaml")
    paths.append(home / ".config" / "hostkeeper" / "config.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        paths.append(Path(xdg_config) / "hostkeeper" / "config.yaml")

    # System-wide
    paths.append(Path("/etc/hostkeeper/config.yaml"))

    return paths


def load_config(config_path: Path | str | None = None) -> HostkeeperConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.

    Returns:
        Loaded configuration
    """
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            return _load_config_file(path)
        raise FileNotFoundError(f"Config file not found: {config_path}")

    for path in get_config_paths():
        if path.exists():
            return _load_config_file(path)

    return HostkeeperConfig()


def _load_config_file(path: Path) -> HostkeeperConfig:
    """Load configuration from a specific file."""
    try:
        data = yaml.safe_load(path.read_text())
        if data is None:
            return HostkeeperConfig()
        return HostkeeperConfig.model_validate(data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except Exception as e:
        raise ValueError(f"Failed to load config file: {e}")


def save_config(config: HostkeeperConfig, config_path: Path | str | None = None) -> Path:
    """Save configuration to file.

    Args:
        config: Configuration to save
        config_path: Path to save to. Defaults to ~/.config/hostkeeper/config.yaml

    Returns:
        Path where config was saved
    """
    if config_path is None:
        config_path = Path.home() / ".config" / "hostkeeper" / "config.yaml"
    else:
        config_path = Path(config_path)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_defaults=True)
    config_path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))

    return config_path


class CleanupSettings(BaseModel):
    """Persisted settings of the cleanup workflow."""

    model_config = {"frozen": True}

    server_name: str = Field(default_factory=socket.gethostname, description="Name shown in reports")
    slack_webhook: str | None = Field(default=None, description="Slack incoming webhook URL")
    disk_threshold: int = Field(default=80, description="Disk usage alert threshold in percent")
    enable_prune: bool = Field(default=True, description="Run the prune step")

    @field_validator("server_name", mode="before")
    @classmethod
    def _default_server_name(cls, value: str | None) -> str:
        return value or socket.gethostname()

    @field_validator("slack_webhook", mode="before")
    @classmethod
    def _webhook_url(cls, value: str | None) -> str | None:
        if not value:
            return None
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid Slack webhook URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("Slack webhook URL must be an http(s) URL")
        return value

    @field_validator("disk_threshold")
    @classmethod
    def _threshold_range(cls, value: int) -> int:
        if not 1 <= value <= 100:
            raise ValueError("disk threshold must be between 1 and 100")
        return value


# Settings field -> key in the persisted file
_SETTINGS_KEYS = {
    "slack_webhook": "SLACK_WEBHOOK",
    "server_name": "SERVER_NAME",
    "disk_threshold": "DISK_THRESHOLD",
    "enable_prune": "ENABLE_PRUNE",
}


def parse_key_value(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines.

    Supports:
    - KEY=value
    - KEY="quoted value"
    - # comments
    - Empty lines are ignored
    """
    values: dict[str, str] = {}

    for line in text.splitlines():
        line = line.strip()

        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()

        if value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        elif value.startswith("'") and value.endswith("'"):
            value = value[1:-1]

        values[key] = value

    return values


def load_cleanup_settings(path: Path | str) -> CleanupSettings | None:
    """Load cleanup settings.

    Args:
        path: Settings file path

    Returns:
        Loaded settings, or None when the file does not exist (first run)

    Raises:
        ConfigurationError: If a value is invalid
    """
    path = Path(path)
    if not path.exists():
        return None

    raw = parse_key_value(path.read_text())
    data: dict[str, str] = {}
    for field_name, key in _SETTINGS_KEYS.items():
        if key in raw:
            data[field_name] = raw[key]

    try:
        return CleanupSettings.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid cleanup settings in {path}: {e}", config_key=str(path))


def save_cleanup_settings(settings: CleanupSettings, path: Path | str) -> Path:
    """Write cleanup settings with restrictive permissions.

    Returns:
        Path where settings were saved
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "# hostkeeper cleanup configuration",
        f"# Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        f'SLACK_WEBHOOK="{settings.slack_webhook or ""}"',
        f'SERVER_NAME="{settings.server_name}"',
        f"DISK_THRESHOLD={settings.disk_threshold}",
        f"ENABLE_PRUNE={'true' if settings.enable_prune else 'false'}",
        "",
    ]

    # Create with 0600 before writing the webhook
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write("\n".join(lines))
    os.chmod(path, 0o600)

    return path
