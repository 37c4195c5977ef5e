"""Utility functions for hostkeeper."""

from hostkeeper.utils.hashing import compute_hash, hash_text
from hostkeeper.utils.logging import configure_logging, get_logger, get_logger_with_context
from hostkeeper.utils.errors import (
    HostkeeperError,
    PreconditionError,
    ProbeError,
    ApplyError,
    VerificationError,
    DeliveryError,
    ValidationError,
    ConfigurationError,
    SnapshotMismatchError,
    retry,
    validate_domain,
    validate_email,
    validate_port,
    parse_port_list,
)
from hostkeeper.utils.units import ZERO_SIZE, human_size, human_size_binary
from hostkeeper.utils.config import (
    HostkeeperConfig,
    PathsConfig,
    ScheduleConfig,
    SiteConfig,
    NotifyConfig,
    CleanupSettings,
    load_config,
    save_config,
    load_cleanup_settings,
    save_cleanup_settings,
)

__all__ = [
    # Hashing
    "compute_hash",
    "hash_text",
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "HostkeeperError",
    "PreconditionError",
    "ProbeError",
    "ApplyError",
    "VerificationError",
    "DeliveryError",
    "ValidationError",
    "ConfigurationError",
    "SnapshotMismatchError",
    "retry",
    "validate_domain",
    "validate_email",
    "validate_port",
    "parse_port_list",
    # Units
    "ZERO_SIZE",
    "human_size",
    "human_size_binary",
    # Config
    "HostkeeperConfig",
    "PathsConfig",
    "ScheduleConfig",
    "SiteConfig",
    "NotifyConfig",
    "CleanupSettings",
    "load_config",
    "save_config",
    "load_cleanup_settings",
    "save_cleanup_settings",
]
