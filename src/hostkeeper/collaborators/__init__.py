"""Collaborator interfaces and production adapters."""

from hostkeeper.collaborators.base import (
    CertificateClient,
    CertificateOutcome,
    CommandResult,
    CommandRunner,
    ContainerRuntime,
    DiskUsage,
    Firewall,
    HostProbe,
    IntrusionPrevention,
    MemoryUsage,
    NotificationSink,
    PackageManager,
    Scheduler,
    ServiceManager,
    WebServer,
)
from hostkeeper.collaborators.slack import SlackWebhookSink
from hostkeeper.collaborators.system import HostCollaborators

__all__ = [
    # Protocols
    "CertificateClient",
    "CommandRunner",
    "ContainerRuntime",
    "Firewall",
    "HostProbe",
    "IntrusionPrevention",
    "NotificationSink",
    "PackageManager",
    "Scheduler",
    "ServiceManager",
    "WebServer",
    # Types
    "CertificateOutcome",
    "CommandResult",
    "DiskUsage",
    "MemoryUsage",
    # Adapters
    "HostCollaborators",
    "SlackWebhookSink",
]
