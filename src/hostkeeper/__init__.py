"""hostkeeper: idempotent web host provisioning, hardening and cleanup.

This package automates three host-administration tasks on Debian and Ubuntu
servers:

- **Site provisioning**: nginx server blocks, Let's Encrypt certificates and
  a renewal schedule per domain
- **Host hardening**: firewall, fail2ban, SSH brute-force slowdown, automatic
  security updates, kernel network hardening and an optional Docker engine
- **Container cleanup**: prune unused Docker resources between two metric
  snapshots and deliver the before/after report to Slack

Every change goes through the reconciler, which probes first and only acts on
resources that are not already in their desired state.

Usage:
    # Library API
    from hostkeeper import HostCollaborators, Reconciler, ManagedResource, SiteSpec
    from hostkeeper.core import SiteHandler

    collaborators = HostCollaborators.from_system()
    reconciler = Reconciler({ResourceKind.SITE_CONFIG: SiteHandler(collaborators.web_server)})
    result = reconciler.reconcile(ManagedResource.site(SiteSpec(domain="example.com")))
    print(result.action_taken)

CLI:
    hostkeeper site example.com www.example.com --email admin@example.com
    hostkeeper harden --ssh-port 22 --extra-ports 8080
    hostkeeper cleanup --setup
    hostkeeper status
"""

__version__ = "0.1.0"

# Core classes
from hostkeeper.core.reconciler import Reconciler, decide
from hostkeeper.core.pipeline import MetricsPipeline
from hostkeeper.core.certificates import CertificateIssuer

# Collaborators
from hostkeeper.collaborators.system import HostCollaborators

# Models (commonly used)
from hostkeeper.models.resource import (
    ManagedResource,
    ResourceKind,
    ScheduledTaskSpec,
    SecurityControlSpec,
    SiteSpec,
)
from hostkeeper.models.reconcile import ActionTaken, Decision, ReconcileResult
from hostkeeper.models.report import Report

# Renderers
from hostkeeper.renderers.base import Renderer, RenderContext, OutputFormat

__all__ = [
    # Version
    "__version__",
    # Core
    "Reconciler",
    "decide",
    "MetricsPipeline",
    "CertificateIssuer",
    # Collaborators
    "HostCollaborators",
    # Models
    "ManagedResource",
    "ResourceKind",
    "ScheduledTaskSpec",
    "SecurityControlSpec",
    "SiteSpec",
    "ActionTaken",
    "Decision",
    "ReconcileResult",
    "Report",
    # Renderers
    "Renderer",
    "RenderContext",
    "OutputFormat",
]
