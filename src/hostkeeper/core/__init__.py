"""Core domain logic for hostkeeper.

This module provides the reconciler with its per-kind handlers and the
metrics pipeline used by the cleanup command.
"""

from hostkeeper.core.certificates import CertificateIssuer, CertificateResult
from hostkeeper.core.cleanup import ContainerPrune
from hostkeeper.core.controls import SecurityControlHandler
from hostkeeper.core.diff import compute_diff
from hostkeeper.core.pipeline import MetricsPipeline, PipelineRun
from hostkeeper.core.reconciler import (
    Reconciler,
    ResourceHandler,
    always_override,
    decide,
    never_override,
)
from hostkeeper.core.report import build_report, classify_severity
from hostkeeper.core.schedule import ScheduleHandler, ensure_registration
from hostkeeper.core.site import SiteHandler
from hostkeeper.core.snapshot import capture_snapshot
from hostkeeper.core.status import StatusChecker

__all__ = [
    # Reconciliation
    "Reconciler",
    "ResourceHandler",
    "SecurityControlHandler",
    "ScheduleHandler",
    "SiteHandler",
    "always_override",
    "decide",
    "ensure_registration",
    "never_override",
    # Certificates
    "CertificateIssuer",
    "CertificateResult",
    # Pipeline
    "ContainerPrune",
    "MetricsPipeline",
    "PipelineRun",
    "StatusChecker",
    "build_report",
    "capture_snapshot",
    "classify_severity",
    "compute_diff",
]
