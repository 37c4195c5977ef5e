"""Data models for hostkeeper.

All models are Pydantic BaseModel; records that cross step boundaries are
frozen.
"""

from hostkeeper.models.resource import (
    ControlName,
    FirewallPolicy,
    ManagedResource,
    PortRule,
    ResourceKind,
    ScheduledTaskSpec,
    SecurityControlSpec,
    SiteSpec,
)
from hostkeeper.models.reconcile import (
    ActionTaken,
    ChangeSet,
    Decision,
    Observation,
    ReconcileResult,
)
from hostkeeper.models.metrics import MetricDelta, MetricDiff, MetricSnapshot
from hostkeeper.models.status import ControlState, StatusCheckResult
from hostkeeper.models.report import (
    MutationOutcome,
    Report,
    ReportSection,
    ScheduleOutcome,
    SeverityBand,
)

__all__ = [
    # Resources
    "ControlName",
    "FirewallPolicy",
    "ManagedResource",
    "PortRule",
    "ResourceKind",
    "ScheduledTaskSpec",
    "SecurityControlSpec",
    "SiteSpec",
    # Reconcile
    "ActionTaken",
    "ChangeSet",
    "Decision",
    "Observation",
    "ReconcileResult",
    # Metrics
    "MetricDelta",
    "MetricDiff",
    "MetricSnapshot",
    # Status
    "ControlState",
    "StatusCheckResult",
    # Report
    "MutationOutcome",
    "Report",
    "ReportSection",
    "ScheduleOutcome",
    "SeverityBand",
]
