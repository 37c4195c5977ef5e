"""Cleanup report models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from hostkeeper.models.metrics import MetricDiff
from hostkeeper.models.status import StatusCheckResult
from hostkeeper.utils.units import ZERO_SIZE

# Resource classes the prune step reports reclaimed space for
RECLAIM_CLASSES = ("containers", "images", "volumes", "build_cache")


class SeverityBand(str, Enum):
    """Disk usage band relative to the configured threshold."""

    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


class ScheduleOutcome(str, Enum):
    """Result of ensuring the recurring registration."""

    ALREADY_REGISTERED = "already_registered"
    JUST_ADDED = "just_added"
    FAILED = "failed"


class MutationOutcome(BaseModel):
    """What the mutating step of the pipeline did."""

    model_config = {"frozen": True}

    skipped: bool = Field(default=False, description="Step was disabled by policy")
    status: str = Field(default="Done", description="Short status text")
    reclaimed: dict[str, str] = Field(
        default_factory=lambda: {name: ZERO_SIZE for name in RECLAIM_CLASSES},
        description="Reclaimed size per resource class, pre-formatted",
    )
    warnings: list[str] = Field(default_factory=list, description="Non-fatal problems")

    @classmethod
    def skipped_by_policy(cls) -> "MutationOutcome":
        """Outcome of a disabled step: every reclaimed metric is zero."""
        return cls(skipped=True, status="Disabled")


class ReportSection(BaseModel):
    """One ordered section of a report: a titled table."""

    model_config = {"frozen": True}

    title: str = Field(description="Section title")
    headers: list[str] = Field(default_factory=list, description="Column headers after the label")
    rows: list[list[str]] = Field(default_factory=list, description="Label followed by cell values")


class Report(BaseModel):
    """Delivery-ready cleanup report."""

    model_config = {"frozen": True}

    title: str = Field(default="Docker Cleanup Report", description="Report title")
    server_name: str = Field(description="Host the report describes")
    generated_at: datetime = Field(description="Report timestamp")
    severity: SeverityBand = Field(description="Disk usage band after cleanup")
    threshold: int = Field(description="Disk usage threshold in percent")
    diff: MetricDiff = Field(description="Before/after metrics")
    cleanup: MutationOutcome = Field(description="Mutating step outcome")
    status_checks: list[StatusCheckResult] = Field(default_factory=list, description="Auxiliary checks")
    warnings: list[str] = Field(default_factory=list, description="Accumulated warnings")
    schedule: ScheduleOutcome = Field(description="Recurring registration outcome")
    sections: list[ReportSection] = Field(default_factory=list, description="Ordered rendering sections")

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0
