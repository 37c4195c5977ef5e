"""Cleanup report assembly.

Everything here is pure: the same inputs always give the same report.
"""

from __future__ import annotations

from datetime import datetime

from hostkeeper.models.metrics import MetricDiff, MetricValue
from hostkeeper.models.report import (
    MutationOutcome,
    Report,
    ReportSection,
    ScheduleOutcome,
    SeverityBand,
)
from hostkeeper.models.status import StatusCheckResult

# Width of the warning band below the threshold, in percentage points
WARNING_MARGIN = 10

SCHEDULE_LABELS = {
    ScheduleOutcome.ALREADY_REGISTERED: "Registered",
    ScheduleOutcome.JUST_ADDED: "Just added",
    ScheduleOutcome.FAILED: "Failed to add",
}

RECLAIM_LABELS = {
    "containers": "Containers",
    "images": "Images",
    "volumes": "Volumes",
    "build_cache": "Cache",
}


def classify_severity(percent: int, threshold: int) -> SeverityBand:
    """Band a disk usage percentage.

    ``threshold`` and above is critical, the ten points below it are a
    warning, anything lower is ok.
    """
    if percent >= threshold:
        return SeverityBand.CRITICAL
    if percent >= threshold - WARNING_MARGIN:
        return SeverityBand.WARNING
    return SeverityBand.OK


def _pair(diff: MetricDiff, name: str, suffix: str = "") -> list[str]:
    entry = diff.get(name)
    if entry is None:
        return ["-", "-"]
    return [f"{entry.before}{suffix}", f"{entry.after}{suffix}"]


def _after(diff: MetricDiff, name: str) -> MetricValue:
    entry = diff.get(name)
    return entry.after if entry is not None else 0


def build_sections(
    diff: MetricDiff,
    cleanup: MutationOutcome,
    status_checks: list[StatusCheckResult],
    schedule: ScheduleOutcome,
) -> list[ReportSection]:
    """Ordered report sections: disk, cleaned, docker, system, security, cron."""
    return [
        ReportSection(
            title="DISK",
            headers=["Before", "After"],
            rows=[
                ["Usage", *_pair(diff, "disk_percent", "%")],
                ["Used", *_pair(diff, "disk_used")],
                ["Free", *_pair(diff, "disk_free")],
            ],
        ),
        ReportSection(
            title="CLEANED",
            rows=[
                [label, cleanup.reclaimed.get(name, "0B")]
                for name, label in RECLAIM_LABELS.items()
            ],
        ),
        ReportSection(
            title="DOCKER",
            headers=["Before", "After"],
            rows=[
                ["Images", *_pair(diff, "images")],
                ["Containers", *_pair(diff, "containers")],
                ["Volumes", *_pair(diff, "volumes")],
            ],
        ),
        ReportSection(
            title="SYSTEM",
            rows=[
                ["CPU", f"{_after(diff, 'cpu_percent')}%"],
                [
                    "RAM",
                    f"{_after(diff, 'memory_used')}/{_after(diff, 'memory_total')} "
                    f"({_after(diff, 'memory_percent')}%)",
                ],
            ],
        ),
        ReportSection(
            title="SECURITY",
            rows=[[check.name, check.detail] for check in status_checks],
        ),
        ReportSection(title="CRON", rows=[["Cron", SCHEDULE_LABELS[schedule]]]),
    ]


def build_report(
    server_name: str,
    threshold: int,
    diff: MetricDiff,
    cleanup: MutationOutcome,
    status_checks: list[StatusCheckResult],
    schedule: ScheduleOutcome,
    generated_at: datetime,
) -> Report:
    """Assemble the delivery-ready report.

    The severity band is taken from disk usage after the mutating step.
    """
    disk_after = _after(diff, "disk_percent")
    percent = disk_after if isinstance(disk_after, int) else 0
    warnings = [*cleanup.warnings, *(c.warning for c in status_checks if c.warning)]

    return Report(
        server_name=server_name,
        generated_at=generated_at,
        severity=classify_severity(percent, threshold),
        threshold=threshold,
        diff=diff,
        cleanup=cleanup,
        status_checks=status_checks,
        warnings=warnings,
        schedule=schedule,
        sections=build_sections(diff, cleanup, status_checks, schedule),
    )
