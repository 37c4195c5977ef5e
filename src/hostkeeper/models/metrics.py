"""Metric snapshot and diff models."""

from datetime import datetime
from typing import Union

from pydantic import BaseModel, Field

# Percentages and counts are ints; byte sizes are pre-formatted strings.
MetricValue = Union[int, str]


class MetricSnapshot(BaseModel):
    """A point-in-time capture of a fixed set of named measurements."""

    model_config = {"frozen": True}

    captured_at: datetime = Field(description="Capture timestamp")
    values: dict[str, MetricValue] = Field(default_factory=dict, description="Metric values by name")

    @property
    def keys(self) -> set[str]:
        """Names of the captured metrics."""
        return set(self.values)

    def get(self, name: str, default: MetricValue | None = None) -> MetricValue | None:
        """Get a metric value by name."""
        return self.values.get(name, default)


class MetricDelta(BaseModel):
    """Before and after values of one metric."""

    model_config = {"frozen": True}

    name: str = Field(description="Metric name")
    before: MetricValue = Field(description="Value before the mutating step")
    after: MetricValue = Field(description="Value after the mutating step")

    @property
    def changed(self) -> bool:
        return self.before != self.after


class MetricDiff(BaseModel):
    """Per-metric before/after pairs of two comparable snapshots."""

    model_config = {"frozen": True}

    entries: list[MetricDelta] = Field(default_factory=list, description="Deltas in capture order")

    def get(self, name: str) -> MetricDelta | None:
        """Find the delta for a metric."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def as_dict(self) -> dict[str, tuple[MetricValue, MetricValue]]:
        """Map of metric name to ``(before, after)``."""
        return {e.name: (e.before, e.after) for e in self.entries}

    @property
    def changed_entries(self) -> list[MetricDelta]:
        return [e for e in self.entries if e.changed]
