"""Comparison of two metric snapshots."""

from hostkeeper.models.metrics import MetricDelta, MetricDiff, MetricSnapshot
from hostkeeper.utils.errors import SnapshotMismatchError


def compute_diff(before: MetricSnapshot, after: MetricSnapshot) -> MetricDiff:
    """Pair each metric's before and after values.

    Entries follow the order of ``before``.

    Raises:
        SnapshotMismatchError: If the snapshots do not have the same keys
    """
    if before.keys != after.keys:
        raise SnapshotMismatchError(
            missing_after=before.keys - after.keys,
            missing_before=after.keys - before.keys,
        )
    return MetricDiff(
        entries=[
            MetricDelta(name=name, before=value, after=after.values[name])
            for name, value in before.values.items()
        ]
    )
