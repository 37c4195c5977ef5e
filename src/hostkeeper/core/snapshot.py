"""Point-in-time capture of host metrics."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from hostkeeper.collaborators.base import ContainerRuntime, HostProbe
from hostkeeper.models.metrics import MetricSnapshot
from hostkeeper.utils.errors import ProbeError
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)

SNAPSHOT_KEYS = (
    "disk_percent",
    "disk_used",
    "disk_free",
    "disk_total",
    "images",
    "containers",
    "volumes",
    "cpu_percent",
    "memory_used",
    "memory_total",
    "memory_percent",
)


def capture_snapshot(
    host: HostProbe,
    runtime: ContainerRuntime,
    clock: Callable[[], datetime] = datetime.now,
    disk_path: str = "/",
) -> MetricSnapshot:
    """Capture the fixed metric set.

    Reads only; calling it repeatedly has no effect on the host. A runtime
    that is unavailable reports zero images, containers and volumes so the
    key set never changes between captures.
    """
    disk = host.disk_usage(disk_path)
    memory = host.memory()

    try:
        counts = runtime.counts() if runtime.is_available() else {}
    except ProbeError as e:
        logger.warning(f"Container counts unavailable: {e.message}")
        counts = {}

    values = {
        "disk_percent": disk.percent,
        "disk_used": disk.used,
        "disk_free": disk.free,
        "disk_total": disk.total,
        "images": counts.get("images", 0),
        "containers": counts.get("containers", 0),
        "volumes": counts.get("volumes", 0),
        "cpu_percent": host.cpu_percent(),
        "memory_used": memory.used,
        "memory_total": memory.total,
        "memory_percent": memory.percent,
    }
    return MetricSnapshot(captured_at=clock(), values=values)
