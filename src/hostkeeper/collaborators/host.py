"""Linux host resource probe."""

from __future__ import annotations

import shutil
import time
from pathlib import Path

from hostkeeper.collaborators.base import DiskUsage, MemoryUsage
from hostkeeper.utils.units import human_size_binary


class LinuxHostProbe:
    """Reads disk, CPU and memory usage from the local Linux host."""

    def __init__(self, proc_root: Path | str = "/proc", cpu_sample_seconds: float = 0.5) -> None:
        self._proc = Path(proc_root)
        self._cpu_sample = cpu_sample_seconds

    def disk_usage(self, path: str = "/") -> DiskUsage:
        usage = shutil.disk_usage(path)
        # df computes percent over used + available, not total
        denominator = usage.used + usage.free
        percent = round(usage.used * 100 / denominator) if denominator else 0
        return DiskUsage(
            total=human_size_binary(usage.total),
            used=human_size_binary(usage.used),
            free=human_size_binary(usage.free),
            percent=min(100, max(0, percent)),
        )

    def _cpu_times(self) -> tuple[int, int]:
        """Return (idle, total) jiffies from the aggregate cpu line."""
        first = (self._proc / "stat").read_text().splitlines()[0]
        fields = [int(v) for v in first.split()[1:]]
        idle = fields[3] + (fields[4] if len(fields) > 4 else 0)
        return idle, sum(fields)

    def cpu_percent(self) -> int:
        idle_a, total_a = self._cpu_times()
        time.sleep(self._cpu_sample)
        idle_b, total_b = self._cpu_times()
        total = total_b - total_a
        if total <= 0:
            return 0
        return round((1 - (idle_b - idle_a) / total) * 100)

    def memory(self) -> MemoryUsage:
        info: dict[str, int] = {}
        for line in (self._proc / "meminfo").read_text().splitlines():
            name, _, rest = line.partition(":")
            parts = rest.split()
            if parts and parts[0].isdigit():
                info[name] = int(parts[0]) * 1024

        total = info.get("MemTotal", 0)
        available = info.get("MemAvailable", info.get("MemFree", 0))
        used = max(0, total - available)
        percent = round(used * 100 / total) if total else 0
        return MemoryUsage(
            total=human_size_binary(total),
            used=human_size_binary(used),
            percent=percent,
        )
