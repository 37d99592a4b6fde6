"""System metrics source backed by psutil."""

import asyncio
from typing import Protocol

import psutil

from ..errors import SamplingError
from ..models import CpuLoad


class IMetricsSource(Protocol):
    """Source of raw machine signals."""

    async def sample_cpu_load(self) -> CpuLoad:
        """Sample current CPU load (0-100). May raise SamplingError."""
        ...


class PsutilMetricsSource:
    """Samples CPU load with psutil.

    cpu_percent(interval=None) reports usage since the previous call, so the
    constructor primes it once; the first real sample covers the time since
    construction.
    """

    def __init__(self):
        psutil.cpu_percent(interval=None, percpu=True)

    async def sample_cpu_load(self) -> CpuLoad:
        """Sample overall and per-core CPU load."""
        try:
            per_core = await asyncio.to_thread(
                psutil.cpu_percent, interval=None, percpu=True
            )
        except (psutil.Error, OSError) as e:
            raise SamplingError(f"Could not read CPU load: {e}") from e

        if not per_core:
            raise SamplingError("psutil reported no CPU cores")

        overall = sum(per_core) / len(per_core)
        return CpuLoad(overall=overall, per_core=list(per_core))
