"""Host resource providers used to size worker pools."""

import os

import psutil

from avif_optimizer.shared.logging import get_logger

logger = get_logger(__name__)

# Used when the interpreter cannot determine the CPU count
FALLBACK_CPU_COUNT = 4


class SystemResources:
    """Reports the CPU count and available memory of the current host."""

    def cpu_count(self) -> int:
        count = os.cpu_count()
        if not count:
            logger.debug(f"CPU count unavailable, assuming {FALLBACK_CPU_COUNT}")
            return FALLBACK_CPU_COUNT
        return count

    def available_memory(self) -> int:
        return int(psutil.virtual_memory().available)


class FixedResources:
    """Parallelism provider with pinned values, for deterministic sizing."""

    def __init__(self, cpus: int, memory: int = 8 * 1024 ** 3):
        if cpus < 1:
            raise ValueError("cpus must be at least 1")
        self._cpus = cpus
        self._memory = memory

    def cpu_count(self) -> int:
        return self._cpus

    def available_memory(self) -> int:
        return self._memory

    def __repr__(self) -> str:
        return f"FixedResources(cpus={self._cpus}, memory={self._memory})"
