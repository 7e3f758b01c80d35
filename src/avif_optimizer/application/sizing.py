"""Concurrency sizing heuristic."""

from typing import Optional

from avif_optimizer.domain.exceptions import ConfigurationError
from avif_optimizer.domain.protocols import IParallelismProvider
from avif_optimizer.infrastructure.system import SystemResources

# Share of currently available memory a batch may plan to use
MEMORY_HEADROOM = 0.75


def recommend_concurrency(
    item_count: int,
    min_concurrency: Optional[int] = None,
    max_concurrency: Optional[int] = None,
    memory_per_item: Optional[int] = None,
    parallelism: Optional[IParallelismProvider] = None
) -> int:
    """
    Recommend a slot count for a batch of ``item_count`` items.

    Starts from the smaller of the host CPU count and the item count, caps it
    so ``slots * memory_per_item`` fits in available memory (never below 1),
    then clamps into ``[min_concurrency or 1, max_concurrency or cpu_count]``.

    Args:
        item_count: Number of items in the batch
        min_concurrency: Lower bound, defaults to 1
        max_concurrency: Upper bound, defaults to the host CPU count
        memory_per_item: Estimated bytes used by one in-flight item
        parallelism: Host resource provider

    Returns:
        Recommended concurrency, at least 1

    Raises:
        ConfigurationError: If the bounds are inconsistent
    """
    parallelism = parallelism or SystemResources()
    cpus = max(1, parallelism.cpu_count())

    lower = 1 if min_concurrency is None else min_concurrency
    # An explicit minimum above the CPU count raises the default ceiling
    upper = max(cpus, lower) if max_concurrency is None else max_concurrency

    if lower < 1:
        raise ConfigurationError(f"min_concurrency must be at least 1, got {lower}")
    if upper < lower:
        raise ConfigurationError(
            f"max_concurrency ({upper}) is lower than min_concurrency ({lower})"
        )

    recommendation = min(cpus, max(item_count, 0))

    if memory_per_item is not None:
        if memory_per_item <= 0:
            raise ConfigurationError(f"memory_per_item must be positive, got {memory_per_item}")
        usable = parallelism.available_memory() * MEMORY_HEADROOM
        recommendation = min(recommendation, max(1, int(usable // memory_per_item)))

    return max(lower, min(recommendation, upper))
