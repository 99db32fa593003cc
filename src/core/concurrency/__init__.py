"""
Concurrency — политика параллелизма и примитивы fan-out.
"""

from .parallel_tasks import (
    DEFAULT_POLICY,
    PARALLEL_PROCESSOR_THRESHOLD,
    SMALL_ARRAY_SIZE_LIMIT,
    ConcurrencyPolicy,
    ParallelSettings,
    available_parallelism,
    parallel_for,
    parallel_for_async,
    partition_range,
    resolve_policy,
    run_in_background,
    yield_control,
)

__all__ = [
    # Constants
    "DEFAULT_POLICY",
    "PARALLEL_PROCESSOR_THRESHOLD",
    "SMALL_ARRAY_SIZE_LIMIT",
    # Types
    "ConcurrencyPolicy",
    "ParallelSettings",
    # Functions
    "available_parallelism",
    "parallel_for",
    "parallel_for_async",
    "partition_range",
    "resolve_policy",
    "run_in_background",
    "yield_control",
]
