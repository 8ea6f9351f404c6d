from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

_BYTES_PER_SAMPLE = 8
_DEFAULT_AVAILABLE_BYTES = 2 * 1024 * 1024 * 1024

_AUTO_MAX_WORKERS = 8
"""Ceiling for auto-detection; trials are short and GIL-bound."""


def available_memory_bytes() -> int:
    """Return available system memory in bytes.

    Reads ``/proc/meminfo`` and falls back to a conservative 2 GiB.
    """
    try:
        with open("/proc/meminfo") as f:
            for line in f:
                if line.startswith("MemAvailable:"):
                    return int(line.split()[1]) * 1024  # kB -> bytes
    except (OSError, ValueError, IndexError):
        logger.debug("Could not read /proc/meminfo; assuming 2 GiB available.")
    return _DEFAULT_AVAILABLE_BYTES


def compute_max_workers(
    dataset_size: int,
    memory_fraction: float = 0.25,
    max_workers: int | None = None,
) -> int:
    """Compute a safe number of parallel trial workers.

    Each worker materialises one dataset of ``dataset_size`` float64
    samples, so the memory budget is
    ``available * memory_fraction / (dataset_size * 8)``. The result is
    clamped to ``[1, min(cpu_count, _AUTO_MAX_WORKERS)]`` and optionally
    capped by *max_workers*.
    """
    per_worker = dataset_size * _BYTES_PER_SAMPLE
    if per_worker > 0:
        budget = int(available_memory_bytes() * memory_fraction / per_worker)
    else:
        budget = 1
    cpu_count = os.cpu_count() or 1
    workers = max(1, min(budget, cpu_count, _AUTO_MAX_WORKERS))
    if max_workers is not None:
        workers = min(workers, max(1, max_workers))
    logger.debug(
        "Resolved %d workers for datasets of %d samples.", workers, dataset_size
    )
    return workers
