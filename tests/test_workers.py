from __future__ import annotations

from unittest.mock import patch

from p2lens.workers import compute_max_workers


def test_low_memory_reduces_workers() -> None:
    with patch("p2lens.workers.available_memory_bytes", return_value=1024 * 1024):
        assert compute_max_workers(dataset_size=10_000_000) == 1


def test_max_workers_caps_result() -> None:
    with patch(
        "p2lens.workers.available_memory_bytes", return_value=64 * 1024**3
    ):
        assert compute_max_workers(dataset_size=1000, max_workers=1) == 1


def test_workers_are_at_least_one() -> None:
    assert compute_max_workers(dataset_size=0) >= 1
    assert compute_max_workers(dataset_size=10_000, max_workers=0) == 1
