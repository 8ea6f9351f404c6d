from __future__ import annotations

import pytest
from pydantic import ValidationError

from p2lens.models import (
    ConvergencePoint,
    MarkerAdjustment,
    MarkerSnapshot,
    TrialResult,
)


def make_markers() -> MarkerSnapshot:
    return MarkerSnapshot(min=1.0, q1=2.0, median=3.0, q3=4.0, max=5.0)


def test_marker_snapshot_as_tuple() -> None:
    assert make_markers().as_tuple() == (1.0, 2.0, 3.0, 4.0, 5.0)


def test_marker_snapshot_is_frozen() -> None:
    markers = make_markers()

    with pytest.raises(ValidationError):
        markers.median = 10.0  # type: ignore[misc]


def test_marker_snapshot_is_strict() -> None:
    with pytest.raises(ValidationError):
        MarkerSnapshot(min="1", q1=2.0, median=3.0, q3=4.0, max=5.0)  # type: ignore[arg-type]


def test_marker_adjustment_rejects_unknown_method() -> None:
    with pytest.raises(ValidationError):
        MarkerAdjustment(
            count=7,
            index=2,
            step=1,
            method="cubic",  # type: ignore[arg-type]
            old_value=1.0,
            new_value=2.0,
            old_position=3.0,
            new_position=4.0,
        )


def test_models_forbid_extra_fields() -> None:
    with pytest.raises(ValidationError):
        TrialResult.model_validate(
            {"iteration": 1, "estimate": 1.0, "running_mean": 1.0, "extra": 1}
        )


def test_convergence_point_round_trips_through_dump() -> None:
    point = ConvergencePoint(
        count=100,
        markers=make_markers(),
        estimate=3.0,
        exact=3.1,
        abs_error=0.1,
        rel_error=0.1 / 3.1,
    )

    assert ConvergencePoint.model_validate(point.model_dump()) == point
