# tests/test_progress.py

import pytest

from app.models import Task
from app.task_service import build_points, compute_progress, refresh_derived_fields


def _points(*marks):
    return [{"text": f"p{i}", "completed_by": list(ids)} for i, ids in enumerate(marks)]


def test_no_points_is_zero():
    assert compute_progress([]) == 0


@pytest.mark.parametrize(
    "marks, expected",
    [
        (([], []), 0),
        (([1], []), 50),
        (([1], [2]), 100),
        (([1], [], []), 33),
        (([1], [1], []), 67),
        (([1],) + ([],) * 7, 13),  # 12.5 rounds up
        (([1, 2, 3], []), 50),     # several ticks on one point count once
    ],
)
def test_progress_is_rounded_share_of_ticked_points(marks, expected):
    assert compute_progress(_points(*marks)) == expected


def test_refresh_derived_fields_sets_progress_and_timestamp():
    task = Task(title="t", points=_points([1], []), progress=0)
    refresh_derived_fields(task)
    assert task.progress == 50
    assert task.updated_at is not None

    task.points = []
    refresh_derived_fields(task)
    assert task.progress == 0


def test_build_points_drops_blank_entries():
    points = build_points(["Write outline", "", "   ", "Review"])
    assert points == [
        {"text": "Write outline", "completed_by": []},
        {"text": "Review", "completed_by": []},
    ]
    assert build_points(None) == []
