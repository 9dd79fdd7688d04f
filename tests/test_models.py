"""Tests for time windows and metric serialization."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from doradash.models import ContributorMetric, RepositoryMetrics, TimeWindow, TrendPoint, weekly_windows


def test_time_window_contains_is_half_open():
    """Verify the start instant is inside the window and the end instant is not."""
    start = datetime(2026, 1, 4, tzinfo=timezone.utc)
    window = TimeWindow(start=start, end=start + timedelta(days=7))

    assert window.contains(start)
    assert window.contains(start + timedelta(days=6, hours=23))
    assert not window.contains(start + timedelta(days=7))
    assert not window.contains(None)
    assert window.days == 7
    assert window.weeks == 1


def test_time_window_rejects_empty_range():
    """Verify a window must end after it starts."""
    moment = datetime(2026, 1, 4, tzinfo=timezone.utc)

    with pytest.raises(ValueError):
        TimeWindow(start=moment, end=moment)


def test_last_days_ends_at_now():
    """Verify last_days builds a window ending at the given instant."""
    now = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)

    window = TimeWindow.last_days(30, now=now)

    assert window.end == now
    assert window.start == now - timedelta(days=30)


def test_week_of_starts_on_sunday_midnight():
    """Verify calendar weeks start on Sunday at 00:00."""
    wednesday = datetime(2026, 1, 14, 15, 45, tzinfo=timezone.utc)
    sunday = datetime(2026, 1, 11, 8, tzinfo=timezone.utc)

    assert TimeWindow.week_of(wednesday).start == datetime(2026, 1, 11, tzinfo=timezone.utc)
    assert TimeWindow.week_of(sunday).start == datetime(2026, 1, 11, tzinfo=timezone.utc)
    assert TimeWindow.week_of(wednesday).end == datetime(2026, 1, 18, tzinfo=timezone.utc)


def test_weekly_windows_are_contiguous_and_oldest_first():
    """Verify weekly trend windows line up back to back."""
    windows = weekly_windows(datetime(2026, 1, 14, tzinfo=timezone.utc), 4)

    assert [window.label() for window in windows] == ["2025-12-21", "2025-12-28", "2026-01-04", "2026-01-11"]
    for earlier, later in zip(windows, windows[1:]):
        assert earlier.end == later.start


def test_repository_metrics_to_dict_uses_exact_field_names():
    """Verify aggregate serialization exposes only the eight camelCase metrics."""
    metrics = RepositoryMetrics(
        deployment_frequency=1.0,
        lead_time=2.0,
        change_failure_rate=3.0,
        time_to_restore=4.0,
        code_quality=5.0,
        impact=6,
        collaboration=7.0,
        growth=8,
    )

    assert metrics.to_dict() == {
        "deploymentFrequency": 1.0,
        "leadTime": 2.0,
        "changeFailureRate": 3.0,
        "timeToRestore": 4.0,
        "codeQuality": 5.0,
        "impact": 6,
        "collaboration": 7.0,
        "growth": 8,
    }


def test_trend_point_to_dict_flattens_contributor_keys():
    """Verify trend rows are keyed by '<login>_<metric>'."""
    scorecard = ContributorMetric(
        name="alice",
        deployment_frequency=1.0,
        lead_time=2.0,
        change_failure_rate=0.0,
        time_to_restore=0.0,
        code_quality=100.0,
        impact=3,
        collaboration=4,
        growth=5,
    )

    row = TrendPoint(date="2026-01-04", contributors={"alice": scorecard}).to_dict()

    assert row["date"] == "2026-01-04"
    assert row["alice_deploymentFrequency"] == 1.0
    assert row["alice_impact"] == 3
    assert "alice_name" not in row
    assert len(row) == 9
