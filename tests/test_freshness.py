"""Tests for the shared freshness window."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from weather_resolver.freshness import FRESHNESS_WINDOW, describe_age, is_expired, is_fresh

NOW = datetime(2026, 6, 4, 12, 0, tzinfo=UTC)


def test_window_is_thirty_minutes() -> None:
    assert FRESHNESS_WINDOW == timedelta(minutes=30)


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(0), True),
        (timedelta(minutes=10), True),
        (timedelta(minutes=29, seconds=59), True),
        (timedelta(minutes=30), False),
        (timedelta(minutes=31), False),
    ],
)
def test_is_fresh_boundary(age: timedelta, expected: bool) -> None:
    assert is_fresh(NOW - age, NOW) is expected
    assert is_expired(NOW - age, NOW) is not expected


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = datetime(2026, 6, 4, 11, 45)
    assert is_fresh(naive, NOW)


def test_offset_timestamps_compare_on_absolute_time() -> None:
    # 06:45 at UTC-5 is 11:45 UTC; 06:30 is exactly one window old.
    eastern = datetime(2026, 6, 4, 6, 45, tzinfo=timezone(timedelta(hours=-5)))
    assert is_fresh(eastern, NOW)
    assert not is_fresh(datetime(2026, 6, 4, 6, 30, tzinfo=timezone(timedelta(hours=-5))), NOW)


@pytest.mark.parametrize(
    ("age", "text"),
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=2, minutes=10), "2 hours ago"),
        (timedelta(days=3), "3 days ago"),
    ],
)
def test_describe_age(age: timedelta, text: str) -> None:
    assert describe_age(NOW - age, NOW) == text
