"""Freshness policy shared by authoritative records and cache entries."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

FRESHNESS_WINDOW = timedelta(minutes=30)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def is_fresh(timestamp: datetime, now: datetime) -> bool:
    """Return True if an observation generated at `timestamp` is usable at `now`."""
    return _as_utc(now) - _as_utc(timestamp) < FRESHNESS_WINDOW


def is_expired(timestamp: datetime, now: datetime) -> bool:
    return not is_fresh(timestamp, now)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def describe_age(timestamp: datetime, now: datetime) -> str:
    """Human-readable age of an observation, e.g. 'Just now' or '5 minutes ago'."""
    age_seconds = (_as_utc(now) - _as_utc(timestamp)).total_seconds()
    if age_seconds < 60:
        return "Just now"
    minutes = int(age_seconds // 60)
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    return _plural(hours // 24, "day")
