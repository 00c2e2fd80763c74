"""Tests for location normalization and resolution result shapes."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from weather_resolver.models import CacheEntry, Location, ResolutionResult, WeatherRecord


def test_address_is_squished_and_blank_fields_dropped() -> None:
    location = Location(
        location_id="1",
        address="  1 Apple Park Way,\n   Cupertino ",
        postal_code=" ",
        city="",
    )
    assert location.address == "1 Apple Park Way, Cupertino"
    assert location.postal_code is None
    assert location.city is None


def test_has_coordinates_requires_both_values() -> None:
    assert Location(location_id="1", latitude=1.0, longitude=2.0).has_coordinates()
    assert not Location(location_id="1", latitude=1.0).has_coordinates()
    assert not Location(location_id="1").has_coordinates()


def test_display_name_prefers_city_and_state() -> None:
    location = Location(location_id="1", address="1 Main St", city="Cupertino", state="CA")
    assert location.display_name == "Cupertino, CA"
    assert Location(location_id="1", address="1 Main St").display_name == "1 Main St"
    assert Location(location_id="1", state="CA").display_name == "CA"


def test_record_timestamps_normalize_to_utc() -> None:
    record = WeatherRecord(
        record_id="r1",
        location_id="1",
        current_temp=70.0,
        forecast_timestamp=datetime(2026, 6, 4, 12, 0),
    )
    assert record.forecast_timestamp.tzinfo == UTC
    assert record.is_fresh(datetime(2026, 6, 4, 12, 29, tzinfo=UTC))
    assert not record.is_fresh(datetime(2026, 6, 4, 12, 30, tzinfo=UTC))


def test_cache_entry_freshness_uses_fetched_at() -> None:
    now = datetime(2026, 6, 4, 12, 0, tzinfo=UTC)
    entry = CacheEntry(current_temp=75.0, fetched_at=now - timedelta(minutes=5))
    assert entry.is_fresh(now)
    assert not entry.is_fresh(now + timedelta(minutes=25))


def test_result_constructors() -> None:
    record = WeatherRecord(
        record_id="r1",
        location_id="1",
        forecast_timestamp=datetime(2026, 6, 4, 12, 0, tzinfo=UTC),
    )
    ok = ResolutionResult.success(record, served_from_cache=True)
    assert ok.ok and ok.served_from_cache and ok.error is None

    err = ResolutionResult.failure("unexpected_status", "Unexpected API response: 500", status_code=500)
    assert not err.ok
    assert err.record is None
    assert err.error == "unexpected_status"
    assert err.status_code == 500
