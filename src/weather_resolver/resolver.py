"""Tiered weather resolution: authoritative record, shared cache, live upstream.

The resolver holds no cross-call state. Two concurrent calls for the same
location may both miss and both fetch upstream; both writes carry equivalent
data and the stores apply last-write-wins, so no per-key locking is done.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from .cache_keys import derive_cache_key, derive_query_param
from .exceptions import CacheError, UpstreamError
from .freshness import FRESHNESS_WINDOW
from .models import (
    CacheEntry,
    ErrorReason,
    Location,
    ObservationData,
    RecordFields,
    ResolutionResult,
    WeatherRecord,
)
from .stores.base import RecordStore, SecondaryCache
from .upstream.base import UpstreamClient

Clock = Callable[[], datetime]

_UPSTREAM_REASONS: frozenset[str] = frozenset(
    {"invalid_credential", "rate_limited", "timeout", "unexpected_status", "not_configured"}
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class WeatherResolver:
    """Resolve current weather for a location, calling upstream only when both local tiers miss."""

    def __init__(
        self,
        *,
        upstream: UpstreamClient,
        record_store: RecordStore,
        cache: SecondaryCache,
        logger: logging.Logger,
        clock: Clock = _utc_now,
    ) -> None:
        self.upstream = upstream
        self.record_store = record_store
        self.cache = cache
        self.logger = logger
        self._clock = clock

    def resolve(self, location: Location) -> ResolutionResult:
        """Return the freshest available weather for `location`."""
        if not self.upstream.is_configured:
            return ResolutionResult.failure("not_configured", "Weather API key not configured")
        if not location.has_coordinates():
            return ResolutionResult.failure("location_not_resolved", "Location must be geocoded")

        now = self._clock()

        record = self._from_record(location, now)
        if record is not None:
            return ResolutionResult.success(record, served_from_cache=True)

        cache_key = derive_cache_key(location)
        record = self._from_cache(location, cache_key, now)
        if record is not None:
            return ResolutionResult.success(record, served_from_cache=True)

        return self._from_upstream(location, cache_key)

    def _from_record(self, location: Location, now: datetime) -> WeatherRecord | None:
        record = self.record_store.get_record_for(location.location_id)
        if record is None or not record.is_fresh(now):
            return None
        self.logger.info(
            "Using existing weather record for location %s",
            location.location_id,
            extra={"location_id": location.location_id, "tier": "record"},
        )
        return record

    def _from_cache(self, location: Location, cache_key: str, now: datetime) -> WeatherRecord | None:
        context = {"location_id": location.location_id, "cache_key": cache_key, "tier": "cache"}
        try:
            entry = self.cache.get(cache_key)
        except CacheError as exc:
            self.logger.warning(
                "Cache read failed for %s; treating as miss: %s", cache_key, exc, extra=context
            )
            return None
        if entry is None:
            return None
        # Store TTLs can surface an entry slightly past the window.
        if not entry.is_fresh(now):
            self.logger.info("Ignoring stale cache entry for %s", cache_key, extra=context)
            return None

        self.logger.info("Cache hit for %s", cache_key, extra=context)
        return self._write_record(location, entry)

    def _from_upstream(self, location: Location, cache_key: str) -> ResolutionResult:
        context = {"location_id": location.location_id, "cache_key": cache_key, "tier": "upstream"}
        query = derive_query_param(location)
        try:
            observation = self.upstream.fetch_live(query)
        except UpstreamError as exc:
            self.logger.warning(
                "Upstream fetch failed for location %s (%s): %s",
                location.location_id,
                exc.category,
                exc,
                extra={**context, "category": exc.category, "status_code": exc.status_code},
            )
            return ResolutionResult.failure(
                self._reason(exc.category),
                str(exc),
                status_code=exc.status_code,
            )

        entry = self._entry_from(observation, fetched_at=self._clock())
        try:
            self.cache.set(cache_key, entry, FRESHNESS_WINDOW)
        except CacheError as exc:
            self.logger.warning("Cache write failed for %s: %s", cache_key, exc, extra=context)

        record = self._write_record(location, entry)
        return ResolutionResult.success(record, served_from_cache=False)

    def _write_record(self, location: Location, entry: CacheEntry) -> WeatherRecord:
        # The entry's generation time, not the local clock, drives later freshness checks.
        fields = RecordFields(
            current_temp=entry.current_temp,
            high_temp=entry.high_temp,
            low_temp=entry.low_temp,
            conditions=entry.conditions,
            forecast_timestamp=entry.fetched_at,
        )
        return self.record_store.upsert_record_for(location.location_id, fields)

    @staticmethod
    def _entry_from(observation: ObservationData, *, fetched_at: datetime) -> CacheEntry:
        return CacheEntry(**observation.model_dump(), fetched_at=fetched_at)

    @staticmethod
    def _reason(category: str) -> ErrorReason:
        if category in _UPSTREAM_REASONS:
            return category  # type: ignore[return-value]
        return "unexpected_status"
