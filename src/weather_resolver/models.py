"""Typed models for locations, observations and resolution outcomes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from .freshness import is_fresh

ErrorReason = Literal[
    "not_configured",
    "location_not_resolved",
    "invalid_credential",
    "rate_limited",
    "timeout",
    "unexpected_status",
]


def _to_utc(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
    return value


class Location(BaseModel):
    """A place weather is resolved for; coordinates come from geocoding."""

    location_id: str
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    postal_code: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None

    @field_validator("address", mode="before")
    @classmethod
    def squish_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            squished = " ".join(value.split())
            return squished or None
        return value

    @field_validator("postal_code", "city", "state", "country", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def display_name(self) -> str:
        """City/state when known, else the address, else the coordinates."""
        parts = [part for part in (self.city, self.state) if part]
        if parts:
            return ", ".join(parts)
        if self.address:
            return self.address
        if self.has_coordinates():
            return f"{self.latitude!r}, {self.longitude!r}"
        return self.location_id


class ObservationData(BaseModel):
    """Current conditions returned by the upstream provider; any field may be missing."""

    current_temp: float | None = None
    high_temp: float | None = None
    low_temp: float | None = None
    conditions: str | None = None


class CacheEntry(ObservationData):
    """Observation shared through the secondary cache under a derived key."""

    fetched_at: datetime

    @field_validator("fetched_at", mode="after")
    @classmethod
    def fetched_at_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)

    def is_fresh(self, now: datetime) -> bool:
        return is_fresh(self.fetched_at, now)


class WeatherRecord(BaseModel):
    """Authoritative latest observation for one location, overwritten in place."""

    record_id: str
    location_id: str
    current_temp: float | None = None
    high_temp: float | None = None
    low_temp: float | None = None
    conditions: str | None = None
    forecast_timestamp: datetime

    @field_validator("forecast_timestamp", mode="after")
    @classmethod
    def forecast_timestamp_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)

    def is_fresh(self, now: datetime) -> bool:
        return is_fresh(self.forecast_timestamp, now)


class RecordFields(ObservationData):
    """Fields written to the record store on every successful resolution."""

    forecast_timestamp: datetime = Field(description="Generation time of the observation")


class ResolutionResult(BaseModel):
    """Outcome of one resolve call: a record, or a classified failure."""

    ok: bool
    record: WeatherRecord | None = None
    served_from_cache: bool = False
    error: ErrorReason | None = None
    message: str | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, record: WeatherRecord, *, served_from_cache: bool) -> ResolutionResult:
        return cls(ok=True, record=record, served_from_cache=served_from_cache)

    @classmethod
    def failure(
        cls,
        error: ErrorReason,
        message: str,
        *,
        status_code: int | None = None,
    ) -> ResolutionResult:
        return cls(ok=False, error=error, message=message, status_code=status_code)
