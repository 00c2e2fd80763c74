"""Storage contracts for the authoritative record tier and the shared cache tier."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta

from ..models import CacheEntry, RecordFields, WeatherRecord


class RecordStore(ABC):
    """Per-location authoritative weather records (one record per location)."""

    @abstractmethod
    def get_record_for(self, location_id: str) -> WeatherRecord | None:
        """Return the location's record, if one exists."""

    @abstractmethod
    def upsert_record_for(self, location_id: str, fields: RecordFields) -> WeatherRecord:
        """Overwrite the existing record in place, or create one."""

    @abstractmethod
    def delete_record_for(self, location_id: str) -> bool:
        """Remove the location's record; returns False if there was none."""


class SecondaryCache(ABC):
    """Key-addressed observation cache shared across locations."""

    @abstractmethod
    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored under `key`, or None on a miss."""

    @abstractmethod
    def set(self, key: str, entry: CacheEntry, ttl: timedelta) -> None:
        """Store `entry` under `key`, expiring after `ttl`."""
