"""Authoritative record stores and secondary cache backends."""

from .base import RecordStore, SecondaryCache
from .cache import InMemoryTTLCache, RedisCache, build_cache
from .records import InMemoryRecordStore, JsonFileRecordStore

__all__ = [
    "InMemoryRecordStore",
    "InMemoryTTLCache",
    "JsonFileRecordStore",
    "RecordStore",
    "RedisCache",
    "SecondaryCache",
    "build_cache",
]
