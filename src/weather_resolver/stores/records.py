"""Authoritative record stores keyed by location identity."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import RecordStoreError
from ..models import RecordFields, WeatherRecord
from .base import RecordStore


def _new_record_id() -> str:
    return uuid.uuid4().hex[:12]


def _merge(location_id: str, existing: WeatherRecord | None, fields: RecordFields) -> WeatherRecord:
    record_id = existing.record_id if existing is not None else _new_record_id()
    return WeatherRecord(record_id=record_id, location_id=location_id, **fields.model_dump())


class InMemoryRecordStore(RecordStore):
    """Process-local record store. Last write wins under concurrent writers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, WeatherRecord] = {}

    def get_record_for(self, location_id: str) -> WeatherRecord | None:
        with self._lock:
            return self._records.get(location_id)

    def upsert_record_for(self, location_id: str, fields: RecordFields) -> WeatherRecord:
        with self._lock:
            record = _merge(location_id, self._records.get(location_id), fields)
            self._records[location_id] = record
            return record

    def delete_record_for(self, location_id: str) -> bool:
        with self._lock:
            return self._records.pop(location_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)


class JsonFileRecordStore(RecordStore):
    """Record store keeping one JSON document per location under a directory.

    Writers for different locations never touch the same file, and each write
    goes through a uniquely named temporary file plus an atomic rename, so
    concurrent processes get last-write-wins per location.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, location_id: str) -> Path:
        safe_name = "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in location_id)
        digest = hashlib.sha256(location_id.encode("utf-8")).hexdigest()[:16]
        return self.directory / f"{safe_name[:60]}-{digest}.json"

    def _read(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            raise RecordStoreError(f"Failed reading record file {path}: {exc}") from exc

    def _write(self, path: Path, payload: dict[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False, indent=2)
                fh.write("\n")
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise RecordStoreError(f"Failed writing record file {path}: {exc}") from exc

    @staticmethod
    def _parse(location_id: str, raw: Any) -> WeatherRecord:
        try:
            return WeatherRecord.model_validate(raw)
        except ValidationError as exc:
            raise RecordStoreError(f"Stored record for {location_id} is invalid: {exc}") from exc

    def get_record_for(self, location_id: str) -> WeatherRecord | None:
        raw = self._read(self.path_for(location_id))
        if raw is None:
            return None
        return self._parse(location_id, raw)

    def upsert_record_for(self, location_id: str, fields: RecordFields) -> WeatherRecord:
        path = self.path_for(location_id)
        raw = self._read(path)
        existing = self._parse(location_id, raw) if raw is not None else None
        record = _merge(location_id, existing, fields)
        self._write(path, record.model_dump(mode="json"))
        return record

    def delete_record_for(self, location_id: str) -> bool:
        try:
            self.path_for(location_id).unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise RecordStoreError(f"Failed deleting record for {location_id}: {exc}") from exc
        return True

    def __len__(self) -> int:
        if not self.directory.is_dir():
            return 0
        return sum(1 for _ in self.directory.glob("*.json"))
