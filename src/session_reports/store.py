"""Flat-file report storage: one JSON array, rewritten wholesale on every mutation."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import SerializationError, StorageError
from .transcripts.export import iso_timestamp

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Report:
    """A stored session report."""

    id: int
    session_id: Any
    timestamp: str  # ISO 8601, UTC
    session_data: Any
    raw_jsonl: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "session_data": self.session_data,
            "raw_jsonl": self.raw_jsonl,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Report:
        return cls(
            id=data["id"],
            session_id=data.get("session_id"),
            timestamp=data.get("timestamp", ""),
            session_data=data.get("session_data"),
            raw_jsonl=data.get("raw_jsonl"),
        )


def _coerce_id(report_id: Any) -> int | None:
    """Report ids arrive as ints or URL strings; anything non-integer matches nothing."""
    if isinstance(report_id, bool):
        return None
    if isinstance(report_id, int):
        return report_id
    try:
        return int(str(report_id).strip())
    except ValueError:
        return None


class ReportStore:
    """Reports persisted newest-first in a single JSON file. Last write wins."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]\n", encoding="utf-8")
        except OSError as exc:
            _LOGGER.error("Failed to initialize reports file %s: %s", self.path, exc)
            raise StorageError("Failed to initialize reports file", details=str(exc)) from exc

    def _read(self) -> list[dict]:
        self._ensure_file()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.error("Failed to read reports from %s: %s", self.path, exc)
            raise StorageError("Failed to read reports", details=str(exc)) from exc
        if not isinstance(payload, list):
            _LOGGER.error("Reports file %s does not hold a JSON array", self.path)
            raise StorageError("Failed to read reports", details="reports file does not hold a JSON array")
        return [record for record in payload if isinstance(record, dict) and "id" in record]

    def _write(self, records: list[dict]) -> None:
        try:
            text = json.dumps(records, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as exc:
            _LOGGER.error("Failed to serialize reports: %s", exc)
            raise SerializationError("Session data is not serializable", details=str(exc)) from exc
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text + "\n", encoding="utf-8")
        except OSError as exc:
            _LOGGER.error("Failed to write reports to %s: %s", self.path, exc)
            raise StorageError("Failed to write reports", details=str(exc)) from exc

    def _next_id(self, records: list[dict]) -> int:
        """Millisecond clock id, bumped past the newest id if the clock has not moved."""
        candidate = int(time.time() * 1000)
        newest = max((_coerce_id(r["id"]) or 0 for r in records), default=0)
        return max(candidate, newest + 1)

    def insert(self, session_id: Any, session_data: Any, raw_jsonl: str | None = None) -> int:
        """Store a new report at the front of the list and return its id."""
        records = self._read()
        report = Report(
            id=self._next_id(records),
            session_id=session_id,
            timestamp=iso_timestamp(),
            session_data=session_data,
            raw_jsonl=raw_jsonl,
        )
        records.insert(0, report.to_dict())
        self._write(records)
        return report.id

    def list_all(self) -> list[Report]:
        """All reports, newest first."""
        return [Report.from_dict(record) for record in self._read()]

    def get_by_id(self, report_id: Any) -> Report | None:
        wanted = _coerce_id(report_id)
        if wanted is None:
            return None
        for record in self._read():
            if _coerce_id(record["id"]) == wanted:
                return Report.from_dict(record)
        return None

    def delete_by_id(self, report_id: Any) -> int:
        """Remove a report. Returns the number of records removed."""
        wanted = _coerce_id(report_id)
        records = self._read()
        if wanted is None:
            return 0
        kept = [r for r in records if _coerce_id(r["id"]) != wanted]
        removed = len(records) - len(kept)
        if removed:
            self._write(kept)
        return removed
