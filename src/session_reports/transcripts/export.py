"""Serialize normalized transcripts into line-delimited JSON (.jsonl) downloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from . import Entry, Transcript, Unstructured, canonical_json, normalize, visible_entries

JSONL_MIMETYPE = "application/x-jsonlines"


def to_line_delimited(entries: list[Entry]) -> str:
    """Render entries as one ``{"role", "content"}`` JSON object per line.

    Entries with empty text are dropped. Lines are joined with a single
    newline and there is no trailing newline.
    """
    return "\n".join(
        canonical_json({"role": entry.role, "content": entry.text})
        for entry in visible_entries(entries)
    )


def export_document(document: Any, raw_export_text: str | None = None) -> str:
    """Return the .jsonl export for a session document.

    A raw export supplied at upload time is authoritative and returned
    verbatim; re-deriving from the document is only a fallback.
    """
    if isinstance(raw_export_text, str) and raw_export_text:
        return raw_export_text

    normalized = normalize(document)
    if isinstance(normalized, Unstructured):
        return ""
    if isinstance(normalized, Transcript):
        return to_line_delimited(normalized.entries)
    raise TypeError(f"Unhandled normalized result: {normalized!r}")


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO 8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime | None:
    """Parse a stored ISO timestamp, returning None if it is not one."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def download_filename(report_id: int, timestamp: str) -> str:
    """Attachment name for a report download, e.g. ``session-17-2024-01-02T03-04-05-006Z.jsonl``."""
    parsed = parse_timestamp(timestamp)
    stamp = iso_timestamp(parsed) if parsed else str(timestamp)
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"session-{report_id}-{stamp}.jsonl"
