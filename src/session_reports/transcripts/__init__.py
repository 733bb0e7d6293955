"""Normalize submitted session documents into role-tagged entries.

A session document arrives in one of two shapes:

* a list of Claude Code turn records, each optionally carrying
  ``{"message": {"role": ..., "content": ...}}``;
* an object with a ``messages`` list of ``{"role", "content"}`` pairs plus
  optional ``timestamp`` / ``working_dir`` metadata.

Anything else is opaque and is only ever shown as a raw JSON dump.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from ..errors import SerializationError

SNAPSHOT_TYPE = "file-history-snapshot"


@dataclass(frozen=True)
class Entry:
    """One flattened message from a session document."""

    role: str
    text: str  # always a string, possibly empty


# --- Document shapes ---


@dataclass(frozen=True)
class TurnRecords:
    records: list


@dataclass(frozen=True)
class MessageList:
    messages: list
    timestamp: Any = None
    working_dir: Any = None


@dataclass(frozen=True)
class Opaque:
    document: Any


DocumentShape = Union[TurnRecords, MessageList, Opaque]


# --- Normalized results ---


@dataclass(frozen=True)
class Transcript:
    """A document that could be read as an ordered list of entries."""

    entries: list[Entry] = field(default_factory=list)
    timestamp: Any = None
    working_dir: Any = None


@dataclass(frozen=True)
class Unstructured:
    """A document with no recognizable message structure, kept as a JSON dump."""

    text: str


Normalized = Union[Transcript, Unstructured]


def canonical_json(value: Any, indent: int | None = None) -> str:
    """Serialize a value to JSON text, raising SerializationError on failure."""
    separators = None if indent else (",", ":")
    try:
        return json.dumps(value, ensure_ascii=False, indent=indent, separators=separators)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError("Session data is not serializable", details=str(exc)) from exc


def classify_document(document: Any) -> DocumentShape:
    """Determine the shape of a session document once, at the boundary."""
    if isinstance(document, list):
        return TurnRecords(records=document)
    if isinstance(document, dict) and isinstance(document.get("messages"), list):
        return MessageList(
            messages=document["messages"],
            timestamp=document.get("timestamp"),
            working_dir=document.get("working_dir"),
        )
    return Opaque(document=document)


def normalize(document: Any) -> Normalized:
    """Convert a session document into a Transcript, or Unstructured if it has no known shape.

    Shape mismatches never raise. Only a document that cannot be serialized
    raises SerializationError.
    """
    shape = classify_document(document)

    if isinstance(shape, TurnRecords):
        return Transcript(entries=_entries_from_turns(shape.records))
    if isinstance(shape, MessageList):
        return Transcript(
            entries=_entries_from_messages(shape.messages),
            timestamp=shape.timestamp,
            working_dir=shape.working_dir,
        )
    if isinstance(shape, Opaque):
        return Unstructured(text=canonical_json(shape.document, indent=2))
    raise TypeError(f"Unhandled document shape: {shape!r}")


def visible_entries(entries: list[Entry]) -> list[Entry]:
    """Entries with non-empty text; empty ones are treated as absent by display and export."""
    return [entry for entry in entries if entry.text]


def _entries_from_turns(records: list) -> list[Entry]:
    entries: list[Entry] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        if record.get("type") == SNAPSHOT_TYPE:
            continue

        message = record.get("message")
        if not isinstance(message, dict):
            continue
        role = message.get("role")
        if not isinstance(role, str) or not role:
            continue

        entries.append(Entry(role=role, text=_flatten_content(message.get("content"))))
    return entries


def _entries_from_messages(messages: list) -> list[Entry]:
    entries: list[Entry] = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        role = message.get("role")
        content = message.get("content")
        if not isinstance(role, str) or not role:
            continue
        if content is None or content == "":
            continue

        text = content if isinstance(content, str) else canonical_json(content)
        entries.append(Entry(role=role, text=text))
    return entries


def _flatten_content(content: Any) -> str:
    """Flatten turn-record content: strings pass through, block lists keep only text blocks."""
    if content is None:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if text is None:
                    parts.append("")
                elif isinstance(text, str):
                    parts.append(text)
                else:
                    parts.append(canonical_json(text))
        return "\n".join(parts)

    return canonical_json(content)
