"""View models for the dashboard templates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from .store import Report
from .transcripts import Entry, Transcript, Unstructured, normalize, visible_entries
from .transcripts.export import parse_timestamp


@dataclass
class ReportView:
    """Everything the detail page needs, with the document already normalized."""

    report: Report
    entries: list[Entry]
    session_timestamp: str | None = None
    working_dir: str | None = None
    raw_dump: str | None = None  # set only for unstructured documents

    @property
    def is_structured(self) -> bool:
        return self.raw_dump is None


def format_timestamp(value: str) -> str:
    """Human-readable timestamp, e.g. ``Nov 14, 2023, 10:13:20 PM UTC``."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value or "")
    parsed = parsed.astimezone(timezone.utc)
    hour = parsed.strftime("%I").lstrip("0") or "12"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}, {hour}:{parsed.strftime('%M:%S %p')} UTC"


def role_label(role: str) -> str:
    return role[:1].upper() + role[1:]


def count_today(reports: list[Report], now: datetime | None = None) -> int:
    """Number of reports received on the current UTC day."""
    today = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()
    count = 0
    for report in reports:
        parsed = parse_timestamp(report.timestamp)
        if parsed and parsed.astimezone(timezone.utc).date() == today:
            count += 1
    return count


def build_report_view(report: Report) -> ReportView:
    normalized = normalize(report.session_data)

    if isinstance(normalized, Unstructured):
        return ReportView(report=report, entries=[], raw_dump=normalized.text)
    if isinstance(normalized, Transcript):
        return ReportView(
            report=report,
            entries=visible_entries(normalized.entries),
            session_timestamp=_metadata_text(normalized.timestamp),
            working_dir=_metadata_text(normalized.working_dir),
        )
    raise TypeError(f"Unhandled normalized result: {normalized!r}")


def _metadata_text(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
