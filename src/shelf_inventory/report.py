"""Plain-text rendering of a session summary."""
from __future__ import annotations

from typing import Optional

from .summary import SummaryReport
from .warning_types import DEFAULT_WARNINGS, WarningCatalog

NO_DATA_MESSAGE = "No data to summarise: load a catalog or scan items first."


def render_summary(
    summary: Optional[SummaryReport],
    warnings: WarningCatalog = DEFAULT_WARNINGS,
    session_name: str | None = None,
) -> str:
    """Return a human-readable report of the count results."""

    header_lines = ["Shelf Inventory Report"]
    if session_name:
        header_lines.append(f"Session: {session_name}")
    if summary is None:
        header_lines.append(NO_DATA_MESSAGE)
        return "\n".join(header_lines)

    lines = header_lines + [
        f"Catalog records: {summary.catalog_size}",
        f"Active collection: {summary.active_collection}",
        f"Total scans: {summary.total_scanned}",
        f"Valid: {summary.valid}",
        f"With warnings: {summary.invalid}",
        f"Missing: {summary.missing}",
        f"Scans per minute: {summary.scan_rate_display}",
    ]

    if summary.warning_counts:
        lines.append("Warnings:")
        for code, count in sorted(summary.warning_counts.items(), key=lambda item: -item[1]):
            lines.append(f"  {warnings.label_for(code)}: {count}")

    if summary.locations:
        lines.append("Locations (valid / warned / missing):")
        for entry in sorted(summary.locations, key=lambda e: e.location):
            lines.append(f"  {entry.location}: {entry.valid} / {entry.warned} / {entry.missing}")
    return "\n".join(lines)
