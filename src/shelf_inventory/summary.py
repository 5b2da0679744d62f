"""Reconciliation summary for a counting session."""
from __future__ import annotations

import math
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .catalog import CatalogIndex
from .ledger import SessionLedger
from .models import ScanEvent

UNKNOWN_LOCATION = "Unknown"
TOP_ERROR_LOCATIONS = 10


@dataclass
class LocationStatus:
    location: str
    valid: int = 0
    warned: int = 0
    missing: int = 0


@dataclass
class SummaryReport:
    """Headline numbers cover the active collection only."""

    total_scanned: int
    valid: int
    invalid: int
    missing: int
    active_collection: int
    catalog_size: int
    scan_rate: Optional[int]
    material_status_counts: Dict[str, int] = field(default_factory=dict)
    warning_counts: Dict[str, int] = field(default_factory=dict)
    hourly_progress: List[Tuple[str, int]] = field(default_factory=list)
    locations: List[LocationStatus] = field(default_factory=list)
    top_error_locations: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def scan_rate_display(self) -> str:
        return "∞" if self.scan_rate is None else str(self.scan_rate)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["scan_rate"] = self.scan_rate_display
        return data


def unique_scans(ledger: SessionLedger) -> Dict[str, ScanEvent]:
    """First non-duplicate event per identifier, in scan order."""
    unique: Dict[str, ScanEvent] = {}
    for event in ledger.events(newest_first=False):
        if event.is_duplicate or event.identifier in unique:
            continue
        unique[event.identifier] = event
    return unique


def scan_rate(events: List[ScanEvent]) -> Optional[int]:
    """Scans per minute between the oldest and newest event.

    Returns None when the rate is unbounded (a single scan, or no elapsed time).
    """
    if not events:
        return 0
    if len(events) == 1:
        return None
    timestamps = [event.timestamp for event in events]
    minutes = (max(timestamps) - min(timestamps)).total_seconds() / 60
    if minutes <= 0:
        return None
    return int(math.floor(len(events) / minutes + 0.5))


def summarize(catalog: CatalogIndex, ledger: SessionLedger) -> Optional[SummaryReport]:
    """Compute the session summary, or None when there is no data at all."""
    events = ledger.events()
    if not events and len(catalog) == 0:
        return None

    active = catalog.active_records()
    active_ids = {record.identifier for record in active}
    scanned = unique_scans(ledger)
    active_scanned = {
        identifier: event for identifier, event in scanned.items() if identifier in active_ids
    }
    valid = sum(1 for event in active_scanned.values() if event.is_valid)
    invalid = len(active_scanned) - valid
    missing_ids = active_ids - set(active_scanned)

    locations: Dict[str, LocationStatus] = {}

    def location_entry(code: Optional[str]) -> LocationStatus:
        key = code or UNKNOWN_LOCATION
        if key not in locations:
            locations[key] = LocationStatus(location=key)
        return locations[key]

    for record in active:
        entry = location_entry(record.location_code)
        if record.identifier in missing_ids:
            entry.missing += 1
    for identifier, event in active_scanned.items():
        record = catalog.get(identifier)
        entry = location_entry(record.location_code if record else None)
        if event.is_valid:
            entry.valid += 1
        else:
            entry.warned += 1

    material_status_counts = Counter(record.status_code for record in catalog)
    warning_counts: Counter = Counter()
    hourly: Counter = Counter()
    error_locations: Counter = Counter()
    for event in events:
        hourly[f"{event.timestamp.hour:02d}:00"] += 1
        for warning in event.warnings:
            warning_counts[warning.code] += 1
        if event.warnings:
            location = event.reference.location_code if event.reference else None
            error_locations[location or UNKNOWN_LOCATION] += 1

    return SummaryReport(
        total_scanned=len(events),
        valid=valid,
        invalid=invalid,
        missing=len(missing_ids),
        active_collection=len(active_ids),
        catalog_size=len(catalog),
        scan_rate=scan_rate(events),
        material_status_counts=dict(material_status_counts),
        warning_counts=dict(warning_counts),
        hourly_progress=sorted(hourly.items()),
        locations=list(locations.values()),
        top_error_locations=error_locations.most_common(TOP_ERROR_LOCATIONS),
    )
