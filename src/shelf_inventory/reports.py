"""Report datasets derived from the catalog and the session ledger.

Every dataset is a plain list of flat records, computed by filtering the
ledger and catalog; no state beyond those two is required.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .catalog import CatalogIndex
from .ledger import SessionLedger
from .models import ReferenceRecord, ScanEvent
from .labels import ReportLabels, transform_record
from .normalization import IDENTIFIER_LENGTH
from .summary import unique_scans
from .warning_types import (
    AUTO_COMPLETED_NOT_FOUND,
    DELETED,
    INVALID_STRUCTURE,
    LOCATION_MISMATCH,
    WRONG_LIBRARY,
)

Row = Dict[str, Any]


def record_row(
    record: Optional[ReferenceRecord],
    catalog: CatalogIndex,
    labels: Optional[ReportLabels] = None,
) -> Row:
    """Flat catalog row for a record, with code columns labelled when requested."""
    if record is None:
        return {}
    columns = catalog.columns
    if record.fields:
        row = dict(record.fields)
    else:
        row = {
            columns.identifier: record.identifier,
            columns.title: record.title,
            columns.status: record.status_code,
            columns.loan_eligibility: record.loan_eligibility_code,
            columns.location: record.location_code,
            columns.on_loan: record.on_loan_flag,
        }
    if labels is not None:
        row = transform_record(row, labels, columns)
    return row


def _events_with(ledger: SessionLedger, *codes: str) -> List[ScanEvent]:
    return [
        event
        for event in ledger.events()
        if any(event.has_warning(code) for code in codes)
    ]


def clean_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    events = [event for event in unique_scans(ledger).values() if event.is_valid]
    return [record_row(event.reference, catalog, labels) for event in events]


def missing_records(catalog: CatalogIndex, ledger: SessionLedger) -> List[ReferenceRecord]:
    scanned = set(unique_scans(ledger))
    return [record for record in catalog.active_records() if record.identifier not in scanned]


def missing_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    return [record_row(record, catalog, labels) for record in missing_records(catalog, ledger)]


def write_off_list(catalog: CatalogIndex, ledger: SessionLedger) -> List[str]:
    """Missing identifiers for a batch write-off upload, one per line."""
    return [record.identifier[:IDENTIFIER_LENGTH] for record in missing_records(catalog, ledger)]


def duplicates_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    counts = Counter(event.identifier for event in ledger.events())
    rows: List[Row] = []
    for identifier, count in counts.items():
        if count < 2:
            continue
        first = ledger.first_event(identifier)
        wrong_library = first.warning(WRONG_LIBRARY) if first else None
        rows.append(
            {
                "Barcode": identifier,
                "Scan Count": count,
                "Title": (first.title if first else None) or "Unknown",
                "Other Library": wrong_library.library_name if wrong_library else "",
            }
        )
    return rows


def wrong_library_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    rows: List[Row] = []
    for event in _events_with(ledger, WRONG_LIBRARY):
        warning = event.warning(WRONG_LIBRARY)
        rows.append(
            {
                "Barcode": event.resolved_identifier,
                "Owning Library": (warning.library_name if warning else None) or "Unknown",
            }
        )
    return rows


def location_mismatch_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    return [
        record_row(event.reference, catalog, labels)
        for event in _events_with(ledger, LOCATION_MISMATCH)
    ]


def invalid_structure_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    return [
        {"Invalid Barcode": event.resolved_identifier}
        for event in _events_with(ledger, INVALID_STRUCTURE)
    ]


def not_found_list(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    return [
        {"Barcode": event.resolved_identifier, "Note": "Scanned, not found in list"}
        for event in _events_with(ledger, DELETED, AUTO_COMPLETED_NOT_FOUND)
    ]


def full_export(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    """Every scan, newest first, joined with its warnings and catalog fields."""
    rows: List[Row] = []
    for event in ledger.events():
        wrong_library = event.warning(WRONG_LIBRARY)
        row: Row = {
            "Barcode": event.resolved_identifier,
            "Title": event.title or "",
            "Warnings": ", ".join(w.message for w in event.warnings) or "Clean",
            "Other Library": wrong_library.library_name if wrong_library else "",
            "Scanned At": event.timestamp.isoformat(),
        }
        row.update(record_row(event.reference, catalog, labels))
        rows.append(row)
    return rows


def pre_on_loan(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    return [record_row(record, catalog, labels) for record in catalog if record.on_loan]


def pre_status_issues(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    return [record_row(record, catalog, labels) for record in catalog if not record.in_collection]


def pre_not_loanable(
    catalog: CatalogIndex, ledger: SessionLedger, labels: Optional[ReportLabels] = None
) -> List[Row]:
    # Stricter than the scan check: reference sources (code 2) are listed too.
    return [
        record_row(record, catalog, labels)
        for record in catalog
        if record.loan_eligibility_code != "0"
    ]


@dataclass(frozen=True)
class ReportDefinition:
    key: str
    title: str
    description: str
    file_stem: str
    builder: Callable[..., List[Row]]
    pre_analysis: bool = False


REPORTS = {
    definition.key: definition
    for definition in (
        ReportDefinition(
            "preOnLoan",
            "Items On Loan",
            "Catalog items currently checked out to a reader.",
            "pre_analysis_on_loan",
            pre_on_loan,
            pre_analysis=True,
        ),
        ReportDefinition(
            "preStatusIssues",
            "Written Off / Transferred Items",
            "Catalog items whose status is no longer in collection.",
            "pre_analysis_status_issues",
            pre_status_issues,
            pre_analysis=True,
        ),
        ReportDefinition(
            "preNotLoanable",
            "Items Not Marked Loanable",
            "Catalog items whose loan eligibility is anything other than loanable.",
            "pre_analysis_not_loanable",
            pre_not_loanable,
            pre_analysis=True,
        ),
        ReportDefinition(
            "missing",
            "Missing Items",
            "Active collection items that were never scanned.",
            "count_missing_items",
            missing_list,
        ),
        ReportDefinition(
            "duplicateScans",
            "Duplicate Scans",
            "Barcodes scanned more than once, with scan counts.",
            "count_duplicate_scans",
            duplicates_list,
        ),
        ReportDefinition(
            "invalidStructure",
            "Invalid Barcodes",
            "Scanned barcodes that match no known library structure.",
            "count_invalid_structure",
            invalid_structure_list,
        ),
        ReportDefinition(
            "deletedScanned",
            "Scanned But Not In List",
            "Scanned barcodes missing from the imported catalog.",
            "count_not_in_list",
            not_found_list,
        ),
        ReportDefinition(
            "allResults",
            "All Count Results",
            "Every scan with its warnings and catalog fields.",
            "count_all_results",
            full_export,
        ),
        ReportDefinition(
            "cleanList",
            "Clean List",
            "Scanned items with no warnings.",
            "count_clean_list",
            clean_list,
        ),
        ReportDefinition(
            "wrongLibrary",
            "Other Library Items",
            "Scanned items that belong to another library.",
            "count_other_library",
            wrong_library_list,
        ),
        ReportDefinition(
            "locationMismatch",
            "Location Mismatches",
            "Scanned items shelved outside the selected location.",
            "count_location_mismatch",
            location_mismatch_list,
        ),
    )
}

WRITE_OFF_REPORT = "writeOff"
WRITE_OFF_FILE_STEM = "count_write_off_barcodes"


def build_report(
    key: str,
    catalog: CatalogIndex,
    ledger: SessionLedger,
    labels: Optional[ReportLabels] = None,
) -> List[Row]:
    try:
        definition = REPORTS[key]
    except KeyError:
        raise KeyError(f"Unknown report: {key}") from None
    return definition.builder(catalog, ledger, labels)
