"""Shelf-reading inventory counts: barcode classification and reconciliation."""

from .app import InventorySession
from .catalog import CatalogColumns, CatalogIndex
from .classifier import BulkProgress, ScanClassifier
from .directory import LibraryDirectory, LocationDirectory
from .errors import InventoryError, MissingColumnError, SessionNotFoundError, SnapshotError
from .ledger import SessionLedger
from .models import ReferenceRecord, ScanEvent, ScanOutcome, ScanWarning, Scope
from .normalization import normalize
from .snapshot import SessionSnapshot
from .summary import SummaryReport, summarize

__all__ = [
    "InventorySession",
    "CatalogColumns",
    "CatalogIndex",
    "BulkProgress",
    "ScanClassifier",
    "LibraryDirectory",
    "LocationDirectory",
    "InventoryError",
    "MissingColumnError",
    "SessionNotFoundError",
    "SnapshotError",
    "SessionLedger",
    "ReferenceRecord",
    "ScanEvent",
    "ScanOutcome",
    "ScanWarning",
    "Scope",
    "normalize",
    "SessionSnapshot",
    "SummaryReport",
    "summarize",
]
