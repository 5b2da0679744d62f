"""High-level orchestrator for a shelf counting session."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from .catalog import CatalogColumns, CatalogIndex, DEFAULT_COLUMNS
from .classifier import DEFAULT_CHUNK_SIZE, BulkProgress, Notifier, ScanClassifier
from .directory import LibraryDirectory, LocationDirectory
from .errors import InventoryError
from .labels import ReportLabels
from .ledger import Clock, SessionLedger
from .logging_config import get_logger
from .models import ScanEvent, ScanOutcome, Scope
from .parsers import load_catalog_frame
from .reports import REPORTS, Row, build_report, write_off_list
from .snapshot import SessionSnapshot
from .summary import SummaryReport, summarize
from .warning_types import DEFAULT_WARNINGS, WarningCatalog

logger = get_logger(__name__)

DEFAULT_SESSION_NAME = "Untitled count"


class InventorySession:
    """Coordinates catalog loading, scan classification and reporting.

    Every mutation of the ledger or catalog happens under one lock, so a
    session can be shared by request handlers running on a thread pool.
    """

    def __init__(
        self,
        libraries: LibraryDirectory | None = None,
        locations: LocationDirectory | None = None,
        warnings: WarningCatalog = DEFAULT_WARNINGS,
        columns: CatalogColumns = DEFAULT_COLUMNS,
        notifier: Optional[Notifier] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Clock | None = None,
        name: str = DEFAULT_SESSION_NAME,
    ):
        self.libraries = libraries if libraries is not None else LibraryDirectory.load_default()
        self.locations = locations if locations is not None else LocationDirectory.load_default()
        self.warnings = warnings
        self.columns = columns
        self.chunk_size = chunk_size
        self.name = name
        self.classifier = ScanClassifier(self.libraries, warnings=warnings, notifier=notifier)
        self.catalog = CatalogIndex.empty(columns)
        self.scope = Scope()
        self.ledger = SessionLedger(clock=clock)
        self._clock = clock
        self._lock = threading.Lock()

    # Catalog and directories

    def load_catalog(self, rows: Sequence[Mapping[str, Any]] | pd.DataFrame) -> CatalogIndex:
        """Build a new index and swap it in; on failure the old one stays."""
        try:
            if isinstance(rows, pd.DataFrame):
                index = CatalogIndex.from_dataframe(rows, self.columns)
            else:
                index = CatalogIndex.from_rows(rows, self.columns)
        except InventoryError as exc:
            logger.warning("Catalog load rejected: %s", exc)
            raise
        with self._lock:
            self.catalog = index
        return index

    def load_catalog_file(self, source: str | Path | IO[bytes], filename: str | None = None) -> CatalogIndex:
        return self.load_catalog(load_catalog_frame(source, filename))

    def add_library(self, code: str, name: str) -> None:
        self.libraries.add(code, name)

    def add_location(self, code: str, name: str) -> None:
        self.locations.add(code, name)

    def start(self, library_code: str, location_code: str | None = None, name: str | None = None) -> Scope:
        """Select the library (and optional location) the count is restricted to."""
        if library_code not in self.libraries:
            logger.warning("Library %s is not in the directory", library_code)
        try:
            scope = Scope(library_code=library_code, location_code=location_code)
        except ValueError as exc:
            raise InventoryError(str(exc)) from exc
        with self._lock:
            self.scope = scope
            if name:
                self.name = name
        logger.info("Counting library %s, location %s", scope.library_code, scope.location_code or "all")
        return scope

    # Scanning

    def process(self, raw_input: str) -> ScanOutcome:
        with self._lock:
            return self.classifier.classify(raw_input, self.scope, self.catalog, self.ledger)

    def iter_bulk(self, raw_values: Iterable[str]) -> Iterator[BulkProgress]:
        return self.classifier.iter_bulk(
            raw_values,
            self.scope,
            self.catalog,
            self.ledger,
            chunk_size=self.chunk_size,
            lock=self._lock,
        )

    def process_bulk(self, raw_values: Iterable[str]) -> BulkProgress:
        progress = BulkProgress(current=0, total=0)
        for progress in self.iter_bulk(raw_values):
            pass
        return progress

    def apply_loan_list(self, raw_values: Iterable[str]) -> List[ScanEvent]:
        with self._lock:
            return self.classifier.apply_loan_list(raw_values, self.catalog, self.ledger)

    def delete_scan(self, event_id: int) -> Optional[ScanEvent]:
        with self._lock:
            return self.ledger.remove(event_id)

    def clear_scans(self) -> None:
        with self._lock:
            self.ledger.clear()
        logger.info("Cleared all scans of session %s", self.name)

    @property
    def last_scanned(self) -> Optional[ScanEvent]:
        return self.ledger.last_event

    def filter_scans(self, search_term: str | None = None, warning_code: str | None = None) -> List[ScanEvent]:
        return self.ledger.filter(search_term, warning_code)

    # Reporting

    def labels(self) -> ReportLabels:
        return ReportLabels(locations=self.locations.as_dict())

    def summary(self) -> Optional[SummaryReport]:
        return summarize(self.catalog, self.ledger)

    def report(self, key: str, labelled: bool = True) -> List[Row]:
        return build_report(key, self.catalog, self.ledger, self.labels() if labelled else None)

    def available_reports(self) -> List[str]:
        return list(REPORTS)

    def write_off_lines(self) -> List[str]:
        return write_off_list(self.catalog, self.ledger)

    # Persistence

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot.capture(self.name, self.scope, self.ledger)

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Replace scope and ledger with a saved session."""
        ledger = snapshot.restore_ledger(self.catalog, self.warnings, clock=self._clock)
        with self._lock:
            self.name = snapshot.session_name
            self.scope = snapshot.scope()
            self.ledger = ledger
        logger.info("Restored session %s with %d scans", snapshot.session_name, len(ledger))
