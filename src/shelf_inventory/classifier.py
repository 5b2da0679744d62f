"""Scan classification against the catalog and the session ledger."""
from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Callable, ContextManager, Iterable, Iterator, List, Optional

from .catalog import CatalogIndex
from .directory import LibraryDirectory
from .ledger import SessionLedger
from .logging_config import get_logger
from .models import (
    KIND_IGNORED,
    KIND_ISBN,
    KIND_SCAN,
    NormalizedResult,
    ScanEvent,
    ScanOutcome,
    ScanWarning,
    Scope,
)
from .normalization import IDENTIFIER_LENGTH, normalize, strip_non_digits
from .warning_types import (
    AUTO_COMPLETED_NOT_FOUND,
    DEFAULT_WARNINGS,
    DELETED,
    DUPLICATE,
    INVALID_STRUCTURE,
    ISBN_DETECTED,
    LOCATION_MISMATCH,
    NOT_IN_COLLECTION,
    NOT_LOANABLE,
    ON_LOAN,
    WRONG_LIBRARY,
    WarningCatalog,
)

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 200

Notifier = Callable[[ScanOutcome], None]


@dataclass
class BulkProgress:
    """Progress of a bulk reconciliation, reported after every chunk."""

    current: int
    total: int
    warned: int = 0
    isbn_hits: List[ScanOutcome] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return self.current >= self.total


class ScanClassifier:
    """Classify raw scans and record them in a ledger.

    ``notifier`` is called for every outcome that carries warnings, unless the
    call is silent (bulk mode). ISBN notices are always delivered.
    """

    def __init__(
        self,
        libraries: LibraryDirectory,
        warnings: WarningCatalog = DEFAULT_WARNINGS,
        notifier: Optional[Notifier] = None,
    ):
        self.libraries = libraries
        self.warnings = warnings
        self.notifier = notifier

    def classify(
        self,
        raw_input: str,
        scope: Scope,
        catalog: CatalogIndex,
        ledger: SessionLedger,
        silent: bool = False,
    ) -> ScanOutcome:
        normalized = normalize(raw_input, scope)
        if normalized.kind == KIND_IGNORED:
            return ScanOutcome(kind=KIND_IGNORED, normalized=normalized)

        if normalized.kind == KIND_ISBN:
            outcome = ScanOutcome(
                kind=KIND_ISBN,
                normalized=normalized,
                notice=self.warnings.issue(ISBN_DETECTED),
            )
            logger.debug("ISBN scanned instead of an item barcode: %s", normalized.identifier)
            self._notify(outcome)
            return outcome

        identifier = normalized.identifier
        if identifier in ledger:
            first = ledger.first_event(identifier)
            reference = (first.reference if first else None) or catalog.get(identifier)
            event = ledger.record(
                raw_input, identifier, identifier, [self.warnings.issue(DUPLICATE)], reference
            )
            return self._finish(normalized, event, silent)

        if len(identifier) == IDENTIFIER_LENGTH and not identifier.startswith(
            normalized.expected_prefix
        ):
            warning = self._structural_warning(identifier)
            event = ledger.record(
                raw_input,
                identifier,
                normalized.original_digits,
                [warning],
                catalog.get(identifier),
            )
            return self._finish(normalized, event, silent)

        reference = catalog.get(identifier)
        warnings: List[ScanWarning] = []
        if reference is not None:
            if scope.location_code and (reference.location_code or "") != scope.location_code:
                warnings.append(self.warnings.issue(LOCATION_MISMATCH))
            if not reference.loanable:
                warnings.append(self.warnings.issue(NOT_LOANABLE))
            if not reference.in_collection:
                warnings.append(self.warnings.issue(NOT_IN_COLLECTION))
            if reference.on_loan:
                warnings.append(self.warnings.issue(ON_LOAN))
        elif normalized.was_auto_completed:
            warnings.append(self.warnings.issue(AUTO_COMPLETED_NOT_FOUND))
        else:
            warnings.append(self.warnings.issue(DELETED))

        event = ledger.record(raw_input, identifier, identifier, warnings, reference)
        return self._finish(normalized, event, silent)

    def _structural_warning(self, identifier: str) -> ScanWarning:
        match = self.libraries.match_prefix(identifier)
        if match is None:
            return self.warnings.issue(INVALID_STRUCTURE)
        _, name = match
        label = self.warnings.definition(WRONG_LIBRARY).label
        return self.warnings.issue(
            WRONG_LIBRARY, message=f"{label} ({name})", library_name=name
        )

    def _finish(
        self, normalized: NormalizedResult, event: ScanEvent, silent: bool
    ) -> ScanOutcome:
        outcome = ScanOutcome(kind=KIND_SCAN, normalized=normalized, event=event)
        logger.debug(
            "Scan %s -> %s",
            event.resolved_identifier,
            ",".join(w.code for w in event.warnings) or "clean",
        )
        if event.warnings and not silent:
            self._notify(outcome)
        return outcome

    def _notify(self, outcome: ScanOutcome) -> None:
        if self.notifier is not None:
            self.notifier(outcome)

    def iter_bulk(
        self,
        raw_values: Iterable[str],
        scope: Scope,
        catalog: CatalogIndex,
        ledger: SessionLedger,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        lock: Optional[ContextManager] = None,
    ) -> Iterator[BulkProgress]:
        """Classify a batch silently, yielding progress after each chunk.

        The caller decides when to resume; stopping iteration stops the batch.
        """
        values = [str(value) for value in raw_values]
        progress = BulkProgress(current=0, total=len(values))
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        logger.info("Bulk reconciliation of %d values", progress.total)
        for start in range(0, len(values), chunk_size):
            with lock or nullcontext():
                for value in values[start : start + chunk_size]:
                    outcome = self.classify(value, scope, catalog, ledger, silent=True)
                    if outcome.kind == KIND_ISBN:
                        progress.isbn_hits.append(outcome)
                    elif outcome.has_warnings:
                        progress.warned += 1
            progress.current = min(start + chunk_size, len(values))
            yield progress
        logger.info(
            "Bulk reconciliation finished: %d values, %d warned, %d ISBN",
            progress.total,
            progress.warned,
            len(progress.isbn_hits),
        )

    def apply_loan_list(
        self, raw_values: Iterable[str], catalog: CatalogIndex, ledger: SessionLedger
    ) -> List[ScanEvent]:
        """Mark every barcode on a current-loans list as on loan.

        Earlier events for those barcodes are replaced by a single on-loan event.
        """
        barcodes = list(
            dict.fromkeys(
                digits for digits in (strip_non_digits(str(v).strip()) for v in raw_values) if digits
            )
        )
        events: List[ScanEvent] = []
        for barcode in barcodes:
            ledger.remove_identifier(barcode)
            events.append(
                ledger.record(
                    barcode,
                    barcode,
                    barcode,
                    [self.warnings.issue(ON_LOAN)],
                    catalog.get(barcode),
                )
            )
        logger.info("Applied loan list with %d barcodes", len(events))
        return events
