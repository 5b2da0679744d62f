"""Warning kinds that can be attached to a scan."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .models import ScanWarning

INVALID_STRUCTURE = "invalidStructure"
WRONG_LIBRARY = "wrongLibrary"
LOCATION_MISMATCH = "locationMismatch"
NOT_LOANABLE = "notLoanable"
NOT_IN_COLLECTION = "notInCollection"
ON_LOAN = "onLoan"
DELETED = "deleted"
AUTO_COMPLETED_NOT_FOUND = "autoCompletedNotFound"
DUPLICATE = "duplicate"
ISBN_DETECTED = "isbnDetected"


@dataclass(frozen=True)
class WarningDefinition:
    key: str
    label: str
    message: str
    severity: int


DEFAULT_WARNING_DEFINITIONS = (
    WarningDefinition(
        INVALID_STRUCTURE,
        "Invalid Structure",
        "Scanned barcode does not match the required structure.",
        90,
    ),
    WarningDefinition(
        WRONG_LIBRARY,
        "Other Library",
        "Item does not belong to your library.",
        80,
    ),
    WarningDefinition(
        DELETED,
        "Not In List",
        "Barcode format is correct but it was not found in the imported list.",
        70,
    ),
    WarningDefinition(
        AUTO_COMPLETED_NOT_FOUND,
        "Completed Entry Not Found",
        "Barcode was completed to 12 digits but was not found in the imported list. "
        "Check the item barcode.",
        70,
    ),
    WarningDefinition(
        NOT_IN_COLLECTION,
        "Written Off/Transferred",
        "Item is no longer in the collection (written off or transferred).",
        60,
    ),
    WarningDefinition(
        ON_LOAN,
        "On Loan",
        "Item is currently on loan and must be checked in.",
        50,
    ),
    WarningDefinition(
        NOT_LOANABLE,
        "Not Loanable",
        "Item's loan eligibility status is not suitable.",
        40,
    ),
    WarningDefinition(
        LOCATION_MISMATCH,
        "Location Mismatch",
        "Item is not shelved at the selected location.",
        30,
    ),
    WarningDefinition(
        DUPLICATE,
        "Scanned Again",
        "This barcode was already scanned.",
        20,
    ),
    WarningDefinition(
        ISBN_DETECTED,
        "ISBN Detected",
        "An ISBN was scanned instead of the item barcode.",
        10,
    ),
)


class WarningCatalog:
    """Immutable lookup of warning definitions keyed by id."""

    def __init__(self, definitions: Iterable[WarningDefinition] = DEFAULT_WARNING_DEFINITIONS):
        self._definitions: Mapping[str, WarningDefinition] = MappingProxyType(
            {definition.key: definition for definition in definitions}
        )

    def __contains__(self, key: str) -> bool:
        return key in self._definitions

    def __iter__(self):
        return iter(self._definitions.values())

    def definition(self, key: str) -> WarningDefinition:
        return self._definitions[key]

    def issue(
        self, key: str, message: Optional[str] = None, library_name: Optional[str] = None
    ) -> ScanWarning:
        """Build a warning for a scan, optionally overriding its message."""
        definition = self._definitions[key]
        return ScanWarning(
            code=definition.key,
            label=definition.label,
            message=message or definition.message,
            severity=definition.severity,
            library_name=library_name,
        )

    def label_for(self, key: str) -> str:
        definition = self._definitions.get(key)
        return definition.label if definition else key


DEFAULT_WARNINGS = WarningCatalog()


def primary_warning(warnings: Iterable[ScanWarning]) -> Optional[ScanWarning]:
    """Return the most severe warning, keeping the first on ties."""
    best: Optional[ScanWarning] = None
    for warning in warnings:
        if best is None or warning.severity > best.severity:
            best = warning
    return best
