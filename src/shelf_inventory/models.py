"""Data models for shelf inventory counts."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

IN_COLLECTION_STATUS = "0"
WRITTEN_OFF_STATUS = "1"
TRANSFERRED_STATUS = "2"
LOANABLE_CODES = frozenset({"0", "2"})
ON_LOAN_FLAG = "1"

KIND_IGNORED = "ignored"
KIND_ISBN = "isbn"
KIND_NORMAL = "normal"
KIND_SCAN = "scan"


def code_value(value: Any) -> str:
    """Render a spreadsheet cell as the string code the catalog compares with.

    Spreadsheet readers hand back numeric codes as floats (``0.0``); those are
    folded back to their integer spelling.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


@dataclass(frozen=True)
class Scope:
    """The library (and optional location) a counting session is restricted to."""

    library_code: str = ""
    location_code: Optional[str] = None

    def __post_init__(self) -> None:
        code = (self.library_code or "").strip()
        if code and not code.isdigit():
            raise ValueError(f"Library code must be numeric: {self.library_code!r}")
        object.__setattr__(self, "library_code", code)
        location = (self.location_code or "").strip() or None
        object.__setattr__(self, "location_code", location)

    @property
    def is_set(self) -> bool:
        return bool(self.library_code)


@dataclass(frozen=True)
class ReferenceRecord:
    """One row of the uploaded catalog snapshot."""

    identifier: str
    status_code: str = IN_COLLECTION_STATUS
    loan_eligibility_code: str = "0"
    location_code: Optional[str] = None
    on_loan_flag: str = "0"
    title: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def in_collection(self) -> bool:
        return self.status_code == IN_COLLECTION_STATUS

    @property
    def loanable(self) -> bool:
        return self.loan_eligibility_code in LOANABLE_CODES

    @property
    def on_loan(self) -> bool:
        return self.on_loan_flag == ON_LOAN_FLAG


@dataclass(frozen=True)
class ScanWarning:
    """A warning attached to a scan; ``message`` may be customised per scan."""

    code: str
    label: str
    message: str
    severity: int = 0
    library_name: Optional[str] = None


@dataclass(frozen=True)
class ScanEvent:
    """One processed scan in the session ledger."""

    event_id: int
    raw_input: str
    identifier: str
    resolved_identifier: str
    warnings: Tuple[ScanWarning, ...]
    reference: Optional[ReferenceRecord]
    timestamp: datetime

    @property
    def is_valid(self) -> bool:
        return not self.warnings

    @property
    def is_duplicate(self) -> bool:
        return self.has_warning("duplicate")

    def has_warning(self, code: str) -> bool:
        return any(warning.code == code for warning in self.warnings)

    def warning(self, code: str) -> Optional[ScanWarning]:
        for warning in self.warnings:
            if warning.code == code:
                return warning
        return None

    @property
    def title(self) -> Optional[str]:
        return self.reference.title if self.reference else None


@dataclass(frozen=True)
class NormalizedResult:
    kind: str
    raw_input: str
    identifier: str = ""
    original_digits: str = ""
    was_auto_completed: bool = False
    expected_prefix: str = ""


@dataclass(frozen=True)
class ScanOutcome:
    """Result of one classification call.

    Exactly one of: ``kind == "ignored"`` (nothing happened), ``kind == "isbn"``
    (``notice`` is set, ledger untouched) or ``kind == "scan"`` (``event`` was
    appended to the ledger).
    """

    kind: str
    normalized: NormalizedResult
    event: Optional[ScanEvent] = None
    notice: Optional[ScanWarning] = None

    @property
    def has_warnings(self) -> bool:
        if self.kind == KIND_ISBN:
            return True
        return bool(self.event and self.event.warnings)
