"""Human-readable labels for catalog codes in exported reports."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .catalog import CatalogColumns, DEFAULT_COLUMNS

MATERIAL_STATUS_LABELS = {
    "0": "In Collection",
    "1": "Written Off",
    "2": "Transferred",
}

LOAN_ELIGIBILITY_LABELS = {
    "0": "Loanable",
    "1": "Not Loanable - Other",
    "2": "Not Loanable - Reference Source",
    "3": "Not Loanable - Lost",
    "4": "Not Loanable - Worn",
    "5": "Not Loanable - Legal Deposit",
    "6": "Not Loanable - Rare Work",
    "7": "Not Loanable - Written Off",
    "8": "Not Loanable - Transferred",
    "9": "Not Loanable - Decree",
    "10": "Not Loanable - User Complaint",
    "11": "Not Loanable - Periodical",
}

STATUS_COLUMN = "Material Status"
ELIGIBILITY_COLUMN = "Loan Eligibility"
LOCATION_COLUMN = "Location"


@dataclass(frozen=True)
class ReportLabels:
    status: Mapping[str, str] = field(default_factory=lambda: dict(MATERIAL_STATUS_LABELS))
    eligibility: Mapping[str, str] = field(default_factory=lambda: dict(LOAN_ELIGIBILITY_LABELS))
    locations: Mapping[str, str] = field(default_factory=dict)

    def status_label(self, code: Optional[str]) -> str:
        code = code or ""
        return self.status.get(code) or f"Unknown Status ({code})"


def _labelled(mapping: Mapping[str, str], value: Any) -> Any:
    if value is None:
        return None
    key = str(value).strip()
    if key.endswith(".0") and key[:-2].isdigit():
        key = key[:-2]
    return mapping.get(key, value)


def transform_record(
    row: Mapping[str, Any],
    labels: ReportLabels,
    columns: CatalogColumns = DEFAULT_COLUMNS,
) -> Dict[str, Any]:
    """Replace status, eligibility and location code columns with labels."""

    transformed = dict(row)
    transformed[STATUS_COLUMN] = _labelled(labels.status, row.get(columns.status))
    transformed[ELIGIBILITY_COLUMN] = _labelled(
        labels.eligibility, row.get(columns.loan_eligibility)
    )
    transformed[LOCATION_COLUMN] = _labelled(labels.locations, row.get(columns.location))
    for code_column in (columns.status, columns.loan_eligibility, columns.location):
        transformed.pop(code_column, None)
    return transformed
