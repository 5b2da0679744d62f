"""Reference catalog index built from an uploaded catalog export."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from .errors import MissingColumnError
from .logging_config import get_logger
from .models import ReferenceRecord, code_value

logger = get_logger(__name__)


@dataclass(frozen=True)
class CatalogColumns:
    """Column names of the catalog export (defaults follow the Koha report)."""

    identifier: str = "barkod"
    status: str = "materyal_statusu_kodu"
    loan_eligibility: str = "odunc_verilebilirlik_kodu"
    location: str = "materyalin_yeri_kodu"
    on_loan: str = "odunc_durumu"
    title: str = "eser_adi"


DEFAULT_COLUMNS = CatalogColumns()


class CatalogIndex:
    """Read-only identifier -> record lookup for one catalog load."""

    def __init__(
        self, records: Iterable[ReferenceRecord], columns: CatalogColumns = DEFAULT_COLUMNS
    ):
        self.columns = columns
        self._by_identifier: Dict[str, ReferenceRecord] = {}
        for record in records:
            self._by_identifier[record.identifier] = record

    @classmethod
    def empty(cls, columns: CatalogColumns = DEFAULT_COLUMNS) -> "CatalogIndex":
        return cls([], columns)

    @classmethod
    def from_rows(
        cls, rows: Sequence[Mapping[str, Any]], columns: CatalogColumns = DEFAULT_COLUMNS
    ) -> "CatalogIndex":
        """Build an index from flat catalog rows.

        An empty sequence yields an empty index. Raises MissingColumnError when
        the rows carry no identifier column.
        """
        if not rows:
            logger.info("Indexed an empty catalog")
            return cls.empty(columns)
        if columns.identifier not in rows[0]:
            raise MissingColumnError(columns.identifier)

        records: List[ReferenceRecord] = []
        skipped = 0
        for row in rows:
            identifier = code_value(row.get(columns.identifier))
            if not identifier:
                skipped += 1
                continue
            records.append(_record_from_row(row, identifier, columns))

        index = cls(records, columns)
        if skipped:
            logger.warning("Skipped %d catalog rows without an identifier", skipped)
        if len(index) < len(records):
            logger.warning(
                "Catalog lists %d identifiers more than once; the last row wins",
                len(records) - len(index),
            )
        logger.info("Indexed %d catalog records", len(index))
        return index

    @classmethod
    def from_dataframe(
        cls, frame: pd.DataFrame, columns: CatalogColumns = DEFAULT_COLUMNS
    ) -> "CatalogIndex":
        if columns.identifier not in frame.columns:
            raise MissingColumnError(columns.identifier)
        cleaned = frame.astype(object).where(pd.notna(frame), None)
        return cls.from_rows(cleaned.to_dict(orient="records"), columns)

    def __len__(self) -> int:
        return len(self._by_identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._by_identifier

    def __iter__(self) -> Iterator[ReferenceRecord]:
        return iter(self._by_identifier.values())

    def get(self, identifier: str) -> Optional[ReferenceRecord]:
        return self._by_identifier.get(identifier)

    def active_records(self) -> List[ReferenceRecord]:
        """Records still physically held (status in collection)."""
        return [record for record in self._by_identifier.values() if record.in_collection]


def _record_from_row(
    row: Mapping[str, Any], identifier: str, columns: CatalogColumns
) -> ReferenceRecord:
    location = code_value(row.get(columns.location)) or None
    title = row.get(columns.title)
    return ReferenceRecord(
        identifier=identifier,
        status_code=code_value(row.get(columns.status)),
        loan_eligibility_code=code_value(row.get(columns.loan_eligibility)),
        location_code=location,
        on_loan_flag=code_value(row.get(columns.on_loan)),
        title=str(title).strip() if title not in (None, "") else None,
        fields=dict(row),
    )
