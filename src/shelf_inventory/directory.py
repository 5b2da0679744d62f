"""Library and location directories.

Built-in tables ship as CSV package data; custom entries added at runtime are
layered on top and are visible to the next lookup.
"""
from __future__ import annotations

import csv
from importlib import resources
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, TextIO, Tuple

from .logging_config import get_logger
from .normalization import library_prefix

logger = get_logger(__name__)

LIBRARIES_RESOURCE = "libraries.csv"
LOCATIONS_RESOURCE = "locations.csv"


class Directory:
    """Ordered code -> display name table with runtime additions."""

    def __init__(self, entries: Iterable[Tuple[str, str]] = ()):
        self._base: Dict[str, str] = {}
        for code, name in entries:
            self._base[str(code).strip()] = name.strip()
        self._custom: Dict[str, str] = {}

    def __contains__(self, code: object) -> bool:
        return code in self._custom or code in self._base

    def __len__(self) -> int:
        return len(self.as_dict())

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.items())

    def add(self, code: str, name: str) -> None:
        code = str(code).strip()
        name = (name or "").strip()
        if not code or not name:
            raise ValueError("Directory entries need both a code and a name")
        self._custom[code] = name

    def as_dict(self) -> Dict[str, str]:
        merged = dict(self._base)
        merged.update(self._custom)
        return merged

    def items(self) -> List[Tuple[str, str]]:
        return list(self.as_dict().items())

    def name_for(self, code: Optional[str]) -> Optional[str]:
        if code is None:
            return None
        return self._custom.get(code) or self._base.get(code)


class LibraryDirectory(Directory):
    """Libraries, keyed by numeric code; each owns the barcode prefix code + 1000."""

    def __init__(self, entries: Iterable[Tuple[str, str]] = ()):
        super().__init__(entries)
        self._prefix_cache: Optional[List[Tuple[str, str, str]]] = None

    def add(self, code: str, name: str) -> None:
        if not str(code).strip().isdigit():
            raise ValueError(f"Library code must be numeric: {code!r}")
        super().add(code, name)
        self._prefix_cache = None
        logger.info("Registered custom library %s (%s)", code, name)

    def prefixes(self) -> List[Tuple[str, str, str]]:
        """Return (prefix, code, name) triples in directory order."""
        if self._prefix_cache is None:
            self._prefix_cache = [
                (library_prefix(code), code, name)
                for code, name in self.items()
                if code.isdigit()
            ]
        return self._prefix_cache

    def match_prefix(self, identifier: str) -> Optional[Tuple[str, str]]:
        """Find the first library whose prefix starts the identifier."""
        for prefix, code, name in self.prefixes():
            if identifier.startswith(prefix):
                return code, name
        return None

    @classmethod
    def load_default(cls, csv_path: Path | None = None) -> "LibraryDirectory":
        return cls(_load_entries(LIBRARIES_RESOURCE, csv_path))


class LocationDirectory(Directory):
    """Shelf locations within a library."""

    @classmethod
    def load_default(cls, csv_path: Path | None = None) -> "LocationDirectory":
        return cls(_load_entries(LOCATIONS_RESOURCE, csv_path))


def _read_entries(handle: TextIO) -> List[Tuple[str, str]]:
    reader = csv.DictReader(handle)
    entries: List[Tuple[str, str]] = []
    for row in reader:
        code = (row.get("code") or "").strip()
        name = (row.get("name") or "").strip()
        if code and name:
            entries.append((code, name))
    return entries


def _load_entries(resource: str, csv_path: Path | None) -> List[Tuple[str, str]]:
    if csv_path is not None:
        with csv_path.open(newline="", encoding="utf-8") as handle:
            entries = _read_entries(handle)
        logger.info("Loaded %d directory entries from %s", len(entries), csv_path)
        return entries
    data_file = resources.files("shelf_inventory").joinpath("data").joinpath(resource)
    with data_file.open("r", encoding="utf-8", newline="") as handle:
        return _read_entries(handle)
