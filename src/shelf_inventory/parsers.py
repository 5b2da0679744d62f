"""Readers for catalog exports and barcode batch files."""
from __future__ import annotations

from pathlib import Path
from typing import IO, List, Union

import pandas as pd

from .errors import InventoryError

SPREADSHEET_SUFFIXES = {".xlsx", ".xls"}
TEXT_SUFFIXES = {".txt", ".text", ""}

Source = Union[str, Path, IO[bytes]]


def _suffix(source: Source, filename: str | None) -> str:
    name = filename or (str(source) if isinstance(source, (str, Path)) else "")
    return Path(name).suffix.lower()


def load_catalog_frame(source: Source, filename: str | None = None) -> pd.DataFrame:
    """Read a catalog export into a DataFrame with every column as text.

    ``filename`` names the format when ``source`` is a file object (uploads).
    """
    suffix = _suffix(source, filename)
    if suffix in SPREADSHEET_SUFFIXES:
        return pd.read_excel(source, dtype=str)
    if suffix == ".csv":
        return pd.read_csv(source, dtype=str)
    raise InventoryError(f"Unsupported catalog format: {suffix or 'unknown'}")


def read_barcode_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def load_barcodes(source: Source, filename: str | None = None) -> List[str]:
    """Read a batch of scans: text lines, or the first column of a sheet."""
    suffix = _suffix(source, filename)
    if suffix in SPREADSHEET_SUFFIXES or suffix == ".csv":
        if suffix == ".csv":
            frame = pd.read_csv(source, dtype=str, header=None)
        else:
            frame = pd.read_excel(source, dtype=str, header=None)
        if frame.empty:
            return []
        column = frame.iloc[:, 0].dropna()
        return [value.strip() for value in column.astype(str) if value.strip()]
    if suffix in TEXT_SUFFIXES:
        if isinstance(source, (str, Path)):
            text = Path(source).read_text(encoding="utf-8")
        else:
            text = source.read().decode("utf-8")
        return read_barcode_lines(text)
    raise InventoryError(f"Unsupported barcode list format: {suffix}")
