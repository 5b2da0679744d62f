"""Exporters for report datasets."""
from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

EXCEL_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def to_dataframe(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(list(rows))


def to_excel_bytes(rows: Sequence[Dict[str, Any]], sheet_name: str = "Report") -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        to_dataframe(rows).to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


def to_csv(rows: Sequence[Dict[str, Any]]) -> str:
    return to_dataframe(rows).to_csv(index=False)


def to_json(rows: Sequence[Dict[str, Any]]) -> str:
    return json.dumps(list(rows), indent=2, default=str, ensure_ascii=False)


def to_txt(lines: Sequence[str]) -> str:
    return "\n".join(lines)


REPORT_FORMATS = ("xlsx", "csv", "json")


def write_rows(rows: Sequence[Dict[str, Any]], path: Path) -> Path:
    """Write a dataset in the format named by the file suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower().lstrip(".")
    if suffix == "xlsx":
        path.write_bytes(to_excel_bytes(rows))
    elif suffix == "csv":
        path.write_text(to_csv(rows), encoding="utf-8")
    elif suffix == "json":
        path.write_text(to_json(rows), encoding="utf-8")
    else:
        raise ValueError(f"Unsupported report format: {suffix}")
    return path


def write_txt(lines: List[str], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_txt(lines), encoding="utf-8")
    return path
