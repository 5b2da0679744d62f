"""Environment-backed settings."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .logging_config import parse_level

DEFAULT_DB_PATH = Path("data/shelf_inventory.db")
DEFAULT_CHUNK_SIZE = 200


@dataclass(frozen=True)
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: int = parse_level(None)
    libraries_csv: Optional[Path] = None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(dotenv_path: Path | None = None) -> Settings:
    """Read settings from the environment, loading a .env file first."""

    load_dotenv(dotenv_path)
    libraries_csv = os.getenv("SHELF_INVENTORY_LIBRARIES_CSV")
    return Settings(
        db_path=Path(os.getenv("SHELF_INVENTORY_DB", str(DEFAULT_DB_PATH))),
        chunk_size=_int_env("SHELF_INVENTORY_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        log_level=parse_level(os.getenv("SHELF_INVENTORY_LOG_LEVEL")),
        libraries_csv=Path(libraries_csv) if libraries_csv else None,
    )
