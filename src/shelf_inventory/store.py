"""SQLite persistence for named counting sessions and custom directory entries."""
from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import SessionNotFoundError
from .logging_config import get_logger
from .snapshot import SessionSnapshot

logger = get_logger(__name__)

DB_PATH = Path("data/shelf_inventory.db")

LIBRARY_KIND = "library"
LOCATION_KIND = "location"


def get_connection(db_path: Path = DB_PATH) -> sqlite3.Connection:
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS sessions (
            name TEXT PRIMARY KEY,
            library_code TEXT NOT NULL,
            location_code TEXT,
            scan_count INTEGER NOT NULL DEFAULT 0,
            snapshot_json TEXT NOT NULL,
            last_updated TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS custom_entries (
            kind TEXT NOT NULL,
            code TEXT NOT NULL,
            name TEXT NOT NULL,
            PRIMARY KEY (kind, code)
        );

        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT
        );
        """
    )
    conn.commit()


def save_session(conn: sqlite3.Connection, snapshot: SessionSnapshot) -> None:
    now = datetime.now()
    snapshot = snapshot.model_copy(update={"last_updated": now})
    conn.execute(
        """
        INSERT INTO sessions (name, library_code, location_code, scan_count, snapshot_json, last_updated)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(name) DO UPDATE SET
            library_code = excluded.library_code,
            location_code = excluded.location_code,
            scan_count = excluded.scan_count,
            snapshot_json = excluded.snapshot_json,
            last_updated = excluded.last_updated
        """,
        (
            snapshot.session_name,
            snapshot.library_code,
            snapshot.location_code,
            len(snapshot.scan_events),
            snapshot.to_json(),
            now.isoformat(),
        ),
    )
    conn.commit()
    logger.info("Saved session %s (%d scans)", snapshot.session_name, len(snapshot.scan_events))


def load_session(conn: sqlite3.Connection, name: str) -> SessionSnapshot:
    row = conn.execute("SELECT snapshot_json FROM sessions WHERE name = ?", (name,)).fetchone()
    if row is None:
        raise SessionNotFoundError(name)
    return SessionSnapshot.from_json(row["snapshot_json"])


def session_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute("SELECT 1 FROM sessions WHERE name = ?", (name,)).fetchone()
    return row is not None


def list_sessions(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT name, library_code, location_code, scan_count, last_updated "
        "FROM sessions ORDER BY last_updated DESC"
    ).fetchall()
    return [dict(row) for row in rows]


def delete_session(conn: sqlite3.Connection, name: str) -> None:
    cursor = conn.execute("DELETE FROM sessions WHERE name = ?", (name,))
    if cursor.rowcount == 0:
        raise SessionNotFoundError(name)
    if get_active_session(conn) == name:
        conn.execute("DELETE FROM settings WHERE key = 'active_session'")
    conn.commit()
    logger.info("Deleted session %s", name)


def set_active_session(conn: sqlite3.Connection, name: Optional[str]) -> None:
    if name is None:
        conn.execute("DELETE FROM settings WHERE key = 'active_session'")
    else:
        conn.execute(
            "INSERT INTO settings (key, value) VALUES ('active_session', ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (name,),
        )
    conn.commit()


def get_active_session(conn: sqlite3.Connection) -> Optional[str]:
    row = conn.execute("SELECT value FROM settings WHERE key = 'active_session'").fetchone()
    return row["value"] if row else None


def save_custom_entry(conn: sqlite3.Connection, kind: str, code: str, name: str) -> None:
    if kind not in (LIBRARY_KIND, LOCATION_KIND):
        raise ValueError(f"Unknown directory kind: {kind}")
    conn.execute(
        "INSERT INTO custom_entries (kind, code, name) VALUES (?, ?, ?) "
        "ON CONFLICT(kind, code) DO UPDATE SET name = excluded.name",
        (kind, code, name),
    )
    conn.commit()


def list_custom_entries(conn: sqlite3.Connection, kind: str) -> List[Tuple[str, str]]:
    rows = conn.execute(
        "SELECT code, name FROM custom_entries WHERE kind = ? ORDER BY rowid", (kind,)
    ).fetchall()
    return [(row["code"], row["name"]) for row in rows]
