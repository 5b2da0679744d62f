"""Command line interface for offline shelf counts."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from .app import InventorySession
from .config import load_settings
from .directory import LibraryDirectory
from .errors import InventoryError
from .exporters import REPORT_FORMATS, write_rows, write_txt
from .logging_config import get_logger, set_log_level
from .parsers import load_barcodes
from .report import render_summary
from .reports import REPORTS, WRITE_OFF_FILE_STEM
from .snapshot import SessionSnapshot

logger = get_logger(__name__)


def _write_reports(session: InventorySession, report_dir: Path, fmt: str) -> List[Path]:
    written = []
    for key, definition in REPORTS.items():
        rows = session.report(key)
        written.append(write_rows(rows, report_dir / f"{definition.file_stem}.{fmt}"))
    written.append(write_txt(session.write_off_lines(), report_dir / f"{WRITE_OFF_FILE_STEM}.txt"))
    return written


def _run(args: argparse.Namespace) -> int:
    settings = load_settings()
    set_log_level(settings.log_level)
    session = InventorySession(
        libraries=LibraryDirectory.load_default(settings.libraries_csv),
        chunk_size=settings.chunk_size,
    )
    session.load_catalog_file(args.catalog)

    if args.snapshot_in:
        snapshot = SessionSnapshot.from_json(args.snapshot_in.read_text(encoding="utf-8"))
        session.restore(snapshot)
    if args.library:
        session.start(args.library, args.location, name=args.session_name)
    if not session.scope.is_set:
        raise InventoryError("A library code is required (--library or --snapshot-in)")

    if args.scans:
        progress = session.process_bulk(load_barcodes(args.scans))
        for hit in progress.isbn_hits:
            print(f"ISBN scanned instead of a barcode: {hit.normalized.identifier}", file=sys.stderr)
    if args.loan_list:
        session.apply_loan_list(load_barcodes(args.loan_list))

    summary = session.summary()
    print(render_summary(summary, session.warnings, session_name=session.name))

    if args.json_output:
        payload = summary.as_dict() if summary else None
        args.json_output.write_text(json.dumps(payload, indent=2, default=str))
    if args.snapshot_out:
        args.snapshot_out.write_text(session.snapshot().to_json(), encoding="utf-8")
    if args.report_dir:
        for path in _write_reports(session, args.report_dir, args.format):
            logger.info("Wrote %s", path)
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reconcile shelf scans against a catalog export")
    parser.add_argument("catalog", type=Path, help="Catalog export (.xlsx, .xls or .csv)")
    parser.add_argument("--library", help="Numeric code of the library being counted")
    parser.add_argument("--location", help="Restrict the count to one location code")
    parser.add_argument("--session-name", help="Name stored with the session snapshot")
    parser.add_argument(
        "--scans",
        type=Path,
        help="Barcodes to reconcile: a .txt file with one per line or the first column of a sheet",
    )
    parser.add_argument(
        "--loan-list",
        type=Path,
        help="Barcodes currently on loan; each is recorded as a single on-loan scan",
    )
    parser.add_argument("--snapshot-in", type=Path, help="Resume from a saved session snapshot (JSON)")
    parser.add_argument("--snapshot-out", type=Path, help="Save the session snapshot as JSON")
    parser.add_argument(
        "--report-dir",
        type=Path,
        help="Write every report plus the write-off barcode list",
    )
    parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default="xlsx",
        help="File format for --report-dir (default: xlsx)",
    )
    parser.add_argument("--json-output", type=Path, help="Write the summary as JSON")
    args = parser.parse_args(argv)

    try:
        return _run(args)
    except InventoryError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
