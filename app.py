from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shelf_inventory import store  # noqa: E402
from shelf_inventory.app import InventorySession  # noqa: E402
from shelf_inventory.config import load_settings  # noqa: E402
from shelf_inventory.directory import LibraryDirectory  # noqa: E402
from shelf_inventory.errors import InventoryError  # noqa: E402
from shelf_inventory.exporters import EXCEL_MIME, to_excel_bytes, to_txt  # noqa: E402
from shelf_inventory.models import ScanEvent  # noqa: E402
from shelf_inventory.parsers import load_barcodes  # noqa: E402
from shelf_inventory.reports import REPORTS, WRITE_OFF_FILE_STEM  # noqa: E402
from shelf_inventory.warning_types import primary_warning  # noqa: E402


def _session() -> InventorySession:
    if "inventory" not in st.session_state:
        settings = load_settings()
        session = InventorySession(
            libraries=LibraryDirectory.load_default(settings.libraries_csv),
            chunk_size=settings.chunk_size,
        )
        conn = _connection()
        for code, name in store.list_custom_entries(conn, store.LIBRARY_KIND):
            session.add_library(code, name)
        for code, name in store.list_custom_entries(conn, store.LOCATION_KIND):
            session.add_location(code, name)
        st.session_state["inventory"] = session
    return st.session_state["inventory"]


@st.cache_resource
def _connection():
    conn = store.get_connection(load_settings().db_path)
    store.init_db(conn)
    return conn


def _event_rows(events: List[ScanEvent]) -> pd.DataFrame:
    rows = []
    for event in events:
        warning = primary_warning(event.warnings)
        rows.append(
            {
                "#": event.event_id,
                "Barcode": event.resolved_identifier,
                "Title": event.title or "",
                "Status": warning.message if warning else "OK",
                "Scanned At": event.timestamp.strftime("%H:%M:%S"),
            }
        )
    return pd.DataFrame(rows)


def _sidebar(session: InventorySession) -> None:
    conn = _connection()
    st.sidebar.header("Saved sessions")
    saved = store.list_sessions(conn)
    names = [row["name"] for row in saved]
    if names:
        choice = st.sidebar.selectbox("Session", names)
        if st.sidebar.button("Load session"):
            session.restore(store.load_session(conn, choice))
            store.set_active_session(conn, choice)
            st.sidebar.success(f"Loaded {choice}")
        if st.sidebar.button("Delete session"):
            store.delete_session(conn, choice)
            st.sidebar.info(f"Deleted {choice}")
    name = st.sidebar.text_input("Session name", value=session.name)
    if st.sidebar.button("Save session"):
        if store.session_exists(conn, name):
            st.sidebar.info(f"Overwriting saved session {name}.")
        session.name = name
        store.save_session(conn, session.snapshot())
        store.set_active_session(conn, name)
        st.sidebar.success("Session saved.")

    with st.sidebar.expander("Add a library or location"):
        kind = st.radio("Kind", ["Library", "Location"], horizontal=True)
        code = st.text_input("Code")
        label = st.text_input("Name")
        if st.button("Add entry"):
            try:
                if kind == "Library":
                    session.add_library(code, label)
                    store.save_custom_entry(conn, store.LIBRARY_KIND, code.strip(), label.strip())
                else:
                    session.add_location(code, label)
                    store.save_custom_entry(conn, store.LOCATION_KIND, code.strip(), label.strip())
            except ValueError as exc:
                st.error(str(exc))


def main() -> None:
    st.set_page_config(page_title="Shelf Inventory", layout="wide")
    st.title("Shelf Inventory")
    st.caption("Load a catalog export, scan the shelves, and download the reconciliation reports.")

    session = _session()
    _sidebar(session)

    catalog_file = st.file_uploader("Catalog export", type=["xlsx", "xls", "csv"])
    if catalog_file is not None and st.session_state.get("catalog_name") != catalog_file.name:
        try:
            index = session.load_catalog_file(catalog_file, filename=catalog_file.name)
        except InventoryError as exc:
            st.error(str(exc))
        else:
            st.session_state["catalog_name"] = catalog_file.name
            st.success(f"Loaded {len(index)} catalog records.")

    libraries = session.libraries.as_dict()
    locations = {"": "All locations", **session.locations.as_dict()}
    col1, col2 = st.columns(2)
    library_code = col1.selectbox(
        "Library",
        list(libraries),
        format_func=lambda code: f"{code} - {libraries[code]}",
    )
    location_code = col2.selectbox(
        "Location", list(locations), format_func=lambda code: locations[code]
    )
    if (session.scope.library_code, session.scope.location_code or "") != (library_code, location_code):
        session.start(library_code, location_code or None)

    barcode = st.text_input("Scan or type a barcode")
    if st.button("Add scan") and barcode:
        outcome = session.process(barcode)
        if outcome.notice is not None:
            st.warning(outcome.notice.message)
        elif outcome.event is not None:
            warning = primary_warning(outcome.event.warnings)
            if warning:
                st.warning(f"{outcome.event.resolved_identifier}: {warning.message}")
            else:
                st.success(f"{outcome.event.resolved_identifier} OK")

    bulk_file = st.file_uploader("Bulk scan file", type=["txt", "xlsx", "xls"])
    if bulk_file is not None and st.button("Process bulk file"):
        values = load_barcodes(bulk_file, filename=bulk_file.name)
        bar = st.progress(0.0)
        isbn_hits = []
        for progress in session.iter_bulk(values):
            bar.progress(progress.current / max(progress.total, 1))
            isbn_hits = progress.isbn_hits
        for hit in isbn_hits:
            st.warning(f"ISBN scanned instead of a barcode: {hit.normalized.identifier}")

    loan_file = st.file_uploader("Current loan list", type=["txt", "xlsx", "xls"])
    if loan_file is not None and st.button("Apply loan list"):
        events = session.apply_loan_list(load_barcodes(loan_file, filename=loan_file.name))
        st.info(f"Marked {len(events)} barcodes as on loan.")

    st.subheader("Scans")
    search = st.text_input("Search barcode or title")
    warning_options = ["all"] + [definition.key for definition in session.warnings]
    warning_code = st.selectbox("Warning", warning_options, format_func=session.warnings.label_for)
    events = session.filter_scans(search, warning_code)
    if events:
        st.dataframe(_event_rows(events), use_container_width=True, hide_index=True)
    if st.button("Clear all scans"):
        session.clear_scans()

    st.divider()
    st.subheader("Summary")
    summary = session.summary()
    if summary is None:
        st.info("No data yet. Load a catalog or scan items.")
        return
    metrics = st.columns(5)
    metrics[0].metric("Active collection", summary.active_collection)
    metrics[1].metric("Valid", summary.valid)
    metrics[2].metric("With warnings", summary.invalid)
    metrics[3].metric("Missing", summary.missing)
    metrics[4].metric("Scans / minute", summary.scan_rate_display)
    st.dataframe(
        pd.DataFrame([vars(entry) for entry in summary.locations]),
        use_container_width=True,
        hide_index=True,
    )

    st.subheader("Reports")
    for key, definition in REPORTS.items():
        rows = session.report(key)
        st.download_button(
            f"{definition.title} ({len(rows)})",
            data=to_excel_bytes(rows),
            file_name=f"{definition.file_stem}.xlsx",
            mime=EXCEL_MIME,
            help=definition.description,
            key=f"download-{key}",
        )
    st.download_button(
        "Write-off barcodes (.txt)",
        data=to_txt(session.write_off_lines()),
        file_name=f"{WRITE_OFF_FILE_STEM}.txt",
        mime="text/plain",
    )


if __name__ == "__main__":
    main()
