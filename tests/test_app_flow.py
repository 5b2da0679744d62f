import pytest

from shelf_inventory.app import InventorySession
from shelf_inventory.errors import InventoryError, MissingColumnError


def test_failed_catalog_load_keeps_previous_catalog(session):
    with pytest.raises(MissingColumnError):
        session.load_catalog([{"title": "no barcode"}])
    assert len(session.catalog) == 7


def test_catalog_file_upload(tmp_path, session, row_factory):
    import pandas as pd

    path = tmp_path / "catalog.xlsx"
    pd.DataFrame([row_factory("101200077777", title="Fresh Arrival")]).to_excel(path, index=False)
    session.load_catalog_file(path)
    assert session.catalog.get("101200077777").title == "Fresh Arrival"


def test_non_numeric_library_is_rejected(libraries, locations):
    inventory = InventorySession(libraries=libraries, locations=locations)
    with pytest.raises(InventoryError):
        inventory.start("ABC")


def test_delete_scan_evicts_seen(session):
    event = session.process("101200012345").event
    assert session.delete_scan(event.event_id) == event
    assert session.process("101200012345").event.is_valid


def test_last_scanned_and_filter(session):
    session.process("101200012345")
    session.process("101200044444")
    assert session.last_scanned.identifier == "101200044444"
    assert [e.identifier for e in session.filter_scans("dune")] == ["101200012345"]
    assert [e.identifier for e in session.filter_scans(warning_code="onLoan")] == ["101200044444"]


def test_clear_scans_resets_summary_counts(session):
    session.process("101200012345")
    session.clear_scans()
    assert session.last_scanned is None
    assert session.summary().total_scanned == 0


def test_loan_list_marks_items_on_loan(session):
    session.process("101200012345")
    events = session.apply_loan_list(["101200012345", "101200011111"])
    assert len(events) == 2
    assert len(session.ledger) == 2
    assert all(event.has_warning("onLoan") for event in session.ledger.events())


def test_rescan_after_deleting_original_counts_as_present(session):
    first = session.process("101200012345").event
    session.process("101200012345")
    session.delete_scan(first.event_id)

    rescan = session.process("101200012345")
    assert rescan.event.is_valid
    summary = session.summary()
    assert summary.valid == 1
    assert summary.missing == 5
