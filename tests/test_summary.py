from datetime import datetime, timedelta

from shelf_inventory.catalog import CatalogIndex
from shelf_inventory.ledger import SessionLedger
from shelf_inventory.report import NO_DATA_MESSAGE, render_summary
from shelf_inventory.summary import scan_rate, summarize


def _scan_mixed(session):
    session.process("101200012345")
    session.process("101200022222")
    session.process("101200012345")
    session.process("999900012345")


def test_summary_counts_only_the_active_collection(session):
    _scan_mixed(session)
    report = session.summary()
    assert report.total_scanned == 4
    assert report.active_collection == 6
    assert report.catalog_size == 7
    assert report.valid == 1
    assert report.invalid == 1
    assert report.missing == 4


def test_summary_breaks_down_locations(session):
    _scan_mixed(session)
    locations = {entry.location: entry for entry in session.summary().locations}
    assert (locations["GEN"].valid, locations["GEN"].warned, locations["GEN"].missing) == (1, 1, 3)
    assert locations["CHILD"].missing == 1


def test_summary_extra_views(session):
    _scan_mixed(session)
    report = session.summary()
    assert report.material_status_counts == {"0": 6, "1": 1}
    assert report.warning_counts == {"notLoanable": 1, "duplicate": 1, "invalidStructure": 1}
    assert report.hourly_progress == [("09:00", 4)]
    assert report.top_error_locations[0] == ("GEN", 2)


def test_scan_rate_rounds_scans_per_minute(session):
    _scan_mixed(session)
    # four scans six seconds apart span 18 seconds
    assert session.summary().scan_rate == 13


def test_scan_rate_edge_cases(clock):
    assert scan_rate([]) == 0
    frozen = SessionLedger(clock=lambda: datetime(2024, 1, 1))
    assert scan_rate([frozen.record("1", "1", "1", [], None)]) is None

    clock.step = timedelta(seconds=30)
    ledger = SessionLedger(clock=clock)
    events = [ledger.record(str(n), str(n), str(n), [], None) for n in range(3)]
    assert scan_rate(events) == 3


def test_no_data_is_explicit():
    assert summarize(CatalogIndex.empty(), SessionLedger()) is None
    assert NO_DATA_MESSAGE in render_summary(None)


def test_catalog_without_scans_reports_everything_missing(catalog):
    report = summarize(catalog, SessionLedger())
    assert report.missing == 6
    assert report.scan_rate == 0


def test_render_summary_lists_warnings(session):
    _scan_mixed(session)
    text = render_summary(session.summary(), session.warnings, session_name="Spring count")
    assert "Session: Spring count" in text
    assert "Missing: 4" in text
    assert "Scanned Again: 1" in text


def test_scanned_withdrawn_item_stays_out_of_the_headline(session):
    session.process("101200012345")
    before = session.summary()
    before_locations = {e.location: (e.valid, e.warned, e.missing) for e in before.locations}

    outcome = session.process("101200033333")
    assert outcome.event.has_warning("notInCollection")

    after = session.summary()
    assert after.total_scanned == 2
    assert (after.valid, after.invalid, after.missing, after.active_collection) == (
        before.valid,
        before.invalid,
        before.missing,
        before.active_collection,
    )
    assert {e.location: (e.valid, e.warned, e.missing) for e in after.locations} == before_locations
