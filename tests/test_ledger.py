from datetime import datetime

import pytest

from shelf_inventory.ledger import SessionLedger
from shelf_inventory.warning_types import DEFAULT_WARNINGS, DUPLICATE, ON_LOAN


def _record(ledger, identifier, warnings=()):
    return ledger.record(identifier, identifier, identifier, list(warnings), None)


def test_events_are_newest_first_with_increasing_ids(ledger):
    first = _record(ledger, "101200012345")
    second = _record(ledger, "101200011111")
    assert [e.event_id for e in ledger.events()] == [second.event_id, first.event_id]
    assert second.timestamp > first.timestamp
    assert ledger.last_event == second


def test_timestamps_stay_strictly_increasing_with_a_frozen_clock():
    frozen = datetime(2024, 3, 1, 9, 0)
    ledger = SessionLedger(clock=lambda: frozen)
    a = _record(ledger, "1")
    b = _record(ledger, "2")
    assert b.timestamp > a.timestamp


def test_removing_last_event_evicts_identifier_from_seen(ledger):
    event = _record(ledger, "101200012345")
    assert "101200012345" in ledger.seen
    assert ledger.remove(event.event_id) == event
    assert "101200012345" not in ledger
    assert ledger.remove(event.event_id) is None


def test_identifier_with_only_duplicates_left_is_not_seen(ledger):
    original = _record(ledger, "101200012345")
    _record(ledger, "101200012345", [DEFAULT_WARNINGS.issue(DUPLICATE)])
    ledger.remove(original.event_id)
    assert "101200012345" not in ledger.seen
    assert "101200012345" not in ledger
    assert len(ledger) == 1


def test_removing_a_duplicate_keeps_identifier_seen(ledger):
    _record(ledger, "101200012345")
    duplicate = _record(ledger, "101200012345", [DEFAULT_WARNINGS.issue(DUPLICATE)])
    ledger.remove(duplicate.event_id)
    assert "101200012345" in ledger.seen


def test_restored_duplicates_do_not_mark_seen(ledger):
    warned = _record(ledger, "1", [DEFAULT_WARNINGS.issue(DUPLICATE)])
    fresh = SessionLedger()
    fresh.restore(warned)
    assert "1" not in fresh.seen
    assert len(fresh) == 1


def test_clear_keeps_the_id_sequence(ledger):
    first = _record(ledger, "1")
    ledger.clear()
    assert not ledger
    assert _record(ledger, "2").event_id > first.event_id


def test_restore_rejects_duplicate_event_ids(ledger):
    event = _record(ledger, "1")
    with pytest.raises(ValueError):
        ledger.restore(event)


def test_filter_by_search_term_and_warning(ledger):
    _record(ledger, "101200012345")
    _record(ledger, "101200044444", [DEFAULT_WARNINGS.issue(ON_LOAN)])
    assert [e.identifier for e in ledger.filter("4444")] == ["101200044444"]
    assert [e.identifier for e in ledger.filter(warning_code=ON_LOAN)] == ["101200044444"]
    assert len(ledger.filter(warning_code="all")) == 2
