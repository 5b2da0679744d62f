from shelf_inventory.app import InventorySession


def test_bulk_reports_progress_per_chunk(session):
    session.chunk_size = 2
    values = ["101200012345", "101200022222", "9780134190440", "101200012345", "55"]
    steps = [(p.current, p.total) for p in session.iter_bulk(values)]
    assert steps == [(2, 5), (4, 5), (5, 5)]
    assert len(session.ledger) == 4


def test_bulk_is_silent_except_for_isbn(catalog_rows, libraries, locations, clock):
    notices = []
    session = InventorySession(
        libraries=libraries, locations=locations, notifier=notices.append, clock=clock
    )
    session.load_catalog(catalog_rows)
    session.start("12")
    progress = session.process_bulk(["101200022222", "9780134190440", "77"])
    assert progress.done
    assert progress.warned == 2
    assert [hit.normalized.identifier for hit in progress.isbn_hits] == ["9780134190440"]
    assert [n.kind for n in notices] == ["isbn"]


def test_stopping_iteration_stops_the_batch(session):
    session.chunk_size = 1
    batch = session.iter_bulk(["101200012345", "101200011111", "101200022222"])
    next(batch)
    batch.close()
    assert len(session.ledger) == 1


def test_empty_batch(session):
    progress = session.process_bulk([])
    assert progress.total == 0
    assert progress.done
