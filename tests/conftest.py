import sys
from datetime import datetime, timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest

from shelf_inventory.app import InventorySession
from shelf_inventory.catalog import CatalogIndex
from shelf_inventory.directory import LibraryDirectory, LocationDirectory
from shelf_inventory.ledger import SessionLedger
from shelf_inventory.models import Scope


class FakeClock:
    """Deterministic clock advancing a fixed step per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=6)):
        self.current = start or datetime(2024, 3, 1, 9, 0, 0)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


def make_row(barcode, status="0", loan="0", location="GEN", on_loan="0", title=None):
    return {
        "barkod": barcode,
        "materyal_statusu_kodu": status,
        "odunc_verilebilirlik_kodu": loan,
        "materyalin_yeri_kodu": location,
        "odunc_durumu": on_loan,
        "eser_adi": title or f"Title {barcode}",
    }


@pytest.fixture()
def catalog_rows():
    return [
        make_row("101200012345", title="Dune"),
        make_row("101200000055", title="Short Barcode Book"),
        make_row("101200011111", location="CHILD", title="Picture Book"),
        make_row("101200022222", loan="1", title="Fragile Atlas"),
        make_row("101200033333", status="1", title="Withdrawn Novel"),
        make_row("101200044444", on_loan="1", title="Borrowed Poems"),
        make_row("101200055555", loan="2", title="Reference Encyclopedia"),
    ]


@pytest.fixture()
def catalog(catalog_rows) -> CatalogIndex:
    return CatalogIndex.from_rows(catalog_rows)


@pytest.fixture()
def libraries() -> LibraryDirectory:
    return LibraryDirectory([("12", "Central Library"), ("35", "Harbour Branch")])


@pytest.fixture()
def locations() -> LocationDirectory:
    return LocationDirectory([("GEN", "General Collection"), ("CHILD", "Children's Section")])


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ledger(clock) -> SessionLedger:
    return SessionLedger(clock=clock)


@pytest.fixture()
def scope() -> Scope:
    return Scope(library_code="12")


@pytest.fixture()
def session(catalog_rows, libraries, locations, clock) -> InventorySession:
    inventory = InventorySession(libraries=libraries, locations=locations, clock=clock)
    inventory.load_catalog(catalog_rows)
    inventory.start("12")
    return inventory


@pytest.fixture()
def row_factory():
    return make_row
