import pandas as pd
import pytest

from shelf_inventory.catalog import CatalogColumns, CatalogIndex
from shelf_inventory.errors import InventoryError, MissingColumnError


def test_index_keys_records_by_identifier(catalog):
    record = catalog.get("101200012345")
    assert record is not None
    assert record.title == "Dune"
    assert record.in_collection
    assert record.loanable
    assert not record.on_loan
    assert record.fields["eser_adi"] == "Dune"


def test_reference_source_code_counts_as_loanable(catalog):
    assert catalog.get("101200055555").loanable
    assert not catalog.get("101200022222").loanable


def test_active_records_exclude_written_off_items(catalog):
    active = {record.identifier for record in catalog.active_records()}
    assert "101200033333" not in active
    assert len(active) == len(catalog) - 1


def test_missing_identifier_column_is_rejected():
    with pytest.raises(MissingColumnError) as excinfo:
        CatalogIndex.from_rows([{"title": "No barcode"}])
    assert isinstance(excinfo.value, InventoryError)
    assert "barkod" in str(excinfo.value)


def test_last_duplicate_row_wins(row_factory):
    index = CatalogIndex.from_rows(
        [row_factory("101200012345", title="Old"), row_factory("101200012345", title="New")]
    )
    assert len(index) == 1
    assert index.get("101200012345").title == "New"


def test_dataframe_floats_are_folded_to_codes():
    frame = pd.DataFrame(
        {
            "barkod": ["101200012345", None],
            "materyal_statusu_kodu": [0.0, 1.0],
            "odunc_verilebilirlik_kodu": [2.0, 0.0],
            "materyalin_yeri_kodu": ["GEN", None],
            "odunc_durumu": [0.0, 0.0],
        }
    )
    index = CatalogIndex.from_dataframe(frame)
    assert len(index) == 1
    record = index.get("101200012345")
    assert record.status_code == "0"
    assert record.loan_eligibility_code == "2"


def test_custom_column_names():
    columns = CatalogColumns(identifier="barcode", status="status")
    index = CatalogIndex.from_rows([{"barcode": "101200012345", "status": "2"}], columns)
    assert not index.get("101200012345").in_collection


def test_empty_catalog_with_identifier_column_loads_empty():
    frame = pd.DataFrame({"barkod": [], "materyal_statusu_kodu": []})
    index = CatalogIndex.from_dataframe(frame)
    assert len(index) == 0
    assert CatalogIndex.from_rows([]).active_records() == []


def test_empty_catalog_without_identifier_column_is_rejected():
    with pytest.raises(MissingColumnError):
        CatalogIndex.from_dataframe(pd.DataFrame({"eser_adi": []}))
