import json
from io import BytesIO

import pandas as pd
import pytest

from shelf_inventory.errors import InventoryError
from shelf_inventory.exporters import to_csv, to_excel_bytes, to_json, to_txt
from shelf_inventory.parsers import load_barcodes, load_catalog_frame


def test_text_barcode_list_skips_blank_lines(tmp_path):
    path = tmp_path / "scans.txt"
    path.write_text("101200012345\n\n  55  \r\n", encoding="utf-8")
    assert load_barcodes(path) == ["101200012345", "55"]


def test_spreadsheet_barcodes_come_from_first_column(tmp_path):
    path = tmp_path / "scans.xlsx"
    pd.DataFrame({"barcode": ["101200012345", None, "55"], "note": ["a", "b", "c"]}).to_excel(
        path, index=False
    )
    assert load_barcodes(path) == ["barcode", "101200012345", "55"]


def test_uploaded_file_object_uses_filename_for_format():
    upload = BytesIO(b"101200012345\n101200011111\n")
    assert load_barcodes(upload, filename="batch.txt") == ["101200012345", "101200011111"]


def test_catalog_csv_reads_codes_as_text(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text("barkod,materyal_statusu_kodu\n101200012345,0\n", encoding="utf-8")
    frame = load_catalog_frame(path)
    assert frame.loc[0, "materyal_statusu_kodu"] == "0"


def test_unsupported_catalog_format(tmp_path):
    with pytest.raises(InventoryError):
        load_catalog_frame(tmp_path / "catalog.pdf")


def test_exporters_render_rows():
    rows = [{"Barcode": "101200012345", "Title": "Dune"}]
    assert to_csv(rows).splitlines()[0] == "Barcode,Title"
    assert json.loads(to_json(rows)) == rows
    assert to_txt(["a", "b"]) == "a\nb"
    frame = pd.read_excel(BytesIO(to_excel_bytes(rows)), dtype=str)
    assert frame.loc[0, "Title"] == "Dune"


def test_empty_report_still_produces_a_workbook():
    assert to_excel_bytes([])[:2] == b"PK"
