import re
from io import BytesIO

import pandas as pd
import pytest

fastapi = pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from shelf_inventory.web import app


client = TestClient(app)


def _catalog_bytes(rows) -> bytes:
    buffer = BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False)
    return buffer.getvalue()


def _open_session(rows, library="12") -> str:
    response = client.post(
        "/sessions",
        data={"library": library},
        files={"catalog": ("catalog.xlsx", _catalog_bytes(rows), "application/octet-stream")},
    )
    assert response.status_code == 200
    match = re.search(r"/sessions/([a-f0-9]+)/scan", response.text)
    assert match is not None
    return match.group(1)


def test_homepage_renders_form():
    response = client.get("/")

    assert response.status_code == 200
    assert "Shelf Inventory" in response.text
    assert "tailwind" in response.text.lower()
    assert "name=\"catalog\"" in response.text
    assert "name=\"library\"" in response.text


def test_scan_summary_and_delete(catalog_rows):
    token = _open_session(catalog_rows)

    clean = client.post(f"/sessions/{token}/scan", data={"barcode": "101200012345"}).json()
    assert clean["kind"] == "scan"
    assert clean["event"]["valid"] is True

    isbn = client.post(f"/sessions/{token}/scan", data={"barcode": "9780134190440"}).json()
    assert isbn["kind"] == "isbn"
    assert isbn["notice"]["code"] == "isbnDetected"

    summary = client.get(f"/sessions/{token}/summary").json()["summary"]
    assert summary["total_scanned"] == 1
    assert summary["missing"] == 5

    deleted = client.delete(f"/sessions/{token}/scans/{clean['event']['event_id']}")
    assert deleted.status_code == 200
    assert client.delete(f"/sessions/{token}/scans/999").status_code == 404


def test_report_downloads(catalog_rows):
    token = _open_session(catalog_rows)
    client.post(f"/sessions/{token}/scan", data={"barcode": "101200012345"})

    report = client.get(f"/sessions/{token}/reports/missing")
    assert report.status_code == 200
    assert report.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    write_off = client.get(f"/sessions/{token}/reports/writeOff")
    assert "101200000055" in write_off.text
    assert client.get(f"/sessions/{token}/reports/unknown").status_code == 404


def test_bad_catalog_is_rejected():
    response = client.post(
        "/sessions",
        data={"library": "12"},
        files={"catalog": ("catalog.xlsx", _catalog_bytes([{"title": "x"}]), "application/octet-stream")},
    )
    assert response.status_code == 400
    assert "barkod" in response.text


def test_unknown_session_is_404():
    assert client.get("/sessions/deadbeef/summary").status_code == 404
