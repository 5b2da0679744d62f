"""FastAPI + Tailwind interface for shelf counts.

Run with:
    uvicorn shelf_inventory.web:app --reload
"""
from __future__ import annotations

import html
from io import BytesIO
from secrets import token_hex
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, Response

from .app import InventorySession
from .config import load_settings
from .directory import LibraryDirectory
from .errors import InventoryError
from .exporters import EXCEL_MIME, to_excel_bytes, to_txt
from .logging_config import get_logger
from .models import ScanEvent, ScanOutcome
from .report import render_summary
from .reports import REPORTS, WRITE_OFF_FILE_STEM, WRITE_OFF_REPORT

logger = get_logger(__name__)

app = FastAPI(title="Shelf Inventory", description="Count library shelves from the browser")

sessions: Dict[str, InventorySession] = {}


def _get_session(token: str) -> InventorySession:
    session = sessions.get(token)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session


def _new_session() -> InventorySession:
    settings = load_settings()
    return InventorySession(
        libraries=LibraryDirectory.load_default(settings.libraries_csv),
        chunk_size=settings.chunk_size,
    )


def _serialize_event(event: ScanEvent) -> Dict[str, Any]:
    return {
        "event_id": event.event_id,
        "barcode": event.resolved_identifier,
        "title": event.title,
        "valid": event.is_valid,
        "warnings": [
            {"code": w.code, "label": w.label, "message": w.message, "library": w.library_name}
            for w in event.warnings
        ],
        "timestamp": event.timestamp.isoformat(),
    }


def _serialize_outcome(outcome: ScanOutcome) -> Dict[str, Any]:
    result: Dict[str, Any] = {"kind": outcome.kind}
    if outcome.notice is not None:
        result["notice"] = {"code": outcome.notice.code, "message": outcome.notice.message}
    if outcome.event is not None:
        result["event"] = _serialize_event(outcome.event)
    return result


def _layout(content: str) -> str:
    """Wrap provided content in a Tailwind-powered HTML page."""

    return f"""
    <!doctype html>
    <html lang=\"en\" class=\"h-full bg-gray-50\">
    <head>
        <meta charset=\"utf-8\" />
        <title>Shelf Inventory</title>
        <link href=\"https://cdn.jsdelivr.net/npm/tailwindcss@3.4.4/dist/tailwind.min.css\" rel=\"stylesheet\" />
    </head>
    <body class=\"min-h-full py-10\">
        <div class=\"max-w-5xl mx-auto px-4\">
            <div class=\"bg-white shadow rounded-lg p-6\">
                <h1 class=\"text-3xl font-semibold text-gray-900\">Shelf Inventory</h1>
                <p class=\"text-gray-600 mt-2\">Upload a catalog export, choose the library being counted and scan barcodes to reconcile the shelves.</p>
                {content}
            </div>
        </div>
    </body>
    </html>
    """


def _start_page(error: str | None = None) -> str:
    error_block = ""
    if error:
        error_block = f"""
        <div class=\"mt-4 p-3 bg-red-50 border border-red-200 text-red-700 rounded\">{html.escape(error)}</div>
        """

    form = """
    <form action=\"/sessions\" method=\"post\" enctype=\"multipart/form-data\" class=\"bg-gray-50 border border-gray-200 rounded-lg p-4 mt-6\">
        <h2 class=\"text-xl font-semibold text-gray-800\">Start a count</h2>
        <label class=\"block text-sm font-medium text-gray-700 mt-3 mb-1\" for=\"library\">Library code</label>
        <input type=\"text\" name=\"library\" required class=\"w-full border border-gray-300 rounded-md p-2 text-sm\" />
        <label class=\"block text-sm font-medium text-gray-700 mt-3 mb-1\" for=\"location\">Location code (optional)</label>
        <input type=\"text\" name=\"location\" class=\"w-full border border-gray-300 rounded-md p-2 text-sm\" />
        <label class=\"block text-sm font-medium text-gray-700 mt-3 mb-1\" for=\"catalog\">Catalog export</label>
        <input type=\"file\" name=\"catalog\" accept=\".xlsx,.xls,.csv\" required class=\"block w-full text-sm text-gray-800\" />
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-indigo-600 text-white rounded-md shadow hover:bg-indigo-700\">Start counting</button>
    </form>
    """
    return _layout(error_block + form)


def _session_page(token: str, session: InventorySession) -> str:
    summary_text = html.escape(render_summary(session.summary(), session.warnings, session.name))
    report_links = "".join(
        f"""<li><a class=\"text-indigo-600 hover:underline\" href=\"/sessions/{token}/reports/{key}\">{html.escape(definition.title)}</a></li>"""
        for key, definition in REPORTS.items()
    )
    report_links += f"""<li><a class=\"text-indigo-600 hover:underline\" href=\"/sessions/{token}/reports/{WRITE_OFF_REPORT}\">Write-off barcodes (.txt)</a></li>"""

    content = f"""
    <div class=\"bg-gray-50 border border-gray-200 rounded-lg p-4 mt-6\">
        <h2 class=\"text-xl font-semibold text-gray-800\">Scan</h2>
        <p class=\"text-gray-600 text-sm mb-3\">Library {html.escape(session.scope.library_code)}, location {html.escape(session.scope.location_code or "all")}.</p>
        <form id=\"scan-form\" class=\"flex gap-2\">
            <input type=\"text\" name=\"barcode\" autofocus class=\"flex-1 border border-gray-300 rounded-md p-2 text-sm\" />
            <button type=\"submit\" class=\"px-4 py-2 bg-indigo-600 text-white rounded-md shadow hover:bg-indigo-700\">Add</button>
        </form>
        <pre id=\"scan-result\" class=\"mt-3 text-sm text-gray-700\"></pre>
    </div>
    <div class=\"mt-8\">
        <h2 class=\"text-xl font-semibold text-gray-800\">Summary</h2>
        <pre class=\"mt-3 bg-gray-900 text-green-100 p-4 rounded-lg whitespace-pre-wrap text-sm\">{summary_text}</pre>
    </div>
    <div class=\"mt-6\">
        <h2 class=\"text-xl font-semibold text-gray-800\">Reports</h2>
        <ul class=\"mt-2 list-disc list-inside text-sm\">{report_links}</ul>
    </div>
    <script>
        document.getElementById("scan-form").addEventListener("submit", async (event) => {{
            event.preventDefault();
            const response = await fetch("/sessions/{token}/scan", {{method: "POST", body: new FormData(event.target)}});
            document.getElementById("scan-result").textContent = JSON.stringify(await response.json(), null, 2);
            event.target.reset();
        }});
    </script>
    """
    return _layout(content)


@app.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    """Serve the session start form."""

    return HTMLResponse(_start_page())


@app.post("/sessions", response_class=HTMLResponse)
async def create_session(
    library: str = Form(...),
    location: Optional[str] = Form(None),
    catalog: UploadFile = File(...),
) -> HTMLResponse:
    """Load the uploaded catalog and open a new counting session."""

    session = _new_session()
    try:
        session.load_catalog_file(BytesIO(await catalog.read()), filename=catalog.filename)
        session.start(library, location)
    except InventoryError as exc:
        return HTMLResponse(_start_page(str(exc)), status_code=400)

    token = token_hex(8)
    sessions[token] = session
    logger.info("Opened web session %s for library %s", token, library)
    return HTMLResponse(_session_page(token, session))


@app.get("/sessions/{token}", response_class=HTMLResponse)
async def show_session(token: str) -> HTMLResponse:
    return HTMLResponse(_session_page(token, _get_session(token)))


@app.post("/sessions/{token}/scan")
def scan(token: str, barcode: str = Form(...)) -> Dict[str, Any]:
    """Classify one scanned barcode."""

    outcome = _get_session(token).process(barcode)
    return _serialize_outcome(outcome)


@app.get("/sessions/{token}/summary")
def summary(token: str) -> Dict[str, Any]:
    result = _get_session(token).summary()
    return {"summary": result.as_dict() if result else None}


@app.get("/sessions/{token}/reports/{name}")
def download_report(token: str, name: str) -> Response:
    """Serve a report as an Excel workbook, or the write-off list as text."""

    session = _get_session(token)
    if name == WRITE_OFF_REPORT:
        return Response(
            to_txt(session.write_off_lines()),
            media_type="text/plain",
            headers={"Content-Disposition": f'attachment; filename="{WRITE_OFF_FILE_STEM}.txt"'},
        )
    definition = REPORTS.get(name)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown report: {name}")
    return Response(
        to_excel_bytes(session.report(name)),
        media_type=EXCEL_MIME,
        headers={"Content-Disposition": f'attachment; filename="{definition.file_stem}.xlsx"'},
    )


@app.delete("/sessions/{token}/scans/{event_id}")
def delete_scan(token: str, event_id: int) -> Dict[str, Any]:
    removed = _get_session(token).delete_scan(event_id)
    if removed is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return {"deleted": removed.event_id}


def main() -> None:
    """Run the FastAPI app using uvicorn."""

    import uvicorn

    uvicorn.run("shelf_inventory.web:app", host="0.0.0.0", port=8000, reload=False)


__all__ = ["app", "main"]
