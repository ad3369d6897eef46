"""FastAPI frontend for the Approval Rationale Tracker cockpit."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import (
    BackgroundTasks,
    FastAPI,
    File,
    Form,
    HTTPException,
    Query,
    Request,
    UploadFile,
)
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from rationale_tracker.cockpit import CockpitSession, get_session
from rationale_tracker.models.loan import (
    ContextualSignal,
    DataSource,
    LoanCockpitState,
    PendingRationale,
    Rationale,
)
from rationale_tracker.services.signals import display_signals, format_time_since
from rationale_tracker.services.staleness import days_since_review
from rationale_tracker.utils.config import Config
from rationale_tracker.utils.errors import DocumentProcessingError
from rationale_tracker.utils.logging import setup_logging


CONFIG = Config.load()
setup_logging(CONFIG.logging.level, CONFIG.logging.format, CONFIG.logging.file or None)

APP_TITLE = CONFIG.app.title
MAX_FILE_SIZE_MB = CONFIG.uploads.max_file_size_mb
UPLOAD_LIMIT_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
DATA_SOURCE_LABELS = {
    DataSource.DEMO: "Demo",
    DataSource.EXTRACTED: "Imported Credit Memo",
}
TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")


@dataclass
class StoredUpload:
    """In-memory representation of an uploaded credit memo."""

    filename: str
    content_type: str
    data: bytes
    size: int


app = FastAPI(title=APP_TITLE)

templates = Jinja2Templates(directory=TEMPLATE_DIR)


def _read_upload(file: UploadFile) -> StoredUpload:
    data = file.file.read()
    size = len(data)
    if size == 0:
        raise HTTPException(status_code=400, detail=f"{file.filename} is empty.")
    if size > UPLOAD_LIMIT_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"{file.filename} exceeds the per-file limit of {MAX_FILE_SIZE_MB} MB.",
        )
    return StoredUpload(
        filename=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        data=data,
        size=size,
    )


def _serialize_signal(signal: ContextualSignal, now: datetime) -> Dict[str, Any]:
    return {
        "id": signal.id,
        "description": signal.description,
        "updated_at": signal.updated_at.isoformat(),
        "updated": format_time_since(signal.updated_at, now),
    }


def _serialize_rationale(rationale: Rationale, now: datetime) -> Dict[str, Any]:
    return {
        "id": rationale.id,
        "title": rationale.title,
        "description": rationale.description,
        "status": rationale.status.value,
        "created_at": rationale.created_at.isoformat(),
        "last_reviewed_at": rationale.last_reviewed_at.isoformat(),
        "days_since_review": max(0, days_since_review(rationale.last_reviewed_at, now)),
        "contextual_signals": [
            _serialize_signal(signal, now) for signal in display_signals(rationale)
        ],
    }


def _serialize_pending(pending: PendingRationale) -> Dict[str, Any]:
    return {
        "id": pending.id,
        "title": pending.title,
        "description": pending.description,
        "extracted_at": pending.extracted_at.isoformat(),
        "source_text": pending.source_text,
    }


def _cockpit_payload(session: CockpitSession, state: Optional[LoanCockpitState] = None) -> Dict[str, Any]:
    state = state or session.state
    now = session.clock()
    loan = state.loan

    return {
        "loan": {
            "id": loan.id,
            "approval_date": loan.approval_date.isoformat(),
            "borrower_reference": loan.borrower_reference,
            "approval_logic_age_months": session.approval_logic_age(),
        } if loan else None,
        "rationales": [_serialize_rationale(r, now) for r in state.rationales],
        "pending_rationales": [_serialize_pending(p) for p in state.pending_rationales],
        "is_extracting": state.is_extracting,
        "show_confirmation": state.show_confirmation,
        "data_source": state.data_source.value,
        "data_source_label": DATA_SOURCE_LABELS.get(state.data_source),
        "extraction_message": session.extraction_message,
        "storage_warning": session.storage_warning,
    }


def _respond(session: CockpitSession, state: Optional[LoanCockpitState] = None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(_cockpit_payload(session, state)))


def _require(state: Optional[LoanCockpitState], detail: str) -> LoanCockpitState:
    if state is None:
        raise HTTPException(status_code=404, detail=detail)
    return state


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    context = {
        "app_title": APP_TITLE,
        "max_file_size": MAX_FILE_SIZE_MB,
    }
    return templates.TemplateResponse(request, "index.html", context)


@app.get("/api/cockpit")
async def cockpit_state() -> JSONResponse:
    session = get_session()
    # Tiers drift with the clock while the process stays up
    return _respond(session, session.refresh_statuses())


@app.post("/api/cockpit/demo")
async def load_demo() -> JSONResponse:
    session = get_session()
    return _respond(session, session.load_demo())


@app.post("/api/cockpit/import", status_code=202)
async def import_credit_memo(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
) -> JSONResponse:
    session = get_session()
    upload = _read_upload(file)

    try:
        request_id = session.import_document(upload.filename, upload.data)
    except DocumentProcessingError as e:
        raise HTTPException(status_code=400, detail=e.user_message)

    background_tasks.add_task(session.run_extraction, request_id, upload.filename, upload.data)

    payload = _cockpit_payload(session)
    payload["request_id"] = request_id
    return JSONResponse(jsonable_encoder(payload), status_code=202)


@app.post("/api/cockpit/pending/confirm-all")
async def confirm_all() -> JSONResponse:
    session = get_session()
    return _respond(session, session.confirm_all())


@app.post("/api/cockpit/pending/{rationale_id}/confirm")
async def confirm_rationale(rationale_id: str) -> JSONResponse:
    session = get_session()
    state = _require(session.confirm_rationale(rationale_id), "Pending rationale not found.")
    return _respond(session, state)


@app.post("/api/cockpit/pending/{rationale_id}/reject")
async def reject_rationale(rationale_id: str) -> JSONResponse:
    session = get_session()
    state = _require(session.reject_rationale(rationale_id), "Pending rationale not found.")
    return _respond(session, state)


@app.patch("/api/cockpit/pending/{rationale_id}")
async def edit_rationale(
    rationale_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
) -> JSONResponse:
    session = get_session()
    state = _require(
        session.edit_pending_rationale(rationale_id, title, description),
        "Pending rationale not found.",
    )
    return _respond(session, state)


@app.post("/api/cockpit/confirmation")
async def set_confirmation(show: bool = Form(...)) -> JSONResponse:
    session = get_session()
    return _respond(session, session.set_show_confirmation(show))


@app.post("/api/cockpit/rationales/{rationale_id}/review")
async def mark_reviewed(rationale_id: str) -> JSONResponse:
    session = get_session()
    state = _require(session.mark_reviewed(rationale_id), "Rationale not found.")
    return _respond(session, state)


@app.get("/api/cockpit/summary")
async def review_summary(output: str = Query("json", alias="format")):
    session = get_session()
    summary = session.summary()
    if summary is None:
        raise HTTPException(status_code=400, detail="No loan loaded.")

    if output == "text":
        return PlainTextResponse(summary.summary_text)

    return JSONResponse(jsonable_encoder({
        "loan_id": summary.loan_id,
        "generated_at": summary.generated_at.isoformat(),
        "rationales_needing_review": [
            {
                "title": item.title,
                "status": item.status.value,
                "days_since_review": item.days_since_review,
            }
            for item in summary.rationales_needing_review
        ],
        "summary_text": summary.summary_text,
    }))


@app.delete("/api/cockpit")
async def clear_cockpit() -> JSONResponse:
    session = get_session()
    return _respond(session, session.clear())


@app.get("/healthz")
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}
