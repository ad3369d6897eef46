"""API tests for the cockpit web frontend."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

import server
from rationale_tracker.cockpit import CockpitSession
from rationale_tracker.plugins.pdf_extractor import DocumentExtractionResult
from rationale_tracker.storage.state_store import MemoryStore
from rationale_tracker.utils.errors import INVALID_FILE_MESSAGE

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

MEMO = """Borrower: Northwind Foods
Approval Date: 03/15/2024

Cash Flow Predictability
Contracted revenue from three national grocers covers debt service twice over.
"""


class CannedPDFExtractor:
    def extract(self, pdf_bytes, filename, include_page_numbers=False):
        return DocumentExtractionResult(success=True, text=MEMO)


@pytest.fixture
def session(monkeypatch):
    session = CockpitSession(
        kv_store=MemoryStore(),
        pdf_extractor=CannedPDFExtractor(),
        clock=lambda: NOW,
    )
    monkeypatch.setattr(server, "get_session", lambda: session)
    return session


@pytest.fixture
def client(session):
    return TestClient(server.app)


def test_healthcheck(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_index_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Approval Rationale Tracker" in response.text


def test_empty_cockpit(client):
    body = client.get("/api/cockpit").json()

    assert body["loan"] is None
    assert body["rationales"] == []
    assert body["data_source"] == "none"
    assert body["data_source_label"] is None
    assert body["storage_warning"] is None


def test_load_demo(client):
    body = client.post("/api/cockpit/demo").json()

    assert body["loan"]["id"] == "CML-2024-00847"
    assert body["loan"]["approval_date"] == "2024-03-15"
    assert body["data_source_label"] == "Demo"
    assert [r["status"] for r in body["rationales"]] == ["Fresh", "Review Due", "Stale"]
    assert all(len(r["contextual_signals"]) <= 2 for r in body["rationales"])
    assert body["rationales"][0]["contextual_signals"][0]["updated"] == "2 weeks ago"


def test_mark_reviewed(client):
    client.post("/api/cockpit/demo")

    body = client.post("/api/cockpit/rationales/rat-003/review").json()

    assert body["rationales"][2]["status"] == "Fresh"
    assert body["rationales"][2]["days_since_review"] == 0


def test_unknown_rationale_is_404(client):
    client.post("/api/cockpit/demo")

    assert client.post("/api/cockpit/rationales/missing/review").status_code == 404
    assert client.post("/api/cockpit/pending/missing/confirm").status_code == 404
    assert client.post("/api/cockpit/pending/missing/reject").status_code == 404
    assert client.patch("/api/cockpit/pending/missing", data={"title": "X"}).status_code == 404


def test_import_and_confirm(client):
    response = client.post(
        "/api/cockpit/import",
        files={"file": ("northwind.pdf", b"%PDF-1.4 memo", "application/pdf")},
    )

    assert response.status_code == 202
    assert response.json()["request_id"] == 1
    assert response.json()["is_extracting"]

    body = client.get("/api/cockpit").json()
    assert not body["is_extracting"]
    assert body["data_source_label"] == "Imported Credit Memo"
    assert body["loan"]["borrower_reference"] == "Northwind Foods"
    assert body["loan"]["approval_date"] == "2024-03-15"
    assert body["show_confirmation"]
    pending = body["pending_rationales"]
    assert [p["title"] for p in pending] == ["Cash Flow Predictability"]

    edited = client.patch(
        f"/api/cockpit/pending/{pending[0]['id']}", data={"title": "Contracted Revenue"}
    ).json()
    assert edited["pending_rationales"][0]["title"] == "Contracted Revenue"

    body = client.post("/api/cockpit/pending/confirm-all").json()
    assert [r["title"] for r in body["rationales"]] == ["Contracted Revenue"]
    assert body["rationales"][0]["status"] == "Fresh"
    assert body["pending_rationales"] == []


def test_import_rejects_non_pdf(client):
    response = client.post(
        "/api/cockpit/import",
        files={"file": ("memo.docx", b"PK\x03\x04", "application/octet-stream")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == INVALID_FILE_MESSAGE


def test_import_rejects_empty_file(client):
    response = client.post(
        "/api/cockpit/import",
        files={"file": ("memo.pdf", b"", "application/pdf")},
    )

    assert response.status_code == 400


def test_toggle_confirmation(client):
    client.post(
        "/api/cockpit/import",
        files={"file": ("northwind.pdf", b"%PDF-1.4 memo", "application/pdf")},
    )

    body = client.post("/api/cockpit/confirmation", data={"show": "false"}).json()

    assert not body["show_confirmation"]
    assert len(body["pending_rationales"]) == 1


def test_summary_requires_loan(client):
    response = client.get("/api/cockpit/summary")

    assert response.status_code == 400
    assert response.json()["detail"] == "No loan loaded."


def test_summary_formats(client):
    client.post("/api/cockpit/demo")

    body = client.get("/api/cockpit/summary").json()
    assert body["loan_id"] == "CML-2024-00847"
    assert [item["status"] for item in body["rationales_needing_review"]] == ["Stale", "Review Due"]

    text = client.get("/api/cockpit/summary", params={"format": "text"})
    assert text.headers["content-type"].startswith("text/plain")
    assert text.text.startswith("ANNUAL REVIEW SUMMARY\n")
    assert text.text == body["summary_text"]


def test_clear(client, session):
    client.post("/api/cockpit/demo")

    body = client.delete("/api/cockpit").json()

    assert body["loan"] is None
    assert body["data_source"] == "none"
    assert session.kv_store.get(session.storage_key) is None


def test_polling_does_not_rewrite_snapshot(client, session, monkeypatch):
    client.post("/api/cockpit/demo")
    writes = []
    original_set = session.kv_store.set

    def recording_set(key, value):
        writes.append(key)
        original_set(key, value)

    monkeypatch.setattr(session.kv_store, "set", recording_set)

    client.get("/api/cockpit")
    client.get("/api/cockpit")

    assert writes == []
