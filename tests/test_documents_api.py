import pytest
import pytesseract
from fastapi.testclient import TestClient
from pytesseract import TesseractNotFoundError

from helpers import LAB_LINE, make_pdf, png_bytes
from labdoc.api.deps import get_ocr_engine
from labdoc.main import app
from labdoc.services.document_service import DocumentService


@pytest.fixture
def client(ocr_engine):
    app.dependency_overrides[get_ocr_engine] = lambda: ocr_engine
    # no `with`: the lifespan (and its real Tesseract engine) stays out of the way
    yield TestClient(app)
    app.dependency_overrides.clear()


def pdf_upload(pages, name="report.pdf"):
    return {"file": (name, make_pdf(pages), "application/pdf")}


def png_upload(name="scan.png", width=200, height=100):
    return {"file": (name, png_bytes(width, height), "image/png")}


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_ocr_health_reports_version(client, monkeypatch):
    monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.4")

    body = client.get("/api/ocr/health").json()

    assert body["status"] == "ok"
    assert body["tesseract"] == "5.3.4"
    assert body["worker_ready"] is False


def test_ocr_health_without_binary(client, monkeypatch):
    def missing():
        raise TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "get_tesseract_version", missing)

    assert client.get("/api/ocr/health").json()["status"] == "degraded"


def test_request_id_is_echoed(client):
    resp = client.get("/api/health", headers={"x-request-id": "abc-123"})
    assert resp.headers["x-request-id"] == "abc-123"


def test_detect_text_pdf(client):
    resp = client.post("/api/documents/detect", files=pdf_upload([{"text": LAB_LINE}] * 2))

    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "text-pdf"
    assert body["needs_ocr"] is False
    assert body["page_count"] == 2
    assert body["metadata"]["is_valid"] is True


def test_detect_rejects_unsupported_as_data(client):
    resp = client.post(
        "/api/documents/detect",
        files={"file": ("tool.exe", b"MZ\x90", "application/x-msdownload")},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["metadata"]["is_valid"] is False
    assert body["confidence"] == 0.0


def test_detect_image_orientation(client):
    body = client.post("/api/documents/detect", files=png_upload(width=80, height=200)).json()
    assert body["type"] == "image"
    assert body["metadata"]["orientation"] == "portrait"


def test_extract_text(client):
    resp = client.post("/api/documents/extract-text", files=pdf_upload([{"text": LAB_LINE}] * 3))

    body = resp.json()
    assert resp.status_code == 200
    assert body["total_pages"] == 3
    assert [p["page_number"] for p in body["pages"]] == [1, 2, 3]
    assert body["errors"] == []


def test_extract_page_range(client):
    resp = client.post(
        "/api/documents/extract-text",
        files=pdf_upload([{"text": LAB_LINE}] * 4),
        data={"start_page": "3"},
    )

    assert [p["page_number"] for p in resp.json()["pages"]] == [3, 4]


def test_extract_text_rejects_images(client):
    resp = client.post("/api/documents/extract-text", files=png_upload())

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_FILE_TYPE"


def test_extract_text_rejects_empty_upload(client):
    resp = client.post("/api/documents/extract-text", files={"file": ("a.pdf", b"", "application/pdf")})

    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "FILE_EMPTY"
    assert error["details"] == {"file_name": "a.pdf"}


def test_extract_text_unreadable_pdf(client):
    resp = client.post(
        "/api/documents/extract-text",
        files={"file": ("x.pdf", b"not a pdf", "application/pdf")},
    )

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "PDF_PARSE_FAILED"


def test_ocr_image(client, worker_factory):
    resp = client.post(
        "/api/documents/ocr",
        files=png_upload(),
        data={"language": "eng,deu", "psm": "6"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["text"] == "Hemoglobin 13.5 g/dL"
    assert body["was_rotated"] is False
    assert len(body["words"]) == 3
    assert worker_factory.created[0].language == "eng+deu"
    assert int(worker_factory.created[0].psm_calls[0]) == 6


def test_ocr_rejects_pdf(client):
    resp = client.post("/api/documents/ocr", files=pdf_upload([{"text": LAB_LINE}]))
    assert resp.status_code == 422


def test_ocr_rejects_out_of_range_psm(client):
    resp = client.post("/api/documents/ocr", files=png_upload(), data={"psm": "14"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_process_scanned_pdf(client):
    resp = client.post("/api/documents/process", files=pdf_upload([{"image": True}] * 2))

    body = resp.json()
    assert resp.status_code == 200
    assert body["source"] == "ocr"
    assert body["detection"]["type"] == "scanned-pdf"
    assert body["ocr_confidence"] == 91.0
    assert body["text"].count("Hemoglobin") == 2


def test_process_invalid_file(client):
    resp = client.post(
        "/api/documents/process",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    body = resp.json()
    assert body["source"] == "none"
    assert body["text"] == ""
    assert body["detection"]["metadata"]["validation_error"] == "Unsupported file type: text/plain"


def test_unexpected_failure_is_500(ocr_engine, monkeypatch):
    async def explode(self, *args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(DocumentService, "process", explode)
    app.dependency_overrides[get_ocr_engine] = lambda: ocr_engine
    try:
        resp = TestClient(app, raise_server_exceptions=False).post(
            "/api/documents/process", files=png_upload()
        )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "INTERNAL_ERROR"
