"""Test helpers: in-memory PDFs/images and a fake Tesseract worker."""

import io
import struct
import zlib

import fitz  # PyMuPDF
from PIL import Image

from labdoc.documents.source import SourceDocument
from labdoc.ocr.types import BoundingBox, OCRProgress, OCRWord, Recognition

# 62 characters: above the 50-char "page has text" bar.
LAB_LINE = "Glucose: 95 mg/dL, reference range 70-99 mg/dL, fasting sample"


def png_bytes(width: int = 200, height: int = 100, color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def _png_chunk(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


def huge_png_header(width: int = 20_000, height: int = 20_000) -> bytes:
    """A few dozen bytes whose IHDR claims a pixel count past Pillow's decompression-bomb limit."""
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )


def empty_pdf() -> bytes:
    """A well-formed PDF whose page tree is empty (/Count 0)."""
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [] /Count 0 >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


def make_pdf(pages: list[dict]) -> bytes:
    """
    Build a PDF: one dict per page with optional "text" (str, may contain
    newlines) and "image" (bool) keys.
    """
    doc = fitz.open()
    for layout in pages:
        page = doc.new_page()
        if layout.get("text"):
            page.insert_text((72, 72), layout["text"], fontsize=9)
        if layout.get("image"):
            page.insert_image(fitz.Rect(72, 300, 272, 400), stream=png_bytes())
    data = doc.tobytes()
    doc.close()
    return data


def pdf_document(pages: list[dict], name: str = "report.pdf") -> SourceDocument:
    return SourceDocument.from_bytes(make_pdf(pages), name=name, content_type="application/pdf")


def png_document(width: int = 200, height: int = 100, name: str = "scan.png") -> SourceDocument:
    return SourceDocument.from_bytes(png_bytes(width, height), name=name, content_type="image/png")


def recognition(text: str = "Hemoglobin 13.5 g/dL", confidence: float = 91.0, rotate=None) -> Recognition:
    words = tuple(
        OCRWord(text=w, confidence=confidence, bbox=BoundingBox(x0=10 * i, y0=5, x1=10 * i + 8, y1=15))
        for i, w in enumerate(text.split())
    )
    return Recognition(text=text, confidence=confidence, words=words, rotate=rotate)


class FakeWorker:
    def __init__(self, language, hook, result: Recognition, rotation_threshold_deg=None):
        self.language = language
        self.rotation_threshold_deg = rotation_threshold_deg
        self.hook = hook
        self.result = result
        self.terminated = False
        self.psm_calls = []
        self.recognized = []

    async def set_parameters(self, *, page_segmentation_mode):
        self.psm_calls.append(page_segmentation_mode)

    async def recognize(self, image, *, auto_rotate=True):
        if self.hook:
            self.hook(OCRProgress(status="recognizing text", progress=1.0))
        self.recognized.append(image)
        return self.result

    async def terminate(self):
        self.terminated = True


class FakeWorkerFactory:
    def __init__(self, result: Recognition | None = None):
        self.result = result or recognition()
        self.created: list[FakeWorker] = []

    async def __call__(self, language, hook, *, rotation_threshold_deg=None):
        worker = FakeWorker(language, hook, self.result, rotation_threshold_deg)
        self.created.append(worker)
        return worker


