"""labdoc/pdf/extract.py

Deterministic PDF -> per-page text + image detection, using PyMuPDF (fitz).

- Pages are read strictly in order, one at a time.
- A page that fails is recorded in `errors` and kept as an empty page;
  only a document that cannot be opened at all raises.
- Quick scan stops as soon as the text/scanned decision is obvious.

PyMuPDF documents are not thread-safe, so every call touching a document runs
on a dedicated single-thread executor owned by that document.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Union

import fitz  # PyMuPDF

from labdoc.core import AppError, ErrorCode, ErrorReason
from labdoc.documents.source import SourceDocument
from labdoc.pdf.quality import ClassificationThresholds, score_pages, should_stop_early
from labdoc.pdf.types import PageExtractionResult, PDFExtractionResult, ProgressCallback

logger = logging.getLogger("labdoc.pdf.extract")

PdfInput = Union[SourceDocument, bytes, bytearray, memoryview]


def _as_bytes(file: PdfInput) -> bytes:
    if isinstance(file, SourceDocument):
        return file.data
    return bytes(file)


def _open_document(data: bytes) -> fitz.Document:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise AppError(
            code=ErrorCode.PDF_PARSE_FAILED,
            reason=ErrorReason.PDF_INVALID,
            message=f"Failed to extract text from PDF: {e}",
            status_code=422,
        ) from e

    if doc.needs_pass:
        doc.close()
        raise AppError(
            code=ErrorCode.PDF_PARSE_FAILED,
            reason=ErrorReason.PDF_ENCRYPTED,
            message="Failed to extract text from PDF: document is password protected",
            status_code=422,
        )
    # An empty page tree is still a readable container; callers get an empty result.
    return doc


def _text_runs(page: fitz.Page) -> list[str]:
    runs: list[str] = []
    layout = page.get_text("dict")
    for block in layout.get("blocks", []):
        # image blocks have no "lines"
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                runs.append(span.get("text", ""))
    return runs


def _read_page(doc: fitz.Document, page_number: int, min_text_chars: int) -> PageExtractionResult:
    page = doc.load_page(page_number - 1)
    text = " ".join(_text_runs(page)).strip()
    # get_image_info() lists images the page actually paints (XObjects and inline)
    has_images = bool(page.get_image_info())
    return PageExtractionResult(
        page_number=page_number,
        text=text,
        has_images=has_images,
        min_text_chars=min_text_chars,
    )


class OpenPdf:
    def __init__(self, doc: fitz.Document, executor: ThreadPoolExecutor):
        self.doc = doc
        self.page_count: int = doc.page_count
        self._executor = executor

    async def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)


@asynccontextmanager
async def open_pdf(file: PdfInput) -> AsyncIterator[OpenPdf]:
    data = _as_bytes(file)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="labdoc-pdf")
    loop = asyncio.get_running_loop()
    try:
        doc = await loop.run_in_executor(executor, _open_document, data)
        try:
            yield OpenPdf(doc, executor)
        finally:
            await loop.run_in_executor(executor, doc.close)
    finally:
        executor.shutdown(wait=False)


def _describe(exc: BaseException) -> str:
    detail = str(exc)
    return f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__


async def _extract_pages(
    pdf: OpenPdf,
    page_numbers: range,
    *,
    thresholds: ClassificationThresholds,
    report: Callable[[int], None],
    quick_scan: bool = False,
) -> tuple[list[PageExtractionResult], list[str]]:
    pages: list[PageExtractionResult] = []
    errors: list[str] = []

    for page_number in page_numbers:
        try:
            page = await pdf.call(_read_page, pdf.doc, page_number, thresholds.min_text_chars_per_page)
        except Exception as e:
            errors.append(f"Error extracting page {page_number}: {_describe(e)}")
            logger.warning(
                "pdf.page_failed",
                extra={"page_number": page_number, "error": _describe(e)},
            )
            page = PageExtractionResult.failed(page_number)

        pages.append(page)
        report(page_number)

        if quick_scan and should_stop_early(pages, thresholds):
            logger.debug("pdf.quick_scan_stop", extra={"pages_seen": len(pages)})
            break

    return pages, errors


async def extract_text_from_pdf(
    file: PdfInput,
    *,
    on_progress: ProgressCallback | None = None,
    quick_scan: bool = False,
    max_pages: int | None = None,
    thresholds: ClassificationThresholds | None = None,
) -> PDFExtractionResult:
    """
    Extract text from the first `max_pages` pages (all pages when unset or 0).

    `on_progress(page_number, total_pages)` fires after every processed page.
    Raises AppError(PDF_PARSE_FAILED) when the document cannot be opened.
    """
    thresholds = thresholds or ClassificationThresholds.from_settings()

    async with open_pdf(file) as pdf:
        total_pages = pdf.page_count
        pages_to_process = min(max_pages, total_pages) if max_pages else total_pages

        def report(page_number: int) -> None:
            if on_progress:
                on_progress(page_number, total_pages)

        pages, errors = await _extract_pages(
            pdf,
            range(1, pages_to_process + 1),
            thresholds=thresholds,
            report=report,
            quick_scan=quick_scan,
        )

    verdict = score_pages(pages, total_pages, thresholds)

    logger.info(
        "pdf.extracted",
        extra={
            "total_pages": total_pages,
            "pages_processed": len(pages),
            "pages_with_text": verdict.pages_with_text,
            "pages_with_images": verdict.pages_with_images,
            "is_scanned": verdict.is_scanned,
            "text_confidence": verdict.text_confidence,
            "page_errors": len(errors),
            "quick_scan": quick_scan,
        },
    )

    return PDFExtractionResult(
        total_pages=total_pages,
        pages=tuple(pages),
        is_scanned=verdict.is_scanned,
        text_confidence=verdict.text_confidence,
        errors=tuple(errors),
    )


async def extract_page_range(
    file: PdfInput,
    start_page: int,
    end_page: int,
    on_progress: ProgressCallback | None = None,
    *,
    thresholds: ClassificationThresholds | None = None,
) -> PDFExtractionResult:
    """
    Extract pages [start_page, end_page] (1-based, inclusive, clamped to the document).

    Progress is reported relative to the window: (1, n) ... (n, n).
    """
    thresholds = thresholds or ClassificationThresholds.from_settings()

    async with open_pdf(file) as pdf:
        total_pages = pdf.page_count
        first = max(1, start_page)
        last = min(total_pages, end_page)
        window = max(0, last - first + 1)

        def report(page_number: int) -> None:
            if on_progress:
                on_progress(page_number - first + 1, window)

        pages, errors = await _extract_pages(
            pdf,
            range(first, last + 1),
            thresholds=thresholds,
            report=report,
        )

    # The scanned budget is the window, not the whole document.
    verdict = score_pages(pages, len(pages), thresholds)

    logger.info(
        "pdf.range_extracted",
        extra={
            "total_pages": total_pages,
            "start_page": first,
            "end_page": last,
            "is_scanned": verdict.is_scanned,
            "page_errors": len(errors),
        },
    )

    return PDFExtractionResult(
        total_pages=total_pages,
        pages=tuple(pages),
        is_scanned=verdict.is_scanned,
        text_confidence=verdict.text_confidence,
        errors=tuple(errors),
    )


async def needs_ocr(file: PdfInput, *, max_pages: int = 5) -> bool:
    """Quick check: does this PDF look scanned?"""
    result = await extract_text_from_pdf(file, quick_scan=True, max_pages=max_pages)
    return result.is_scanned


async def get_page_count(file: PdfInput) -> int:
    async with open_pdf(file) as pdf:
        return pdf.page_count
