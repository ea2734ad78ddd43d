"""
documents.py
- Purpose: API routes for classifying, extracting and OCR-ing uploaded lab reports.
- Design: Keep router thin. Delegate business logic to services.
"""

import sys

from fastapi import APIRouter, Depends, File, Form, UploadFile

from labdoc.constants.mime_types import PDF_MIME_TYPE
from labdoc.core import ErrorCode, ErrorReason
from labdoc.core.config import settings
from labdoc.core.errors import unprocessable
from labdoc.api.deps import get_detector, get_document_service, get_ocr_engine
from labdoc.detection.detector import DocumentDetector
from labdoc.documents.source import SourceDocument
from labdoc.ocr.engine import OcrEngine
from labdoc.ocr.types import PageSegmentationMode
from labdoc.pdf.extract import extract_page_range, extract_text_from_pdf
from labdoc.schemas.document import DetectionResponse, ExtractionResponse, OCRResponse, ProcessResponse
from labdoc.services.document_service import DocumentService
from labdoc.validations.file_validators import ensure_valid_document, is_image_type, resolve_mime_type

router = APIRouter(prefix="/api/documents", tags=["Documents"])


def _languages(value: str) -> list[str]:
    # "eng+deu" or "eng,deu" both mean two languages
    return [v.strip() for v in value.replace(",", "+").split("+") if v.strip()]


@router.post("/detect", response_model=DetectionResponse)
async def detect_document(
    file: UploadFile = File(...),
    quick_scan: bool = Form(True),
    max_pages: int = Form(5),
    detector: DocumentDetector = Depends(get_detector),
):
    """Classify the upload. Invalid files come back with metadata.is_valid = false."""
    doc = await SourceDocument.from_upload(file)
    result = await detector.detect(doc, quick_scan=quick_scan, max_pages_to_scan=max_pages)
    return DetectionResponse.from_result(result)


@router.post("/extract-text", response_model=ExtractionResponse)
async def extract_text(
    file: UploadFile = File(...),
    max_pages: int | None = Form(None),
    start_page: int | None = Form(None),
    end_page: int | None = Form(None),
):
    doc = await SourceDocument.from_upload(file)
    ensure_valid_document(doc)
    if resolve_mime_type(doc) != PDF_MIME_TYPE:
        raise unprocessable(
            "Text extraction requires a PDF",
            code=ErrorCode.INVALID_FILE_TYPE,
            reason=ErrorReason.UNSUPPORTED_FILE,
        )

    if start_page is not None or end_page is not None:
        last = end_page if end_page is not None else sys.maxsize
        result = await extract_page_range(doc, start_page or 1, last)
    else:
        result = await extract_text_from_pdf(doc, max_pages=max_pages)
    return ExtractionResponse.from_result(result)


@router.post("/ocr", response_model=OCRResponse)
async def ocr_image(
    file: UploadFile = File(...),
    language: str = Form(settings.OCR_DEFAULT_LANGUAGE),
    psm: int = Form(int(PageSegmentationMode.AUTO), ge=0, le=13),
    auto_rotate: bool = Form(True),
    ocr: OcrEngine = Depends(get_ocr_engine),
):
    doc = await SourceDocument.from_upload(file)
    ensure_valid_document(doc)
    if not is_image_type(resolve_mime_type(doc)):
        raise unprocessable(
            "OCR accepts images only; send PDFs to /api/documents/process",
            code=ErrorCode.INVALID_FILE_TYPE,
            reason=ErrorReason.UNSUPPORTED_FILE,
        )

    result = await ocr.recognize(
        doc,
        language=_languages(language),
        auto_rotate=auto_rotate,
        page_segmentation_mode=PageSegmentationMode(psm),
    )
    return OCRResponse.from_result(result)


@router.post("/process", response_model=ProcessResponse)
async def process_document(
    file: UploadFile = File(...),
    language: str = Form(settings.OCR_DEFAULT_LANGUAGE),
    svc: DocumentService = Depends(get_document_service),
):
    """Full pipeline: detect, then PDF text or OCR. Invalid files return source = "none"."""
    doc = await SourceDocument.from_upload(file)
    processed = await svc.process(doc, language=_languages(language))
    return ProcessResponse.from_processed(processed)
