"""
detector.py
- Purpose: Decide what an uploaded document is (text PDF / scanned PDF / image)
  and therefore whether OCR is needed.
- Design: detect_outcome() reports Ok / Degraded / Fatal explicitly; detect()
  collapses that into the plain DocumentDetectionResult most callers want.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from labdoc.constants.document_types import DocumentType, Orientation
from labdoc.constants.mime_types import PDF_MIME_TYPE, UNKNOWN_MIME_TYPE
from labdoc.core import AppError
from labdoc.core.config import settings
from labdoc.core.errors import unprocessable
from labdoc.core.outcome import Degraded, Fatal, Ok, Outcome
from labdoc.detection.types import PREVIEW_TEXT_CHARS, DocumentDetectionResult, DocumentMetadata
from labdoc.documents.source import SourceDocument
from labdoc.pdf.extract import extract_text_from_pdf
from labdoc.pdf.quality import ClassificationThresholds
from labdoc.validations.file_validators import is_image_type, resolve_mime_type, validate_document

logger = logging.getLogger("labdoc.detection")


def _read_orientation(data: bytes) -> Orientation:
    # Image.open only parses the header, which is all we need for the size.
    with Image.open(io.BytesIO(data)) as img:
        width, height = img.size
    return Orientation.LANDSCAPE if width > height else Orientation.PORTRAIT


class DocumentDetector:
    def __init__(
        self,
        *,
        thresholds: ClassificationThresholds | None = None,
        max_bytes: int | None = None,
    ):
        self.thresholds = thresholds or ClassificationThresholds.from_settings()
        self.max_bytes = max_bytes

    async def detect(
        self,
        file: SourceDocument | None,
        *,
        quick_scan: bool | None = None,
        max_pages_to_scan: int | None = None,
    ) -> DocumentDetectionResult:
        outcome = await self.detect_outcome(
            file, quick_scan=quick_scan, max_pages_to_scan=max_pages_to_scan
        )
        if isinstance(outcome, Fatal):
            return self._rejected(file, outcome.error)
        return outcome.value

    async def detect_outcome(
        self,
        file: SourceDocument | None,
        *,
        quick_scan: bool | None = None,
        max_pages_to_scan: int | None = None,
    ) -> Outcome[DocumentDetectionResult]:
        quick_scan = settings.PDF_QUICK_SCAN if quick_scan is None else quick_scan
        max_pages_to_scan = max_pages_to_scan or settings.PDF_MAX_PAGES_TO_SCAN

        validation = validate_document(file, max_bytes=self.max_bytes)
        if not validation.is_valid:
            logger.info(
                "document.rejected",
                extra={"validation_error": validation.validation_error},
            )
            return Fatal(error=unprocessable(validation.validation_error or "Invalid file"))

        mime_type = resolve_mime_type(file)
        if is_image_type(mime_type):
            outcome = self._detect_image(file, mime_type)
        else:
            outcome = await self._detect_pdf(file, quick_scan, max_pages_to_scan)

        result = outcome.value
        logger.info(
            "document.detected",
            extra={
                "type": result.type.value,
                "mime_type": result.mime_type,
                "needs_ocr": result.needs_ocr,
                "confidence": result.confidence,
                "page_count": result.page_count,
                "degraded": outcome.is_degraded,
            },
        )
        return outcome

    def _rejected(self, file: SourceDocument | None, error: AppError) -> DocumentDetectionResult:
        return DocumentDetectionResult(
            type=DocumentType.IMAGE,  # placeholder; callers must check metadata.is_valid
            mime_type=(file.content_type if file else None) or UNKNOWN_MIME_TYPE,
            file_name=(file.name if file else None) or "",
            file_size=file.size if file else 0,
            needs_ocr=False,
            confidence=0.0,
            metadata=DocumentMetadata(is_valid=False, validation_error=str(error)),
        )

    def _detect_image(self, file: SourceDocument, mime_type: str) -> Outcome[DocumentDetectionResult]:
        orientation: Orientation | None = None
        reason: str | None = None
        try:
            orientation = _read_orientation(file.data)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            reason = f"Could not read image dimensions: {e}"

        result = DocumentDetectionResult(
            type=DocumentType.IMAGE,
            mime_type=mime_type,
            file_name=file.name or "",
            file_size=file.size,
            needs_ocr=True,
            confidence=1.0,
            metadata=DocumentMetadata(is_valid=True, orientation=orientation),
        )
        if reason:
            return Degraded(value=result, reason=reason)
        return Ok(value=result)

    async def _detect_pdf(
        self, file: SourceDocument, quick_scan: bool, max_pages_to_scan: int
    ) -> Outcome[DocumentDetectionResult]:
        try:
            extraction = await extract_text_from_pdf(
                file,
                quick_scan=quick_scan,
                max_pages=max_pages_to_scan,
                thresholds=self.thresholds,
            )
        except AppError as e:
            # Unreadable as text is still readable as pixels: fall back to OCR.
            reason = f"Failed to parse PDF: {e}"
            return Degraded(
                value=DocumentDetectionResult(
                    type=DocumentType.SCANNED_PDF,
                    mime_type=PDF_MIME_TYPE,
                    file_name=file.name or "",
                    file_size=file.size,
                    needs_ocr=True,
                    confidence=0.0,
                    metadata=DocumentMetadata(is_valid=False, validation_error=reason),
                ),
                reason=reason,
            )

        preview = extraction.full_text[:PREVIEW_TEXT_CHARS]
        return Ok(
            value=DocumentDetectionResult(
                type=DocumentType.SCANNED_PDF if extraction.is_scanned else DocumentType.TEXT_PDF,
                mime_type=PDF_MIME_TYPE,
                file_name=file.name or "",
                file_size=file.size,
                needs_ocr=extraction.is_scanned,
                confidence=extraction.text_confidence,
                page_count=extraction.total_pages,
                preview_text=preview or None,
                metadata=DocumentMetadata(is_valid=True, text_confidence=extraction.text_confidence),
            )
        )


async def detect_document_type(
    file: SourceDocument | None,
    *,
    quick_scan: bool = True,
    max_pages_to_scan: int = 5,
) -> DocumentDetectionResult:
    return await DocumentDetector().detect(
        file, quick_scan=quick_scan, max_pages_to_scan=max_pages_to_scan
    )
