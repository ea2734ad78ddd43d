"""
document_service.py
- Purpose: Orchestrates "uploaded lab report -> plain text" end-to-end.
- Owns: detection, choosing PDF text vs OCR, page rendering for scans.
- Design: Thick service; routers and scripts stay thin.

Flow:
  image        -> OCR
  text PDF     -> full PDF text extraction
  scanned PDF  -> render pages -> OCR page by page
  invalid      -> nothing (detection result explains why)
"""

from __future__ import annotations

import logging
import uuid
from contextlib import aclosing
from dataclasses import dataclass

from labdoc.constants.document_types import DocumentType, TextSource
from labdoc.core.config import settings
from labdoc.core.request_context import set_context
from labdoc.detection.detector import DocumentDetector
from labdoc.detection.types import DocumentDetectionResult
from labdoc.documents.source import SourceDocument
from labdoc.ocr.engine import OcrEngine
from labdoc.ocr.types import Language, OCRResult, PageSegmentationMode
from labdoc.pdf.extract import extract_text_from_pdf
from labdoc.pdf.render import iter_page_pngs
from labdoc.pdf.types import PAGE_SEPARATOR, PDFExtractionResult, ProgressCallback

logger = logging.getLogger("labdoc.document_service")


@dataclass(frozen=True)
class ProcessedDocument:
    document_id: str
    detection: DocumentDetectionResult
    text: str
    source: TextSource
    extraction: PDFExtractionResult | None = None
    ocr_results: tuple[OCRResult, ...] = ()

    @property
    def ocr_confidence(self) -> float | None:
        """Mean OCR confidence (0-100) across recognised images, if OCR ran."""
        if not self.ocr_results:
            return None
        return sum(r.confidence for r in self.ocr_results) / len(self.ocr_results)


class DocumentService:
    def __init__(self, ocr: OcrEngine, detector: DocumentDetector | None = None):
        self.ocr = ocr
        self.detector = detector or DocumentDetector()

    async def process(
        self,
        file: SourceDocument,
        *,
        language: Language | None = None,
        page_segmentation_mode: PageSegmentationMode = PageSegmentationMode.AUTO,
        on_progress: ProgressCallback | None = None,
        document_id: str | None = None,
    ) -> ProcessedDocument:
        document_id = document_id or str(uuid.uuid4())
        set_context(document_id=document_id, file_name=file.name if file else None)
        language = language or settings.OCR_DEFAULT_LANGUAGE

        detection = await self.detector.detect(file)

        if not detection.metadata.is_valid and detection.type != DocumentType.SCANNED_PDF:
            logger.info(
                "document.skipped",
                extra={"validation_error": detection.metadata.validation_error},
            )
            return ProcessedDocument(
                document_id=document_id,
                detection=detection,
                text="",
                source=TextSource.NONE,
            )

        if detection.type == DocumentType.IMAGE:
            result = await self.ocr.recognize(
                file, language=language, page_segmentation_mode=page_segmentation_mode
            )
            if on_progress:
                on_progress(1, 1)
            return ProcessedDocument(
                document_id=document_id,
                detection=detection,
                text=result.text,
                source=TextSource.OCR,
                ocr_results=(result,),
            )

        if detection.type == DocumentType.TEXT_PDF:
            extraction = await extract_text_from_pdf(
                file, on_progress=on_progress, thresholds=self.detector.thresholds
            )
            logger.info(
                "document.text_extracted",
                extra={"pages": len(extraction.pages), "page_errors": len(extraction.errors)},
            )
            return ProcessedDocument(
                document_id=document_id,
                detection=detection,
                text=extraction.full_text,
                source=TextSource.PDF_TEXT,
                extraction=extraction,
            )

        return await self._ocr_scanned_pdf(
            file,
            detection,
            document_id=document_id,
            language=language,
            page_segmentation_mode=page_segmentation_mode,
            on_progress=on_progress,
        )

    async def _ocr_scanned_pdf(
        self,
        file: SourceDocument,
        detection: DocumentDetectionResult,
        *,
        document_id: str,
        language: Language,
        page_segmentation_mode: PageSegmentationMode,
        on_progress: ProgressCallback | None,
    ) -> ProcessedDocument:
        # A PDF that would not even open (degraded detection) cannot be rendered either;
        # the AppError from the renderer propagates to the caller.
        results: list[OCRResult] = []
        async with aclosing(iter_page_pngs(file, dpi=settings.PDF_RENDER_DPI)) as pages:
            async for page_number, total, png in pages:
                results.append(
                    await self.ocr.recognize(
                        png,
                        language=language,
                        page_segmentation_mode=page_segmentation_mode,
                    )
                )
                if on_progress:
                    on_progress(page_number, total)

        logger.info(
            "document.ocr_completed",
            extra={"pages": len(results), "language": str(language)},
        )
        return ProcessedDocument(
            document_id=document_id,
            detection=detection,
            text=PAGE_SEPARATOR.join(r.text.strip() for r in results),
            source=TextSource.OCR,
            ocr_results=tuple(results),
        )
