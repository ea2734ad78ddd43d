"""
document.py (schemas)
- Purpose: Response DTOs for the document ingestion API.
- Design: Keep API DTOs stable; include helper constructors for DRY mapping
  from the internal frozen dataclasses.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from labdoc.detection.types import DocumentDetectionResult
from labdoc.ocr.types import OCRResult
from labdoc.pdf.types import PDFExtractionResult
from labdoc.services.document_service import ProcessedDocument


class DocumentMetadataOut(BaseModel):
    is_valid: bool
    validation_error: Optional[str] = None
    orientation: Optional[Literal["portrait", "landscape"]] = None
    text_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class DetectionResponse(BaseModel):
    type: Literal["text-pdf", "scanned-pdf", "image"]
    mime_type: str
    file_name: str
    file_size: int = Field(ge=0)
    needs_ocr: bool
    confidence: float = Field(ge=0.0, le=1.0)
    page_count: Optional[int] = None
    preview_text: Optional[str] = Field(default=None, max_length=500)
    metadata: DocumentMetadataOut

    @classmethod
    def from_result(cls, result: DocumentDetectionResult) -> "DetectionResponse":
        meta = result.metadata
        return cls(
            type=result.type.value,
            mime_type=result.mime_type,
            file_name=result.file_name,
            file_size=result.file_size,
            needs_ocr=result.needs_ocr,
            confidence=result.confidence,
            page_count=result.page_count,
            preview_text=result.preview_text,
            metadata=DocumentMetadataOut(
                is_valid=meta.is_valid,
                validation_error=meta.validation_error,
                orientation=meta.orientation.value if meta.orientation else None,
                text_confidence=meta.text_confidence,
            ),
        )


class PageOut(BaseModel):
    page_number: int = Field(ge=1)
    text: str
    has_text: bool
    has_images: bool


class ExtractionResponse(BaseModel):
    total_pages: int
    full_text: str
    pages: list[PageOut]
    is_scanned: bool
    text_confidence: float = Field(ge=0.0, le=1.0)
    errors: list[str]

    @classmethod
    def from_result(cls, result: PDFExtractionResult) -> "ExtractionResponse":
        return cls(
            total_pages=result.total_pages,
            full_text=result.full_text,
            pages=[
                PageOut(
                    page_number=p.page_number,
                    text=p.text,
                    has_text=p.has_text,
                    has_images=p.has_images,
                )
                for p in result.pages
            ],
            is_scanned=result.is_scanned,
            text_confidence=result.text_confidence,
            errors=list(result.errors),
        )


class BoundingBoxOut(BaseModel):
    x0: int
    y0: int
    x1: int
    y1: int


class WordOut(BaseModel):
    text: str
    confidence: float
    bbox: BoundingBoxOut


class OCRResponse(BaseModel):
    text: str
    confidence: float = Field(ge=0.0, le=100.0)
    was_rotated: bool
    rotation_angle: float
    processing_time_ms: float = Field(ge=0.0)
    words: list[WordOut]

    @classmethod
    def from_result(cls, result: OCRResult) -> "OCRResponse":
        return cls(
            text=result.text,
            confidence=result.confidence,
            was_rotated=result.was_rotated,
            rotation_angle=result.rotation_angle,
            processing_time_ms=result.processing_time,
            words=[
                WordOut(
                    text=w.text,
                    confidence=w.confidence,
                    bbox=BoundingBoxOut(x0=w.bbox.x0, y0=w.bbox.y0, x1=w.bbox.x1, y1=w.bbox.y1),
                )
                for w in result.words
            ],
        )


class ProcessResponse(BaseModel):
    document_id: str
    source: Literal["pdf-text", "ocr", "none"]
    text: str
    detection: DetectionResponse
    ocr_confidence: Optional[float] = None
    page_errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_processed(cls, processed: ProcessedDocument) -> "ProcessResponse":
        return cls(
            document_id=processed.document_id,
            source=processed.source.value,
            text=processed.text,
            detection=DetectionResponse.from_result(processed.detection),
            ocr_confidence=processed.ocr_confidence,
            page_errors=list(processed.extraction.errors) if processed.extraction else [],
        )
