"""labdoc/detection/types.py

Value objects produced by validation + document type detection.
"""

from __future__ import annotations

from dataclasses import dataclass

from labdoc.constants.document_types import DocumentType, Orientation

PREVIEW_TEXT_CHARS = 500


@dataclass(frozen=True)
class DocumentMetadata:
    is_valid: bool
    validation_error: str | None = None
    orientation: Orientation | None = None  # images only
    text_confidence: float | None = None    # PDFs only, 0.0 - 1.0


@dataclass(frozen=True)
class DocumentDetectionResult:
    type: DocumentType
    mime_type: str
    file_name: str
    file_size: int
    needs_ocr: bool
    confidence: float  # 0.0 - 1.0
    metadata: DocumentMetadata
    page_count: int | None = None
    preview_text: str | None = None  # first PREVIEW_TEXT_CHARS of the PDF text
