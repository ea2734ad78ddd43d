"""
document_types.py
- Purpose: Classification labels produced by the document detector.
- Design: str-valued so they serialize as-is in API responses and logs.
"""

from enum import Enum


class DocumentType(str, Enum):
    TEXT_PDF = "text-pdf"
    SCANNED_PDF = "scanned-pdf"
    IMAGE = "image"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class TextSource(str, Enum):
    PDF_TEXT = "pdf-text"
    OCR = "ocr"
    NONE = "none"
