"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they may be surfaced in UI and logs.
"""

from enum import Enum


class ErrorReason(str, Enum):
    UNKNOWN = "Unknown error"

    INVALID_INPUT = "Invalid input"
    UNSUPPORTED_FILE = "Unsupported file type"
    FILE_TOO_LARGE = "File too large"
    PDF_INVALID = "Invalid PDF"
    PDF_ENCRYPTED = "PDF is password protected"
    IMAGE_INVALID = "Invalid image"
    DOWNLOAD_FAILED = "Download failed"
    OCR_UNAVAILABLE = "OCR engine unavailable"
    OCR_FAILED = "OCR request failed"
    INTERNAL_ERROR = "Internal server error"
    MISSING_DEPENDENCY = "Missing dependency"
