"""
file_validators.py
- Purpose: Centralized validation for uploaded documents (PDF + raster images).
- Design: validate_document() never raises; failures come back as data so the
  pipeline can degrade gracefully. ensure_valid_document() is the HTTP-boundary
  variant that raises AppError with stable error codes for UI + logs.
"""

from __future__ import annotations

from labdoc.constants.mime_types import (
    EXTENSION_TO_MIME,
    GENERIC_BINARY_MIME_TYPE,
    IMAGE_MIME_TYPES,
    PDF_MIME_TYPE,
    SUPPORTED_MIME_TYPES,
    UNKNOWN_MIME_TYPE,
)
from labdoc.core import ErrorCode, ErrorReason
from labdoc.core.config import settings
from labdoc.core.errors import unprocessable
from labdoc.detection.types import DocumentMetadata
from labdoc.documents.source import SourceDocument


def resolve_mime_type(file: SourceDocument) -> str:
    """Declared type unless it is missing or the generic binary placeholder."""
    declared = (file.content_type or "").lower()
    if declared and declared != GENERIC_BINARY_MIME_TYPE:
        return declared

    return EXTENSION_TO_MIME.get(file.extension) or declared or UNKNOWN_MIME_TYPE


def is_supported_type(mime_type: str) -> bool:
    return mime_type == PDF_MIME_TYPE or mime_type in IMAGE_MIME_TYPES


def is_image_type(mime_type: str) -> bool:
    return mime_type in IMAGE_MIME_TYPES


def is_supported_document(file: SourceDocument) -> bool:
    return is_supported_type(resolve_mime_type(file))


def get_supported_extensions() -> list[str]:
    return list(EXTENSION_TO_MIME.keys())


def get_accept_string() -> str:
    """Value for an HTML <input accept=...> attribute."""
    return ",".join(SUPPORTED_MIME_TYPES.values())


def _find_problem(
    file: SourceDocument | None, max_bytes: int
) -> tuple[ErrorCode, ErrorReason, str] | None:
    # Basic presence check
    if file is None or not file.name:
        return ErrorCode.FILE_MISSING, ErrorReason.INVALID_INPUT, "Invalid file: missing file or filename"

    if file.size == 0:
        return ErrorCode.FILE_EMPTY, ErrorReason.INVALID_INPUT, "File is empty"

    if file.size > max_bytes:
        size_mb = round(file.size / 1024 / 1024)
        limit_mb = max_bytes // (1024 * 1024)
        return (
            ErrorCode.FILE_TOO_LARGE,
            ErrorReason.FILE_TOO_LARGE,
            f"File too large: {size_mb}MB exceeds {limit_mb}MB limit",
        )

    mime_type = resolve_mime_type(file)
    if not is_supported_type(mime_type):
        return ErrorCode.INVALID_FILE_TYPE, ErrorReason.UNSUPPORTED_FILE, f"Unsupported file type: {mime_type}"

    return None


def validate_document(file: SourceDocument | None, *, max_bytes: int | None = None) -> DocumentMetadata:
    max_bytes = settings.max_file_size_bytes if max_bytes is None else max_bytes

    problem = _find_problem(file, max_bytes)
    if problem is None:
        return DocumentMetadata(is_valid=True)

    _, _, message = problem
    return DocumentMetadata(is_valid=False, validation_error=message)


def ensure_valid_document(file: SourceDocument | None) -> DocumentMetadata:
    """Raise a 422 AppError when validate_document() would reject the file."""
    problem = _find_problem(file, settings.max_file_size_bytes)
    if problem is None:
        return DocumentMetadata(is_valid=True)

    code, reason, message = problem
    raise unprocessable(
        message,
        code=code,
        reason=reason,
        details={"file_name": getattr(file, "name", None)},
    )
