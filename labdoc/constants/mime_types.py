"""
mime_types.py
- Purpose: Central source of truth for accepted upload types.
- Design: Declared MIME type wins; the extension table is only a fallback.
"""

PDF_MIME_TYPE = "application/pdf"
GENERIC_BINARY_MIME_TYPE = "application/octet-stream"
UNKNOWN_MIME_TYPE = "unknown"

SUPPORTED_MIME_TYPES: dict[str, str] = {
    "pdf": PDF_MIME_TYPE,
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
}

EXTENSION_TO_MIME: dict[str, str] = {
    ".pdf": SUPPORTED_MIME_TYPES["pdf"],
    ".jpg": SUPPORTED_MIME_TYPES["jpeg"],
    ".jpeg": SUPPORTED_MIME_TYPES["jpeg"],
    ".png": SUPPORTED_MIME_TYPES["png"],
    ".webp": SUPPORTED_MIME_TYPES["webp"],
    ".gif": SUPPORTED_MIME_TYPES["gif"],
    ".bmp": SUPPORTED_MIME_TYPES["bmp"],
    ".tiff": SUPPORTED_MIME_TYPES["tiff"],
    ".tif": SUPPORTED_MIME_TYPES["tiff"],
}

IMAGE_MIME_TYPES: frozenset[str] = frozenset(
    mime for key, mime in SUPPORTED_MIME_TYPES.items() if key != "pdf"
)
