"""
Request/document context helpers.

We keep a small context (request_id, document_id, file_name) in ContextVars.
The HTTP middleware and the pipeline service set these values so logs from the
extractor and the OCR engine become correlatable for one document.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Dict, Optional

_VARS: Dict[str, ContextVar[Optional[str]]] = {
    name: ContextVar(name, default=None) for name in ("request_id", "document_id", "file_name")
}


def set_context(
    *,
    request_id: Optional[str] = None,
    document_id: Optional[str] = None,
    file_name: Optional[str] = None,
) -> None:
    """Set the given fields; None leaves a field unchanged."""
    values = {"request_id": request_id, "document_id": document_id, "file_name": file_name}
    for name, value in values.items():
        if value is not None:
            _VARS[name].set(value)


def clear_context() -> None:
    for var in _VARS.values():
        var.set(None)


def get_context() -> Dict[str, str]:
    """Only the fields that are currently set."""
    return {name: var.get() for name, var in _VARS.items() if var.get()}
