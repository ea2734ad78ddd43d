# labdoc/core/__init__.py
from labdoc.core.errors import AppError
from labdoc.core.error_codes import ErrorCode
from labdoc.core.error_reasons import ErrorReason

__all__ = ["AppError", "ErrorCode", "ErrorReason"]
