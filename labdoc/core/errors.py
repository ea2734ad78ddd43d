"""
errors.py
- Purpose: AppError used across the pipeline for consistent, structured errors.
- Pattern: raise AppError(...) in extract/ocr/service code, handler converts to JSON response.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import status as http_status

from labdoc.core.error_codes import ErrorCode
from labdoc.core.error_reasons import ErrorReason


@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def __str__(self) -> str:
        return self.message if self.message else str(self.reason)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


# Convenience constructors
def unprocessable(
    message: str,
    *,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    reason: str = ErrorReason.INVALID_INPUT,
    details: dict | None = None,
) -> AppError:
    return AppError(
        code=code,
        reason=str(reason),
        status_code=http_status.HTTP_422_UNPROCESSABLE_ENTITY,
        details=details,
        message=message,
    )


def unavailable(message: str, *, details: dict | None = None) -> AppError:
    return AppError(
        code=ErrorCode.OCR_UNAVAILABLE,
        reason=str(ErrorReason.OCR_UNAVAILABLE),
        status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
        details=details,
        message=message,
    )
