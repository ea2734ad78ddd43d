"""
exception_handlers.py
- Purpose: Turn AppError, request validation failures and unexpected exceptions
  into the single {"error": {...}} response shape the UI understands.
- Every handled error is logged once, with the request context attached by the
  JSON formatter.
"""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from labdoc.core import AppError, ErrorCode, ErrorReason
from labdoc.core.request_context import get_context

logger = logging.getLogger("labdoc.exceptions")


def _where(request: Request) -> dict:
    return {"method": request.method, "path": request.url.path}


def _error_body(code: str, reason: str, message: str, details=None) -> dict:
    error = {"code": code, "reason": reason, "message": message}
    if details:
        error["details"] = details
    rid = get_context().get("request_id")
    if rid:
        error["request_id"] = rid
    return {"error": error}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    # 5xx AppErrors (OCR engine down, tesseract crash) deserve more attention than bad uploads.
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "app_error",
        extra={
            **_where(request),
            "status_code": exc.status_code,
            "code": exc.code,
            "reason": exc.reason,
            "error_message": exc.message,
        },
    )
    body = exc.to_dict()
    rid = get_context().get("request_id")
    if rid:
        body["error"]["request_id"] = rid
    return JSONResponse(status_code=exc.status_code, content=body)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    logger.info("request_invalid", extra={**_where(request), "errors": errors})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            ErrorCode.VALIDATION_ERROR,
            ErrorReason.INVALID_INPUT,
            "Request validation failed",
            details={"errors": errors},
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", extra=_where(request))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(ErrorCode.INTERNAL_ERROR, ErrorReason.INTERNAL_ERROR, "Unhandled exception"),
    )
