from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from labdoc.core.request_context import clear_context, set_context

logger = logging.getLogger("labdoc.http")

REQUEST_ID_HEADER = "x-request-id"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One request id per call (taken from the caller when supplied), pushed into
    the logging context so extractor and OCR logs for an upload line up.
    """

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_context(request_id=rid)
        route = f"{request.method} {request.url.path}"
        started = time.perf_counter()

        logger.info(
            "http.request",
            extra={"route": route, "upload_bytes": request.headers.get("content-length")},
        )
        try:
            response: Response = await call_next(request)
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "http.response",
                extra={"route": route, "status_code": response.status_code, "duration_ms": _elapsed_ms(started)},
            )
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        except Exception:
            logger.exception("http.failed", extra={"route": route, "duration_ms": _elapsed_ms(started)})
            raise
        finally:
            clear_context()
