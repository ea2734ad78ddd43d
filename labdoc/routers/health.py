import asyncio

import pytesseract
from fastapi import APIRouter, Depends
from pytesseract import TesseractNotFoundError

from labdoc.api.deps import get_ocr_engine
from labdoc.ocr.engine import OcrEngine

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ocr/health")
async def ocr_health(ocr: OcrEngine = Depends(get_ocr_engine)):
    try:
        version = await asyncio.to_thread(pytesseract.get_tesseract_version)
    except TesseractNotFoundError:
        return {"status": "degraded", "tesseract": None, "worker_ready": ocr.is_worker_ready()}

    return {
        "status": "ok",
        "tesseract": str(version),
        "worker_ready": ocr.is_worker_ready(),
        "language": ocr.get_current_language() or None,
    }
