from fastapi import Depends, Request

from labdoc.detection.detector import DocumentDetector
from labdoc.ocr.engine import OcrEngine
from labdoc.services.document_service import DocumentService


def get_ocr_engine(request: Request) -> OcrEngine:
    """
    The app-wide OCR engine, created in the lifespan hook.
    Override with app.dependency_overrides[get_ocr_engine] in tests.
    """
    return request.app.state.ocr_engine


def get_detector() -> DocumentDetector:
    return DocumentDetector()


def get_document_service(
    ocr: OcrEngine = Depends(get_ocr_engine),
    detector: DocumentDetector = Depends(get_detector),
) -> DocumentService:
    """
    Service dependency for the ingestion pipeline.
    Injects the shared OCR engine and a detector.
    """
    return DocumentService(ocr=ocr, detector=detector)
