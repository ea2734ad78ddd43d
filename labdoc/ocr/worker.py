"""labdoc/ocr/worker.py

Tesseract worker: a language-bound recognizer with its own parameters and an
optional progress hook.

pytesseract shells out to the tesseract binary per call, so a "worker" here is
the validated configuration (binary present, traineddata installed, PSM) that
each call runs with. Blocking calls run in a thread via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Protocol

import pytesseract
from PIL import Image
from pytesseract import Output, TesseractError, TesseractNotFoundError

from labdoc.core import AppError, ErrorCode, ErrorReason
from labdoc.core.config import settings
from labdoc.core.errors import unavailable
from labdoc.ocr.types import (
    BoundingBox,
    OCRProgress,
    OCRWord,
    PageSegmentationMode,
    ProgressHook,
    Recognition,
)

logger = logging.getLogger("labdoc.ocr.worker")

WORD_LEVEL = 5


class OcrWorker(Protocol):
    language: str

    async def set_parameters(self, *, page_segmentation_mode: PageSegmentationMode) -> None: ...

    async def recognize(self, image: Image.Image, *, auto_rotate: bool = True) -> Recognition: ...

    async def terminate(self) -> None: ...


class WorkerFactory(Protocol):
    def __call__(
        self, language: str, logger_hook: ProgressHook | None, *, rotation_threshold_deg: float
    ) -> Awaitable[OcrWorker]: ...


def _conf(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return -1.0


def words_from_data(data: dict[str, list]) -> list[OCRWord]:
    words: list[OCRWord] = []
    for i, raw in enumerate(data.get("text", [])):
        text = (raw or "").strip()
        if data["level"][i] != WORD_LEVEL or not text:
            continue
        left, top = int(data["left"][i]), int(data["top"][i])
        words.append(
            OCRWord(
                text=text,
                confidence=max(0.0, _conf(data["conf"][i])),
                bbox=BoundingBox(
                    x0=left,
                    y0=top,
                    x1=left + int(data["width"][i]),
                    y1=top + int(data["height"][i]),
                ),
            )
        )
    return words


def text_from_data(data: dict[str, list]) -> str:
    """Rebuild page text: words joined by spaces, lines by newlines, paragraphs by blank lines."""
    paragraphs: dict[tuple[int, int, int], dict[int, list[str]]] = {}
    for i, raw in enumerate(data.get("text", [])):
        text = (raw or "").strip()
        if data["level"][i] != WORD_LEVEL or not text:
            continue
        para_key = (data["page_num"][i], data["block_num"][i], data["par_num"][i])
        paragraphs.setdefault(para_key, {}).setdefault(data["line_num"][i], []).append(text)

    return "\n\n".join(
        "\n".join(" ".join(words) for words in lines.values())
        for lines in paragraphs.values()
    )


class TesseractWorker:
    def __init__(
        self,
        language: str,
        *,
        logger_hook: ProgressHook | None = None,
        detect_orientation: bool | None = None,
        rotation_threshold_deg: float | None = None,
    ):
        self.language = language
        self._hook = logger_hook
        self._psm = PageSegmentationMode.AUTO
        self._detect_orientation = (
            settings.OCR_DETECT_ORIENTATION if detect_orientation is None else detect_orientation
        )
        self._rotation_threshold = (
            settings.OCR_ROTATION_THRESHOLD_DEG if rotation_threshold_deg is None else rotation_threshold_deg
        )
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    def _emit(self, status: str, progress: float) -> None:
        if self._hook:
            self._hook(OCRProgress(status=status, progress=progress))

    def _config(self) -> str:
        return f"--psm {int(self._psm)}"

    async def load(self) -> None:
        """Check the binary and traineddata once, up front."""
        self._emit("initializing tesseract", 0.0)
        try:
            version = await asyncio.to_thread(pytesseract.get_tesseract_version)
        except TesseractNotFoundError as e:
            raise unavailable("Tesseract binary not found", details={"cmd": settings.TESSERACT_CMD}) from e
        self._emit("initializing tesseract", 1.0)

        self._emit("loading language traineddata", 0.0)
        installed = set(await asyncio.to_thread(pytesseract.get_languages, config=""))
        missing = [lang for lang in self.language.split("+") if lang not in installed]
        if missing:
            raise unavailable(
                f"Tesseract language data not installed: {', '.join(missing)}",
                details={"language": self.language, "installed": sorted(installed)},
            )
        self._emit("loading language traineddata", 1.0)
        self._emit("initialized api", 1.0)

        logger.info("ocr.worker_loaded", extra={"language": self.language, "tesseract_version": str(version)})

    async def set_parameters(self, *, page_segmentation_mode: PageSegmentationMode) -> None:
        self._psm = PageSegmentationMode(page_segmentation_mode)

    def _detect_rotation(self, image: Image.Image) -> float | None:
        try:
            osd = pytesseract.image_to_osd(image, output_type=Output.DICT)
        except TesseractError as e:
            # OSD needs enough text to vote on; blank or tiny images report nothing.
            logger.debug("ocr.osd_unavailable", extra={"error": str(e)})
            return None
        return float(osd.get("rotate", 0))

    async def recognize(self, image: Image.Image, *, auto_rotate: bool = True) -> Recognition:
        if self._terminated:
            raise AppError(
                code=ErrorCode.OCR_FAILED,
                reason=ErrorReason.OCR_FAILED,
                message="OCR worker has been terminated",
                status_code=500,
            )

        self._emit("recognizing text", 0.0)
        rotate = await asyncio.to_thread(self._detect_rotation, image) if self._detect_orientation else None
        if auto_rotate and rotate and abs(rotate) > self._rotation_threshold:
            # OSD reports the clockwise turn that makes the page upright; PIL turns counter-clockwise.
            image = image.rotate(-rotate, expand=True)
        self._emit("recognizing text", 0.25)

        try:
            data = await asyncio.to_thread(
                pytesseract.image_to_data,
                image,
                lang=self.language,
                config=self._config(),
                output_type=Output.DICT,
            )
        except TesseractError as e:
            raise AppError(
                code=ErrorCode.OCR_FAILED,
                reason=ErrorReason.OCR_FAILED,
                message=f"Tesseract failed: {e}",
                status_code=500,
            ) from e
        self._emit("recognizing text", 1.0)

        words = words_from_data(data)
        confidence = sum(w.confidence for w in words) / len(words) if words else 0.0

        return Recognition(
            text=text_from_data(data),
            confidence=round(confidence, 2),
            words=tuple(words),
            rotate=rotate,
        )

    async def terminate(self) -> None:
        self._terminated = True


async def create_worker(
    language: str,
    logger_hook: ProgressHook | None = None,
    *,
    rotation_threshold_deg: float | None = None,
) -> TesseractWorker:
    if settings.TESSERACT_CMD:
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    worker = TesseractWorker(
        language, logger_hook=logger_hook, rotation_threshold_deg=rotation_threshold_deg
    )
    await worker.load()
    return worker
