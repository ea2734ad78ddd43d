"""labdoc/ocr/engine.py

OcrEngine owns the (single) cached OCR worker.

- One resident worker, keyed by its language string ("eng", "eng+deu").
  Asking for another language terminates it and loads a new one.
- A progress callback gets its own throwaway worker with the hook attached;
  the cached worker never reports progress.
- Everything is sequential: batches run one image at a time, in order.

The engine is an explicit object so its owner (the API app, a script, a test)
decides when the worker is created and released.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

from labdoc.core.config import settings
from labdoc.ocr.images import ImageInput, load_image
from labdoc.ocr.types import (
    ImageProgressCallback,
    Language,
    OCRResult,
    PageSegmentationMode,
    ProgressHook,
    language_key,
)
from labdoc.ocr.worker import OcrWorker, WorkerFactory, create_worker

logger = logging.getLogger("labdoc.ocr.engine")


class OcrEngine:
    def __init__(
        self,
        *,
        worker_factory: WorkerFactory = create_worker,
        rotation_threshold_deg: float | None = None,
    ):
        self._factory = worker_factory
        self._worker: OcrWorker | None = None
        self._language: str = ""
        self._lock = asyncio.Lock()
        self._rotation_threshold = (
            settings.OCR_ROTATION_THRESHOLD_DEG if rotation_threshold_deg is None else rotation_threshold_deg
        )

    # ---- worker lifecycle ----

    def is_worker_ready(self) -> bool:
        return self._worker is not None

    def get_current_language(self) -> str:
        return self._language

    async def acquire(self, language: Language = "eng") -> OcrWorker:
        """Return the cached worker for `language`, replacing it if it speaks another one."""
        key = language_key(language)
        async with self._lock:
            if self._worker is not None and self._language == key:
                return self._worker

            if self._worker is not None:
                logger.info("ocr.worker_replaced", extra={"old_language": self._language, "language": key})
                await self._worker.terminate()
                self._worker = None
                self._language = ""

            self._worker = await self._factory(
                key, None, rotation_threshold_deg=self._rotation_threshold
            )
            self._language = key
            logger.info("ocr.worker_created", extra={"language": key})
            return self._worker

    async def release(self) -> None:
        async with self._lock:
            if self._worker is None:
                return
            await self._worker.terminate()
            logger.info("ocr.worker_terminated", extra={"language": self._language})
            self._worker = None
            self._language = ""

    async def terminate_worker(self) -> None:
        await self.release()

    # ---- recognition ----

    async def recognize(
        self,
        image: ImageInput,
        *,
        language: Language = "eng",
        on_progress: ProgressHook | None = None,
        auto_rotate: bool = True,
        page_segmentation_mode: PageSegmentationMode = PageSegmentationMode.AUTO,
    ) -> OCRResult:
        started = time.perf_counter()
        key = language_key(language)

        # The cached worker is acquired (or swapped) even when a progress worker does the work.
        worker = await self.acquire(key)
        await worker.set_parameters(page_segmentation_mode=page_segmentation_mode)

        picture = await load_image(image)

        if on_progress:
            temp = await self._factory(
                key, on_progress, rotation_threshold_deg=self._rotation_threshold
            )
            try:
                await temp.set_parameters(page_segmentation_mode=page_segmentation_mode)
                raw = await temp.recognize(picture, auto_rotate=auto_rotate)
            finally:
                await temp.terminate()
        else:
            raw = await worker.recognize(picture, auto_rotate=auto_rotate)

        rotation_angle = raw.rotate or 0.0
        result = OCRResult(
            text=raw.text,
            confidence=raw.confidence,
            was_rotated=auto_rotate and abs(rotation_angle) > self._rotation_threshold,
            rotation_angle=rotation_angle,
            processing_time=(time.perf_counter() - started) * 1000.0,
            words=raw.words,
        )

        logger.info(
            "ocr.recognized",
            extra={
                "language": key,
                "psm": int(page_segmentation_mode),
                "confidence": result.confidence,
                "words": len(result.words),
                "rotation_angle": result.rotation_angle,
                "was_rotated": result.was_rotated,
                "processing_ms": int(result.processing_time),
                "dedicated_worker": on_progress is not None,
            },
        )
        return result

    async def recognize_images(
        self,
        images: Sequence[ImageInput],
        *,
        on_image_progress: ImageProgressCallback | None = None,
        language: Language = "eng",
        on_progress: ProgressHook | None = None,
        auto_rotate: bool = True,
        page_segmentation_mode: PageSegmentationMode = PageSegmentationMode.AUTO,
    ) -> list[OCRResult]:
        results: list[OCRResult] = []
        total = len(images)
        for index, image in enumerate(images, start=1):
            result = await self.recognize(
                image,
                language=language,
                on_progress=on_progress,
                auto_rotate=auto_rotate,
                page_segmentation_mode=page_segmentation_mode,
            )
            results.append(result)
            if on_image_progress:
                on_image_progress(index, total, result)
        return results

    async def recognize_data_url(self, data_url: str, **options) -> OCRResult:
        return await self.recognize(data_url, **options)
