"""labdoc/ocr/types.py

OCR value objects and the Tesseract page segmentation modes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Sequence, Union


class PageSegmentationMode(IntEnum):
    """Tesseract --psm values: how the image is split into blocks/lines/words before reading."""

    AUTO_OSD = 0            # orientation + script detection only
    AUTO_OSD_ONLY = 1       # automatic segmentation with OSD
    AUTO_ONLY = 2           # automatic segmentation, no OSD or OCR
    AUTO = 3                # fully automatic segmentation (default)
    SINGLE_COLUMN = 4
    SINGLE_BLOCK_VERT = 5
    SINGLE_BLOCK = 6
    SINGLE_LINE = 7
    SINGLE_WORD = 8
    CIRCLE_WORD = 9
    SINGLE_CHAR = 10
    SPARSE_TEXT = 11
    SPARSE_TEXT_OSD = 12
    RAW_LINE = 13


@dataclass(frozen=True)
class BoundingBox:
    x0: int
    y0: int
    x1: int
    y1: int


@dataclass(frozen=True)
class OCRWord:
    text: str
    confidence: float  # 0 - 100
    bbox: BoundingBox


@dataclass(frozen=True)
class OCRProgress:
    status: str
    progress: float  # 0.0 - 1.0


@dataclass(frozen=True)
class Recognition:
    """Raw output of one worker.recognize() call."""

    text: str
    confidence: float
    words: tuple[OCRWord, ...]
    rotate: float | None = None  # degrees reported by orientation detection


@dataclass(frozen=True)
class OCRResult:
    text: str
    confidence: float  # 0 - 100
    was_rotated: bool
    rotation_angle: float
    processing_time: float  # milliseconds
    words: tuple[OCRWord, ...] = ()


ProgressHook = Callable[[OCRProgress], None]
ImageProgressCallback = Callable[[int, int, OCRResult], None]  # (index, total, result)
Language = Union[str, Sequence[str]]


def language_key(language: Language) -> str:
    """Join a language list into the tesseract form: ["eng", "deu"] becomes eng+deu."""
    if isinstance(language, str):
        return language
    return "+".join(language)
