"""labdoc/pdf/quality.py

Cheap, explainable heuristics that decide whether a PDF's embedded text can be
trusted or whether the document is a scan that needs OCR.

Every knob lives on ClassificationThresholds so tests and deployments can tune
them without touching the extraction loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from labdoc.core.config import Settings, settings as default_settings
from labdoc.pdf.types import MIN_TEXT_CHARS_PER_PAGE, PAGE_SEPARATOR, PageExtractionResult


@dataclass(frozen=True)
class ClassificationThresholds:
    min_text_chars_per_page: int = MIN_TEXT_CHARS_PER_PAGE
    text_page_ratio_threshold: float = 0.5   # below this share of text pages -> maybe scanned
    text_bonus_chars: int = 500              # long documents earn a confidence bonus
    text_bonus: float = 0.2
    early_exit_min_pages: int = 3
    early_exit_high: float = 0.8             # quick scan stops once clearly text...
    early_exit_low: float = 0.2              # ...or clearly scanned

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "ClassificationThresholds":
        s = s or default_settings
        return cls(
            min_text_chars_per_page=s.PDF_MIN_TEXT_CHARS_PER_PAGE,
            text_page_ratio_threshold=s.PDF_TEXT_PAGE_RATIO_THRESHOLD,
            text_bonus_chars=s.PDF_TEXT_BONUS_CHARS,
            early_exit_min_pages=s.PDF_EARLY_EXIT_MIN_PAGES,
            early_exit_high=s.PDF_EARLY_EXIT_HIGH,
            early_exit_low=s.PDF_EARLY_EXIT_LOW,
        )


@dataclass(frozen=True)
class ScanVerdict:
    is_scanned: bool
    text_confidence: float
    text_page_ratio: float
    pages_with_text: int
    pages_with_images: int
    char_count: int


def text_page_ratio(pages: Sequence[PageExtractionResult]) -> float:
    if not pages:
        return 0.0
    return sum(1 for p in pages if p.has_text) / len(pages)


def should_stop_early(
    pages: Sequence[PageExtractionResult], thresholds: ClassificationThresholds
) -> bool:
    """Quick scan: once enough pages are seen, stop if the answer is already obvious."""
    if len(pages) < thresholds.early_exit_min_pages:
        return False
    ratio = text_page_ratio(pages)
    return ratio > thresholds.early_exit_high or ratio < thresholds.early_exit_low


def score_pages(
    pages: Sequence[PageExtractionResult],
    page_budget: int,
    thresholds: ClassificationThresholds,
) -> ScanVerdict:
    """
    Classify the processed pages.

    A PDF is treated as scanned when few pages carry text, at least one page
    paints an image, and the total text is below min_text_chars_per_page for
    each page in page_budget.
    """
    char_count = len(PAGE_SEPARATOR.join(p.text for p in pages))
    with_text = sum(1 for p in pages if p.has_text)
    with_images = sum(1 for p in pages if p.has_images)
    ratio = text_page_ratio(pages)

    is_scanned = (
        ratio < thresholds.text_page_ratio_threshold
        and with_images > 0
        and char_count < page_budget * thresholds.min_text_chars_per_page
    )

    bonus = thresholds.text_bonus if char_count > thresholds.text_bonus_chars else 0.0
    confidence = min(1.0, ratio + bonus)

    return ScanVerdict(
        is_scanned=is_scanned,
        text_confidence=float(confidence),
        text_page_ratio=ratio,
        pages_with_text=with_text,
        pages_with_images=with_images,
        char_count=char_count,
    )
