"""labdoc/pdf/types.py

Lightweight dataclasses for PDF extraction + classification outputs.
Design goals:
- deterministic extraction (no OCR, no LLM)
- derived fields (has_text, full_text) cannot drift from the data they summarise
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

# Characters a page needs before its embedded text is trusted.
MIN_TEXT_CHARS_PER_PAGE = 50

PAGE_SEPARATOR = "\n\n"

ProgressCallback = Callable[[int, int], None]  # (current, total)


@dataclass(frozen=True)
class PageExtractionResult:
    page_number: int  # 1-based
    text: str
    has_images: bool
    min_text_chars: int = field(default=MIN_TEXT_CHARS_PER_PAGE, repr=False, compare=False)

    @property
    def has_text(self) -> bool:
        return len(self.text) >= self.min_text_chars

    @classmethod
    def failed(cls, page_number: int) -> "PageExtractionResult":
        return cls(page_number=page_number, text="", has_images=False)


@dataclass(frozen=True)
class PDFExtractionResult:
    total_pages: int
    pages: tuple[PageExtractionResult, ...]
    is_scanned: bool
    text_confidence: float  # 0.0 - 1.0
    errors: tuple[str, ...] = ()

    @property
    def full_text(self) -> str:
        return PAGE_SEPARATOR.join(p.text for p in self.pages)

    @property
    def pages_with_text(self) -> int:
        return sum(1 for p in self.pages if p.has_text)

    @property
    def pages_with_images(self) -> int:
        return sum(1 for p in self.pages if p.has_images)
