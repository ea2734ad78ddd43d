"""labdoc/pdf/render.py

Rasterise PDF pages to PNG so scanned documents can be sent through OCR.
Pages come out one at a time; only the current page's bitmap is held.
"""

from __future__ import annotations

from typing import AsyncIterator

import fitz  # PyMuPDF

from labdoc.pdf.extract import PdfInput, open_pdf


def _page_to_png(doc: fitz.Document, page_number: int, dpi: int) -> bytes:
    zoom = dpi / 72.0
    pix = doc.load_page(page_number - 1).get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
    return pix.tobytes("png")


async def iter_page_pngs(file: PdfInput, *, dpi: int = 200) -> AsyncIterator[tuple[int, int, bytes]]:
    """Yield (page_number, total_pages, png_bytes) for every page, in order."""
    async with open_pdf(file) as pdf:
        total = pdf.page_count
        for page_number in range(1, total + 1):
            png = await pdf.call(_page_to_png, pdf.doc, page_number, dpi)
            yield page_number, total, png