"""labdoc: lab report ingestion (validation, PDF/scan classification, OCR)."""

__version__ = "0.1.0"
