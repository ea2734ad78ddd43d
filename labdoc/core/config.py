# labdoc/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "LabDoc Ingest"
    env: str = "local"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # =========================
    # Upload limits
    # =========================
    MAX_FILE_SIZE_MB: int = 50

    # =========================
    # PDF classification
    # =========================
    PDF_QUICK_SCAN: bool = True
    PDF_MAX_PAGES_TO_SCAN: int = 5
    PDF_RENDER_DPI: int = 200

    # Heuristic knobs (defaults are the calibrated values; change with care)
    PDF_MIN_TEXT_CHARS_PER_PAGE: int = 50
    PDF_TEXT_PAGE_RATIO_THRESHOLD: float = 0.5
    PDF_TEXT_BONUS_CHARS: int = 500
    PDF_EARLY_EXIT_MIN_PAGES: int = 3
    PDF_EARLY_EXIT_HIGH: float = 0.8
    PDF_EARLY_EXIT_LOW: float = 0.2

    # =========================
    # OCR (Tesseract)
    # =========================
    OCR_DEFAULT_LANGUAGE: str = "eng"
    TESSERACT_CMD: str | None = None   # e.g. /usr/bin/tesseract
    OCR_DETECT_ORIENTATION: bool = True
    OCR_ROTATION_THRESHOLD_DEG: float = 5.0

    # Remote images (recognize(url))
    HTTP_FETCH_TIMEOUT_SECONDS: float = 30.0

    # CORS
    CORS_ALLOW_ORIGINS: str | None = None

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

settings = Settings()
