"""
source.py
- Purpose: The byte source every pipeline stage consumes (name + declared MIME type + bytes).
- Design: Immutable; loaders for local paths and FastAPI uploads live here so
  the extractor/detector never touch I/O details.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from labdoc.constants.mime_types import GENERIC_BINARY_MIME_TYPE


@dataclass(frozen=True)
class SourceDocument:
    name: str | None
    content_type: str | None
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot, or "" when there is none."""
        # Everything from the last dot, so a bare ".pdf" name still counts.
        if not self.name or "." not in self.name:
            return ""
        return self.name[self.name.rfind("."):].lower()

    @classmethod
    def from_bytes(
        cls, data: bytes, name: str, content_type: str | None = None
    ) -> "SourceDocument":
        return cls(name=name, content_type=content_type, data=bytes(data))

    @classmethod
    def from_path(cls, path: str | os.PathLike, content_type: str | None = None) -> "SourceDocument":
        """
        Load a local file. Without an explicit content type the generic binary
        placeholder is declared, so MIME resolution falls back to the extension.
        """
        p = Path(path)
        return cls(
            name=p.name,
            content_type=content_type or GENERIC_BINARY_MIME_TYPE,
            data=p.read_bytes(),
        )

    @classmethod
    async def from_upload(cls, upload: UploadFile) -> "SourceDocument":
        data = await upload.read()
        return cls(
            name=os.path.basename(upload.filename) if upload.filename else None,
            content_type=upload.content_type,
            data=data,
        )
