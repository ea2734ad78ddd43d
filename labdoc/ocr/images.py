"""labdoc/ocr/images.py

Turn whatever the caller handed to recognize() into a decoded PIL image:
raw bytes, a SourceDocument, a filesystem path, an http(s) URL, a data: URL,
or an already-open PIL image.
"""

from __future__ import annotations

import asyncio
import base64
import io
import os
from typing import Union
from urllib.parse import unquote_to_bytes

import httpx
from PIL import Image, UnidentifiedImageError

from labdoc.core import AppError, ErrorCode, ErrorReason
from labdoc.core.config import settings
from labdoc.documents.source import SourceDocument

ImageInput = Union[bytes, bytearray, SourceDocument, str, os.PathLike, Image.Image]


def decode_data_url(data_url: str) -> bytes:
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:"):
        raise AppError(
            code=ErrorCode.IMAGE_INVALID,
            reason=ErrorReason.IMAGE_INVALID,
            message="Malformed data URL",
            status_code=422,
        )
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except ValueError as e:
            raise AppError(
                code=ErrorCode.IMAGE_INVALID,
                reason=ErrorReason.IMAGE_INVALID,
                message=f"Data URL is not valid base64: {e}",
                status_code=422,
            ) from e
    return unquote_to_bytes(payload)


async def fetch_image_bytes(url: str) -> bytes:
    try:
        async with httpx.AsyncClient(
            timeout=settings.HTTP_FETCH_TIMEOUT_SECONDS, follow_redirects=True
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content
    except httpx.HTTPError as e:
        raise AppError(
            code=ErrorCode.IMAGE_FETCH_FAILED,
            reason=ErrorReason.DOWNLOAD_FAILED,
            message=f"Failed to download image: {e}",
            status_code=502,
            details={"url": url},
        ) from e


def _decode(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise AppError(
            code=ErrorCode.IMAGE_INVALID,
            reason=ErrorReason.IMAGE_INVALID,
            message=f"Failed to decode image: {e}",
            status_code=422,
        ) from e
    return img


async def load_image(image: ImageInput) -> Image.Image:
    if isinstance(image, Image.Image):
        return image
    if isinstance(image, SourceDocument):
        return _decode(image.data)
    if isinstance(image, (bytes, bytearray)):
        return _decode(bytes(image))

    ref = os.fspath(image)
    if ref.startswith("data:"):
        return _decode(decode_data_url(ref))
    if ref.startswith(("http://", "https://")):
        return _decode(await fetch_image_bytes(ref))

    try:
        data = await asyncio.to_thread(_read_file, ref)
    except OSError as e:
        raise AppError(
            code=ErrorCode.IMAGE_INVALID,
            reason=ErrorReason.IMAGE_INVALID,
            message=f"Failed to read image file: {e}",
            status_code=422,
        ) from e
    return _decode(data)


def _read_file(path: str) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()
