from dataclasses import dataclass

import pytest

from labdoc.core import AppError, ErrorCode
from labdoc.documents.source import SourceDocument
from labdoc.validations.file_validators import (
    ensure_valid_document,
    get_accept_string,
    get_supported_extensions,
    is_supported_document,
    resolve_mime_type,
    validate_document,
)


@dataclass
class SizedStub:
    """Looks like a SourceDocument to the validator without holding the bytes."""

    name: str
    content_type: str
    size: int

    @property
    def extension(self) -> str:
        return "." + self.name.rsplit(".", 1)[-1].lower()


def test_missing_file_is_invalid():
    meta = validate_document(None)
    assert meta.is_valid is False
    assert "missing file" in meta.validation_error


def test_missing_name_is_invalid():
    meta = validate_document(SourceDocument(name="", content_type="application/pdf", data=b"%PDF"))
    assert meta.is_valid is False


def test_zero_byte_file_is_empty():
    meta = validate_document(SourceDocument(name="report.pdf", content_type="application/pdf", data=b""))
    assert meta.is_valid is False
    assert "empty" in meta.validation_error


def test_hundred_mib_file_is_too_large():
    meta = validate_document(SizedStub(name="report.pdf", content_type="application/pdf", size=100 * 1024 * 1024))
    assert meta.is_valid is False
    assert "too large" in meta.validation_error
    assert "100MB exceeds 50MB" in meta.validation_error


def test_exactly_fifty_mib_is_allowed():
    meta = validate_document(SizedStub(name="report.pdf", content_type="application/pdf", size=50 * 1024 * 1024))
    assert meta.is_valid is True


def test_executable_is_unsupported():
    doc = SourceDocument(name="setup.exe", content_type="application/x-msdownload", data=b"MZ\x90\x00")
    meta = validate_document(doc)
    assert meta.is_valid is False
    assert "Unsupported" in meta.validation_error
    assert "application/x-msdownload" in meta.validation_error


def test_generic_binary_falls_back_to_extension():
    doc = SourceDocument(name="Scan.JPG", content_type="application/octet-stream", data=b"\xff\xd8")
    assert resolve_mime_type(doc) == "image/jpeg"
    assert validate_document(doc).is_valid is True


def test_name_that_is_only_an_extension_still_resolves():
    doc = SourceDocument(name=".pdf", content_type="application/octet-stream", data=b"%PDF")
    assert doc.extension == ".pdf"
    assert resolve_mime_type(doc) == "application/pdf"
    assert validate_document(doc).is_valid is True


def test_unknown_extension_without_type_is_unknown():
    doc = SourceDocument(name="notes", content_type=None, data=b"hello")
    assert resolve_mime_type(doc) == "unknown"
    assert "Unsupported file type: unknown" == validate_document(doc).validation_error


def test_declared_type_wins_over_extension():
    doc = SourceDocument(name="report.pdf", content_type="image/png", data=b"\x89PNG")
    assert resolve_mime_type(doc) == "image/png"


@pytest.mark.parametrize("ext", [".pdf", ".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".tif", ".tiff"])
def test_every_listed_extension_is_supported(ext):
    assert ext in get_supported_extensions()
    doc = SourceDocument(name=f"file{ext}", content_type="application/octet-stream", data=b"x")
    assert is_supported_document(doc)


def test_accept_string_lists_all_mime_types():
    accept = get_accept_string().split(",")
    assert "application/pdf" in accept
    assert "image/tiff" in accept
    assert len(accept) == 7


def test_ensure_valid_document_raises_structured_error():
    with pytest.raises(AppError) as exc_info:
        ensure_valid_document(SourceDocument(name="a.pdf", content_type="application/pdf", data=b""))

    err = exc_info.value
    assert err.code == ErrorCode.FILE_EMPTY
    assert err.status_code == 422
    assert err.to_dict()["error"]["message"] == "File is empty"


def test_local_file_resolves_type_from_extension(tmp_path):
    path = tmp_path / "cbc_panel.tiff"
    path.write_bytes(b"II*\x00")

    doc = SourceDocument.from_path(path)

    assert doc.content_type == "application/octet-stream"
    assert doc.extension == ".tiff"
    assert resolve_mime_type(doc) == "image/tiff"
    assert validate_document(doc).is_valid is True
