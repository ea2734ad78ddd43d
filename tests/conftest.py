"""Shared fixtures."""

import pytest

from helpers import FakeWorkerFactory
from labdoc.ocr.engine import OcrEngine


@pytest.fixture
def worker_factory():
    return FakeWorkerFactory()


@pytest.fixture
def ocr_engine(worker_factory):
    return OcrEngine(worker_factory=worker_factory)
