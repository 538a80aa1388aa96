import io

import pytest
from fastapi.testclient import TestClient

from pdf_hub.config import Settings
from pdf_hub.main import create_app
from pdf_hub.services.blob_store import BlobStore
from pdf_hub.services.catalog import Catalog

MIB = 1024 * 1024


def make_pdf(size: int) -> bytes:
    """Bytes that start like a PDF, padded to ``size``."""
    header = b"%PDF-1.4\n"
    return (header + b"0" * max(size - len(header), 0))[:size]


class BytesPayload:
    """Minimal async reader standing in for an UploadFile."""

    def __init__(self, data: bytes):
        self._buffer = io.BytesIO(data)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        UPLOAD_DIR=str(tmp_path / "uploads"),
        CATALOG_PATH=str(tmp_path / "database.json"),
        PUBLIC_DIR=str(tmp_path / "public"),
    )


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(tmp_path / "uploads", max_bytes=50 * MIB)


@pytest.fixture
def catalog(tmp_path):
    return Catalog(tmp_path / "database.json")


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client
