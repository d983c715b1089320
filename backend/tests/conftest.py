import os
import sys
import tempfile
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

os.environ.setdefault("ENV", "dev")
# keep stray uploads out of the working tree if a test forgets the override
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="intake-tests-"))

from intake.core.config import get_ingestion_config, get_upload_dir  # noqa: E402
from intake.schemas.ingestion import IngestionConfig  # noqa: E402

from main import app  # noqa: E402

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\xff\xff?\x00\x05\xfe\x02\xfe\xa75\x81\x84"
    b"\x00\x00\x00\x00IEND\xaeB`\x82"
)
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
TEXT_BYTES = b"just some plain text and nothing to see here\n" * 4


@pytest.fixture()
def samples():
    return SimpleNamespace(png=PNG_BYTES, gif=GIF_BYTES, text=TEXT_BYTES)


@pytest.fixture()
def upload_dir(tmp_path):
    directory = tmp_path / "uploads"
    app.dependency_overrides[get_upload_dir] = lambda: directory
    yield directory
    app.dependency_overrides.pop(get_upload_dir, None)


@pytest.fixture()
def ingestion_config():
    """Install an IngestionConfig for the app; call with the fields to set."""

    def _install(**fields) -> IngestionConfig:
        config = IngestionConfig(**fields)
        app.dependency_overrides[get_ingestion_config] = lambda: config
        return config

    yield _install
    app.dependency_overrides.pop(get_ingestion_config, None)


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
