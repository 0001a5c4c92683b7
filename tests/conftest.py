import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pypdf import PdfWriter

from config import settings
from main import app
from storage.jobs import job_store, settings_store
from storage.local import file_store

ADMIN_KEY = "admin-test-key"


@pytest.fixture(autouse=True)
def isolated_state(tmp_path, monkeypatch):
    """Fresh job/settings stores and a temp upload dir for every test."""
    monkeypatch.setattr(file_store, "_root", tmp_path / "uploads")
    monkeypatch.setattr(settings, "admin_api_key", ADMIN_KEY)
    job_store.reset()
    settings_store.reset()
    yield
    job_store.reset()
    settings_store.reset()


@pytest.fixture
def client():
    """FastAPI test client (does not raise server exceptions)."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers():
    """Headers for an authenticated client (dev mode, no API_KEY set)."""
    return {"Authorization": "Bearer test-api-key"}


@pytest.fixture
def other_headers():
    return {"Authorization": "Bearer another-client-key"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_KEY}"}


def make_image(fmt="PNG", size=(100, 100), mode="RGB", color=(200, 120, 40), **save_kwargs) -> bytes:
    """Encode a solid-colour test image in-memory."""
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


def make_pdf(pages=2) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def sample_png():
    return make_image("PNG")


@pytest.fixture
def sample_jpeg():
    return make_image("JPEG", quality=95)


@pytest.fixture
def sample_webp():
    return make_image("WEBP", quality=95)


@pytest.fixture
def sample_tiff():
    return make_image("TIFF")


@pytest.fixture
def sample_pdf():
    return make_pdf()
