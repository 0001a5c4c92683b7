"""Tests for security modules: API key auth, upload validation."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from config import settings
from conftest import ADMIN_KEY, make_image, make_pdf
from exceptions import (
    AuthenticationError,
    FileTooLargeError,
    ForbiddenError,
    UnsupportedFormatError,
)
from security.auth import authenticate, client_id_for, require_admin, require_client
from security.file_validation import validate_image, validate_pdf
from utils.format_detect import ImageFormat


def _request(auth: str | None = None, **state):
    request = MagicMock()
    request.headers = {"Authorization": auth} if auth is not None else {}
    request.state = SimpleNamespace(**state)
    return request


# --- authenticate ---


def test_no_header_is_public():
    assert authenticate(_request()) is None


def test_bad_scheme_rejected():
    with pytest.raises(AuthenticationError):
        authenticate(_request("Basic abc"))


def test_empty_key_rejected():
    with pytest.raises(AuthenticationError):
        authenticate(_request("Bearer "))


def test_dev_mode_accepts_any_key():
    assert authenticate(_request("Bearer anything")) == client_id_for("anything")


def test_configured_key_enforced(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret")
    assert authenticate(_request("Bearer secret")) == client_id_for("secret")
    with pytest.raises(AuthenticationError):
        authenticate(_request("Bearer wrong"))


def test_admin_key_accepted_when_api_key_set(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret")
    assert authenticate(_request(f"Bearer {ADMIN_KEY}")) == client_id_for(ADMIN_KEY)


def test_client_ids_are_distinct_and_opaque():
    a, b = client_id_for("key-a"), client_id_for("key-b")
    assert a != b
    assert len(a) == 16
    assert "key-a" not in a


def test_require_client():
    assert require_client(_request(client_id="abc")) == "abc"
    with pytest.raises(AuthenticationError):
        require_client(_request(client_id=None))


def test_require_admin():
    assert require_admin(_request(client_id="abc", is_admin=True)) == "abc"
    with pytest.raises(ForbiddenError):
        require_admin(_request(client_id="abc", is_admin=False))


def test_invalid_key_over_http(client, monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret")
    resp = client.get("/my-jobs", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert "X-Request-ID" in resp.headers


# --- file validation ---


def test_validate_image_descriptor():
    data = make_image("JPEG", size=(64, 32))
    descriptor = validate_image(data)
    assert descriptor.format == ImageFormat.JPEG
    assert (descriptor.width, descriptor.height) == (64, 32)
    assert descriptor.byte_size == len(data)


def test_validate_image_other_format():
    descriptor = validate_image(make_image("BMP", size=(8, 8)))
    assert descriptor.format == ImageFormat.OTHER
    assert descriptor.width == 8


def test_validate_image_too_large(monkeypatch):
    monkeypatch.setattr(settings, "max_file_size_bytes", 5)
    with pytest.raises(FileTooLargeError):
        validate_image(make_image("PNG"))


def test_validate_image_rejects_garbage():
    with pytest.raises(UnsupportedFormatError):
        validate_image(b"not an image at all")


def test_validate_image_rejects_pdf():
    with pytest.raises(UnsupportedFormatError):
        validate_image(make_pdf())


def test_validate_pdf():
    validate_pdf(make_pdf())
    with pytest.raises(UnsupportedFormatError):
        validate_pdf(make_image("PNG"))
