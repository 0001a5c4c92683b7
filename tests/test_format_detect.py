"""Tests for format detection via magic bytes."""

import struct

import pytest

from conftest import make_image, make_pdf
from exceptions import UnsupportedFormatError
from utils.format_detect import ImageFormat, detect_format, is_pdf, normalize_format


def test_detect_png():
    assert detect_format(make_image("PNG")) == ImageFormat.PNG


def test_detect_jpeg():
    assert detect_format(make_image("JPEG")) == ImageFormat.JPEG


def test_detect_webp():
    assert detect_format(make_image("WEBP")) == ImageFormat.WEBP


def test_detect_tiff():
    assert detect_format(make_image("TIFF")) == ImageFormat.TIFF


def test_detect_tiff_big_endian():
    assert detect_format(b"MM\x00\x2a" + b"\x00" * 16) == ImageFormat.TIFF


def _ftyp(major: bytes, compat: list[bytes]) -> bytes:
    body = b"ftyp" + major + b"\x00\x00\x00\x00" + b"".join(compat)
    return struct.pack(">I", len(body) + 4) + body + b"\x00" * 8


def test_detect_avif_major_brand():
    assert detect_format(_ftyp(b"avif", [b"mif1"])) == ImageFormat.AVIF


def test_detect_avif_compatible_brand():
    assert detect_format(_ftyp(b"mif1", [b"miaf", b"avif"])) == ImageFormat.AVIF


def test_heic_is_other():
    assert detect_format(_ftyp(b"heic", [b"mif1", b"heic"])) == ImageFormat.OTHER


def test_gif_and_bmp_are_other():
    assert detect_format(make_image("GIF")) == ImageFormat.OTHER
    assert detect_format(make_image("BMP")) == ImageFormat.OTHER


def test_too_small_raises():
    with pytest.raises(UnsupportedFormatError):
        detect_format(b"\x89P")


def test_is_pdf():
    assert is_pdf(make_pdf())
    assert not is_pdf(make_image("PNG"))


@pytest.mark.parametrize(
    "name,expected",
    [
        ("jpg", ImageFormat.JPEG),
        ("JPEG", ImageFormat.JPEG),
        (" png ", ImageFormat.PNG),
        ("tif", ImageFormat.TIFF),
        ("avif", ImageFormat.AVIF),
        ("gif", ImageFormat.OTHER),
        ("", ImageFormat.OTHER),
        (None, ImageFormat.OTHER),
        (ImageFormat.WEBP, ImageFormat.WEBP),
    ],
)
def test_normalize_format(name, expected):
    assert normalize_format(name) == expected
