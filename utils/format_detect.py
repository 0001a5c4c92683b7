import struct
from enum import Enum

from exceptions import UnsupportedFormatError


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"
    TIFF = "tiff"
    OTHER = "other"


# MIME type mapping for outputs we can produce
MIME_TYPES = {
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.PNG: "image/png",
    ImageFormat.WEBP: "image/webp",
    ImageFormat.AVIF: "image/avif",
    ImageFormat.TIFF: "image/tiff",
    "pdf": "application/pdf",
}

# Format names accepted from callers, including common aliases
_ALIASES = {
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "webp": ImageFormat.WEBP,
    "avif": ImageFormat.AVIF,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
}

PDF_MAGIC = b"%PDF-"


def normalize_format(name: str | ImageFormat | None) -> ImageFormat:
    """Map a caller-supplied format name onto ImageFormat.

    "jpg" becomes JPEG, "tif" becomes TIFF. Unknown or empty names map
    to OTHER rather than raising.
    """
    if isinstance(name, ImageFormat):
        return name
    if not name:
        return ImageFormat.OTHER
    return _ALIASES.get(name.strip().lower(), ImageFormat.OTHER)


def detect_format(data: bytes) -> ImageFormat:
    """Detect image format from magic bytes.

    Never trusts file extensions or Content-Type headers. Recognised
    raster files outside the supported codec set (GIF, BMP, HEIC...)
    come back as OTHER; the caller decides whether Pillow can read them.

    Raises:
        UnsupportedFormatError: If the file is too small to identify.
    """
    if len(data) < 4:
        raise UnsupportedFormatError("File too small to identify format")

    # PNG: \x89PNG\r\n\x1a\n
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return ImageFormat.PNG

    # JPEG: \xFF\xD8\xFF
    if data[:3] == b"\xff\xd8\xff":
        return ImageFormat.JPEG

    # WebP: RIFF....WEBP
    if data[:4] == b"RIFF" and len(data) >= 12 and data[8:12] == b"WEBP":
        return ImageFormat.WEBP

    # TIFF: II*\x00 (little-endian) or MM\x00* (big-endian)
    if data[:4] in (b"II\x2a\x00", b"MM\x00\x2a"):
        return ImageFormat.TIFF

    # AVIF: ISO BMFF ftyp box
    if len(data) >= 12 and data[4:8] == b"ftyp" and _is_avif(data):
        return ImageFormat.AVIF

    return ImageFormat.OTHER


def is_pdf(data: bytes) -> bool:
    """PDF files start with %PDF- (some writers prepend a few junk bytes)."""
    return PDF_MAGIC in data[:1024]


def _is_avif(data: bytes) -> bool:
    """Check the ftyp box for an AVIF major or compatible brand.

    The ftyp box structure:
    - Bytes 0-3: box size (uint32 big-endian)
    - Bytes 4-7: 'ftyp'
    - Bytes 8-11: major brand (4 ASCII chars)
    - Bytes 12-15: minor version
    - Bytes 16+: compatible brands (4 bytes each)
    """
    if data[8:12] in (b"avif", b"avis"):
        return True

    box_size = struct.unpack(">I", data[:4])[0]
    box_end = min(box_size, len(data))
    offset = 16

    while offset + 4 <= box_end:
        if data[offset : offset + 4] in (b"avif", b"avis"):
            return True
        offset += 4

    return False
