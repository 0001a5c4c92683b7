"""Build an ImageDescriptor from uploaded bytes."""

import io

from PIL import Image, UnidentifiedImageError

from estimation.estimator import ImageDescriptor
from exceptions import UnsupportedFormatError
from utils.format_detect import detect_format


def describe_image(data: bytes) -> ImageDescriptor:
    """Read format and dimensions without decoding pixel data.

    Format comes from magic bytes; width/height from the Pillow header
    parse (Image.open is lazy).

    Raises:
        UnsupportedFormatError: If Pillow cannot identify the image, or its
            pixel count exceeds Pillow's decompression bomb limit.
    """
    fmt = detect_format(data)
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except Image.DecompressionBombError as e:
        raise UnsupportedFormatError(
            "Image dimensions exceed the pixel limit",
            format=fmt.value,
            max_pixels=Image.MAX_IMAGE_PIXELS,
        ) from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise UnsupportedFormatError(
            "File is not a readable image",
            detected_bytes=data[:16].hex(),
        ) from e

    return ImageDescriptor(
        format=fmt,
        width=width or None,
        height=height or None,
        byte_size=len(data),
    )
