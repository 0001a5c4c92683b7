import asyncio
import io

from PIL import Image, ImageEnhance, ImageFilter

from exceptions import TranscodeError
from policy.resolver import EncoderParameters, Enhancement
from schemas import TranscodeResult
from transcoders.base import BaseTranscoder
from utils.format_detect import ImageFormat
from utils.logging import get_logger

logger = get_logger("transcoders.image")

_PILLOW_FORMATS = {
    ImageFormat.JPEG: "JPEG",
    ImageFormat.PNG: "PNG",
    ImageFormat.WEBP: "WEBP",
    ImageFormat.AVIF: "AVIF",
    ImageFormat.TIFF: "TIFF",
}

# Formats that cannot carry an alpha channel
_OPAQUE_FORMATS = (ImageFormat.JPEG, ImageFormat.TIFF)


class ImageTranscoder(BaseTranscoder):
    """Applies resolved EncoderParameters to an image with Pillow.

    Pipeline:
    1. Decode and normalise mode (palette -> RGB/RGBA)
    2. Resize (fit inside, optionally never enlarging)
    3. Restore enhancement: unsharp mask, brightness, saturation
    4. Encode with per-codec options
    """

    async def transcode(self, data: bytes, params: EncoderParameters) -> TranscodeResult:
        try:
            output, size = await asyncio.to_thread(self._encode, data, params)
        except (Image.DecompressionBombError, OSError, ValueError, KeyError) as e:
            logger.error(
                f"Image transcode failed: {e}",
                extra={
                    "context": {
                        "operation": params.operation.value,
                        "format": params.format.value,
                        "file_size": len(data),
                    }
                },
            )
            raise TranscodeError(
                f"Could not {params.operation.value} image: {e}",
                format=params.format.value,
            ) from e

        return self._build_result(
            data,
            output,
            fmt=params.format.value,
            method=f"pillow-{params.operation.value}",
            quality=params.quality,
            dimensions=size,
        )

    def _encode(self, data: bytes, params: EncoderParameters) -> tuple[bytes, tuple[int, int]]:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = _normalize_mode(img)

        if params.needs_resize:
            target = fit_inside(
                img.size,
                params.resize_width,
                params.resize_height,
                params.without_enlargement,
            )
            if target != img.size:
                img = img.resize(target, Image.Resampling.LANCZOS)

        if params.enhancement:
            img = enhance(img, params.enhancement)

        if params.format in _OPAQUE_FORMATS and img.mode not in ("RGB", "L", "CMYK"):
            img = img.convert("RGB")

        buf = io.BytesIO()
        img.save(buf, **_save_kwargs(params))
        return buf.getvalue(), img.size


def fit_inside(
    size: tuple[int, int],
    width: int | None,
    height: int | None,
    without_enlargement: bool = True,
) -> tuple[int, int]:
    """Scale (w, h) to fit inside width x height, keeping aspect ratio.

    A missing bound is unconstrained. With without_enlargement, images
    already inside the box are returned unchanged.
    """
    src_w, src_h = size
    scales = []
    if width:
        scales.append(width / src_w)
    if height:
        scales.append(height / src_h)
    if not scales:
        return size

    scale = min(scales)
    if without_enlargement and scale >= 1:
        return size

    return max(1, round(src_w * scale)), max(1, round(src_h * scale))


def enhance(img: Image.Image, enhancement: Enhancement) -> Image.Image:
    """Mild unsharp mask plus brightness and saturation lift."""
    img = img.filter(
        ImageFilter.UnsharpMask(radius=enhancement.sharpen_sigma, percent=100, threshold=0)
    )
    img = ImageEnhance.Brightness(img).enhance(enhancement.brightness)
    if img.mode not in ("L", "LA"):
        img = ImageEnhance.Color(img).enhance(enhancement.saturation)
    return img


def _normalize_mode(img: Image.Image) -> Image.Image:
    if img.mode == "P":
        return img.convert("RGBA" if "transparency" in img.info else "RGB")
    if img.mode in ("1", "I", "I;16", "F"):
        return img.convert("L")
    if img.mode in ("LA", "PA"):
        return img.convert("RGBA")
    if img.mode == "CMYK":
        return img.convert("RGB")
    return img


def _save_kwargs(params: EncoderParameters) -> dict:
    fmt = params.format
    kwargs: dict = {"format": _PILLOW_FORMATS.get(fmt, "JPEG")}

    if fmt == ImageFormat.PNG:
        kwargs["compress_level"] = params.compression_level or 6
    elif fmt == ImageFormat.WEBP:
        kwargs["quality"] = params.quality
        kwargs["method"] = params.effort if params.effort is not None else 4
    elif fmt == ImageFormat.AVIF:
        kwargs["quality"] = params.quality
        # effort (0-9, higher is slower) -> libavif speed (0-10)
        effort = params.effort if params.effort is not None else 4
        kwargs["speed"] = max(0, min(10, 10 - effort))
    elif fmt == ImageFormat.TIFF:
        kwargs["compression"] = params.tiff_compression or "tiff_lzw"
        kwargs["quality"] = params.quality
    else:
        kwargs["quality"] = params.quality
        kwargs["optimize"] = bool(params.effort)
        if params.progressive:
            kwargs["progressive"] = True

    return kwargs


image_transcoder = ImageTranscoder()
