"""Tier + format -> concrete encoder parameters.

Pure functions only: the resolver never opens files and never fails on an
unknown tier name (see policy.tiers). The transcoders in transcoders/
consume the EncoderParameters it returns.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from policy.tiers import destructive_profile, restorative_profile
from utils.format_detect import ImageFormat, normalize_format

CONVERT_QUALITY = 95

# Fixed enhancement applied on every restore
RESTORE_SHARPEN_SIGMA = 0.5
RESTORE_BRIGHTNESS = 1.02
RESTORE_SATURATION = 1.05

# Tiers at which PNG sources are re-encoded as WebP when compressing
PNG_TO_WEBP_TIERS = frozenset({"low", "medium"})

# Formats with a dedicated encoder path; everything else is written as JPEG
_CONVERT_TARGETS = frozenset({
    ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.WEBP, ImageFormat.AVIF, ImageFormat.TIFF,
})
_COMPRESS_TARGETS = frozenset({
    ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.WEBP, ImageFormat.AVIF,
})
_RESTORE_TARGETS = frozenset({ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.WEBP})


class Operation(str, Enum):
    CONVERT = "convert"
    COMPRESS = "compress"
    RESTORE = "restore"


@dataclass(frozen=True)
class Enhancement:
    sharpen_sigma: float = RESTORE_SHARPEN_SIGMA
    brightness: float = RESTORE_BRIGHTNESS
    saturation: float = RESTORE_SATURATION


@dataclass(frozen=True)
class EncoderParameters:
    """Everything a transcoder needs to produce one output file."""

    operation: Operation
    tier: str
    format: ImageFormat
    quality: int
    resize_width: Optional[int] = None
    resize_height: Optional[int] = None
    without_enlargement: bool = True
    progressive: bool = False
    lossless: bool = False
    effort: Optional[int] = None
    compression_level: Optional[int] = None
    tiff_compression: Optional[str] = None
    enhancement: Optional[Enhancement] = None

    @property
    def needs_resize(self) -> bool:
        return self.resize_width is not None or self.resize_height is not None


def resolve_encoder_parameters(
    operation: Operation | str,
    tier_name: str | None,
    source_format: ImageFormat | str | None,
    requested_format: ImageFormat | str | None = None,
    *,
    original_width: int | None = None,
    width: int | None = None,
    height: int | None = None,
) -> EncoderParameters:
    """Resolve encoder parameters for one operation.

    Args:
        operation: "convert", "compress" or "restore".
        tier_name: Free-form tier name; unknown names fall back.
        source_format: Detected format of the input file.
        requested_format: Output format for convert (default jpeg).
        original_width: Input width, used for resize decisions.
        width, height: Explicit convert dimensions; override the tier.

    Raises:
        ValueError: If operation is not one of the three kinds.
    """
    op = Operation(operation)
    if op == Operation.CONVERT:
        return _resolve_convert(tier_name, requested_format, width, height)
    if op == Operation.COMPRESS:
        return _resolve_compress(tier_name, source_format, original_width)
    return _resolve_restore(tier_name, source_format, original_width)


def _resolve_convert(
    tier_name: str | None,
    requested_format: ImageFormat | str | None,
    width: int | None,
    height: int | None,
) -> EncoderParameters:
    fmt = normalize_format(requested_format or ImageFormat.JPEG)
    if fmt not in _CONVERT_TARGETS:
        fmt = ImageFormat.JPEG

    tier = tier_name or "maximum"
    if tier == "maximum":
        quality, max_dimension = CONVERT_QUALITY, None
    else:
        profile = destructive_profile(tier)
        tier, quality, max_dimension = profile.name, profile.quality, profile.max_dimension

    return EncoderParameters(
        operation=Operation.CONVERT,
        tier=tier,
        format=fmt,
        quality=quality,
        resize_width=width or max_dimension,
        resize_height=height,
        without_enlargement=True,
        **_codec_flags(fmt, Operation.CONVERT),
    )


def _resolve_compress(
    tier_name: str | None,
    source_format: ImageFormat | str | None,
    original_width: int | None,
) -> EncoderParameters:
    profile = destructive_profile(tier_name)
    source = normalize_format(source_format)

    if source == ImageFormat.PNG and profile.name in PNG_TO_WEBP_TIERS:
        fmt = ImageFormat.WEBP
    elif source in _COMPRESS_TARGETS:
        fmt = source
    else:
        fmt = ImageFormat.JPEG

    resize_width = None
    if profile.max_dimension and (original_width is None or original_width > profile.max_dimension):
        resize_width = profile.max_dimension

    return EncoderParameters(
        operation=Operation.COMPRESS,
        tier=profile.name,
        format=fmt,
        quality=profile.quality,
        resize_width=resize_width,
        without_enlargement=True,
        **_codec_flags(fmt, Operation.COMPRESS),
    )


def _resolve_restore(
    tier_name: str | None,
    source_format: ImageFormat | str | None,
    original_width: int | None,
) -> EncoderParameters:
    profile = restorative_profile(tier_name)
    source = normalize_format(source_format)
    fmt = source if source in _RESTORE_TARGETS else ImageFormat.JPEG

    resize_width = None
    if profile.upscale_factor and profile.upscale_factor > 1 and original_width:
        resize_width = math.floor(original_width * profile.upscale_factor)

    return EncoderParameters(
        operation=Operation.RESTORE,
        tier=profile.name,
        format=fmt,
        quality=profile.quality,
        resize_width=resize_width,
        without_enlargement=False,
        enhancement=Enhancement(),
        **_codec_flags(fmt, Operation.RESTORE),
    )


def _codec_flags(fmt: ImageFormat, op: Operation) -> dict:
    """Per-codec encoder knobs."""
    if fmt == ImageFormat.JPEG:
        # Huffman optimisation always; progressive scans only when shrinking
        return {"effort": 1, "progressive": op == Operation.COMPRESS}
    if fmt == ImageFormat.PNG:
        level = 6 if op == Operation.RESTORE else 9
        return {"lossless": True, "compression_level": level}
    if fmt == ImageFormat.WEBP:
        return {"effort": 6}
    if fmt == ImageFormat.AVIF:
        return {"effort": 9}
    if fmt == ImageFormat.TIFF:
        return {"tiff_compression": "jpeg"}
    return {}
