"""Heuristic size estimator for the compress operation.

Predicts the output size from the tier's target reduction, a format-pair
correction and the area lost to downscaling, without running an encoder.
The figure is a planning aid: after the real transcode, estimate_accuracy()
compares it against the measured size.
"""

import math
from dataclasses import dataclass
from typing import Optional

from policy.tiers import destructive_profile
from utils.format_detect import ImageFormat, normalize_format

MAX_REDUCTION = 0.95

PNG_TO_PNG_FACTOR = 0.6  # limited lossy headroom
JPEG_TO_JPEG_FACTOR = 0.8
MODERN_CODEC_FACTOR = 1.2  # webp/avif targets
RESIZE_WEIGHT = 0.5  # quality reduction already accounts for part of the area loss

# Products such as 2_000_000 * (1 - 0.775) land just below the integer
_FLOOR_PRECISION = 6


@dataclass(frozen=True)
class ImageDescriptor:
    """What the estimator needs to know about an input file."""

    format: ImageFormat
    width: Optional[int]
    height: Optional[int]
    byte_size: int


@dataclass(frozen=True)
class SizeEstimate:
    original_size: int
    estimated_size: int
    estimated_reduction_percent: int


def estimate_compressed_size(
    descriptor: ImageDescriptor,
    tier_name: str | None,
    target_format: ImageFormat | str | None = None,
) -> SizeEstimate:
    """Predict the compressed size of an image at the given tier.

    Args:
        descriptor: Format, dimensions and byte size of the input.
        tier_name: Destructive tier; unknown names behave like "medium".
        target_format: Output format. Defaults to the source format,
            since compression keeps the format.

    Returns:
        SizeEstimate with 0 <= estimated_reduction_percent <= 95.
    """
    profile = destructive_profile(tier_name)
    source = normalize_format(descriptor.format)
    target = normalize_format(target_format) if target_format else source

    reduction = profile.target_reduction * format_pair_factor(source, target)

    width = descriptor.width
    if profile.max_dimension and width and width > profile.max_dimension:
        area_kept = (profile.max_dimension / width) ** 2
        reduction += (1 - area_kept) * RESIZE_WEIGHT

    reduction = min(reduction, MAX_REDUCTION)

    original_size = max(descriptor.byte_size, 0)
    estimated_size = _floor(original_size * (1 - reduction))

    return SizeEstimate(
        original_size=original_size,
        estimated_size=min(max(estimated_size, 0), original_size),
        estimated_reduction_percent=_floor(reduction * 100),
    )


def format_pair_factor(source: ImageFormat, target: ImageFormat) -> float:
    """Correction applied to the tier's baseline reduction."""
    if source == ImageFormat.PNG and target == ImageFormat.PNG:
        return PNG_TO_PNG_FACTOR
    if source == ImageFormat.JPEG and target == ImageFormat.JPEG:
        return JPEG_TO_JPEG_FACTOR
    if target in (ImageFormat.WEBP, ImageFormat.AVIF):
        return MODERN_CODEC_FACTOR
    return 1.0


def estimate_accuracy(estimated_size: int, actual_size: int) -> float:
    """How close the estimate came to the measured size, in percent.

    An estimate of zero bytes is fully accurate only if the output is
    also empty.
    """
    if estimated_size == 0:
        return 100.0 if actual_size == 0 else 0.0
    error = abs(estimated_size - actual_size) / estimated_size * 100
    return round(max(0.0, 100 - error), 1)


def actual_reduction_percent(original_size: int, actual_size: int) -> float:
    if original_size <= 0:
        return 0.0
    return round((original_size - actual_size) / original_size * 100, 1)


def _floor(value: float) -> int:
    return math.floor(round(value, _FLOOR_PRECISION))
