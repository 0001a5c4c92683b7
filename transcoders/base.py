from abc import ABC, abstractmethod

from schemas import TranscodeResult


class BaseTranscoder(ABC):
    """Abstract base for the image and PDF transcoders."""

    @abstractmethod
    async def transcode(self, data: bytes, *args, **kwargs) -> TranscodeResult:
        """Transcode input bytes into a new output file."""

    def _build_result(
        self,
        original: bytes,
        output: bytes,
        fmt: str,
        method: str,
        quality: int | None = None,
        dimensions: tuple[int, int] | None = None,
    ) -> TranscodeResult:
        """Build a result with size stats.

        Unlike a pure optimizer, the output may be larger than the input
        (conversion to a heavier codec, restore upscaling); the size is
        reported as-is.
        """
        original_size = len(original)
        output_size = len(output)
        width, height = dimensions if dimensions else (None, None)

        reduction = 0.0
        if original_size:
            reduction = round((1 - output_size / original_size) * 100, 1)

        return TranscodeResult(
            original_size=original_size,
            output_size=output_size,
            reduction_percent=reduction,
            format=fmt,
            method=method,
            quality=quality,
            width=width,
            height=height,
            output_bytes=output,
        )
