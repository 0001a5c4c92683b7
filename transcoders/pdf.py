import asyncio
import io

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from exceptions import TranscodeError
from policy.tiers import destructive_profile
from schemas import TranscodeResult
from transcoders.base import BaseTranscoder
from utils.logging import get_logger

logger = get_logger("transcoders.pdf")

# Tiers that recompress page content and drop duplicate objects
DEEP_TIERS = frozenset({"low", "medium"})


class PdfTranscoder(BaseTranscoder):
    """Re-saves a PDF with pypdf.

    low/medium: flate-compress every page content stream and merge
    identical objects. high/maximum: plain rewrite, which still drops
    unreferenced objects and incremental-update garbage.
    """

    async def transcode(self, data: bytes, tier_name: str | None = None) -> TranscodeResult:
        tier = destructive_profile(tier_name).name
        try:
            output = await asyncio.to_thread(self._rewrite, data, tier in DEEP_TIERS)
        except (PyPdfError, OSError, ValueError, KeyError) as e:
            logger.error(
                f"PDF transcode failed: {e}",
                extra={"context": {"tier": tier, "file_size": len(data)}},
            )
            raise TranscodeError(f"Could not compress PDF: {e}", format="pdf") from e

        return self._build_result(data, output, fmt="pdf", method=f"pypdf-{tier}")

    def _rewrite(self, data: bytes, deep: bool) -> bytes:
        reader = PdfReader(io.BytesIO(data))
        writer = PdfWriter(clone_from=reader)

        if deep:
            for page in writer.pages:
                page.compress_content_streams()
            writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)

        buf = io.BytesIO()
        writer.write(buf)
        return buf.getvalue()


pdf_transcoder = PdfTranscoder()
