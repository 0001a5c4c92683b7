import asyncio

from config import settings
from exceptions import BackpressureError


class TranscodeGate:
    """Bounds concurrent Pillow/pypdf work.

    - Semaphore limits active transcodes to CPU count (configurable)
    - Queue depth limit keeps waiting uploads (up to 50MB each) from piling up
    - When the queue is full, fails fast with 503 and Retry-After

    Usable directly (acquire/release) or as ``async with transcode_gate:``.
    """

    def __init__(self, slots: int | None = None, max_queue: int | None = None):
        self._slots = slots or settings.compression_semaphore_size
        self._semaphore = asyncio.Semaphore(self._slots)
        self._queue_depth = 0
        self._max_queue = max_queue or settings.max_queue_depth
        self._lock = asyncio.Lock()

    async def acquire(self):
        """Acquire a transcode slot.

        Raises BackpressureError (503) if queue is full.
        """
        async with self._lock:
            if self._queue_depth >= self._max_queue:
                raise BackpressureError(
                    "Transcode queue full. Try again shortly.",
                    retry_after=5,
                )
            self._queue_depth += 1

        try:
            await self._semaphore.acquire()
        except BaseException:
            self._queue_depth -= 1
            raise

    def release(self):
        """Release a transcode slot."""
        self._semaphore.release()
        self._queue_depth -= 1

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.release()

    @property
    def active_jobs(self) -> int:
        return self._slots - self._semaphore._value

    @property
    def queued_jobs(self) -> int:
        return max(0, self._queue_depth - self.active_jobs)


# Module-level singleton
transcode_gate = TranscodeGate()
