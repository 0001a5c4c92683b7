import asyncio
import re
import time
from pathlib import Path, PurePath

from config import settings
from exceptions import NotFoundError, ShrinkrayError
from utils.logging import get_logger

logger = get_logger("storage.local")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LocalFileStore:
    """Stores transcode outputs on the local filesystem.

    Files are written flat into ``upload_dir`` and served back by name
    from ``public_upload_path``.
    """

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root) if root is not None else None

    @property
    def root(self) -> Path:
        """Upload directory (read from settings on first use)."""
        if self._root is None:
            self._root = Path(settings.upload_dir)
        return self._root

    def output_name(self, prefix: str, input_name: str | None, ext: str) -> str:
        """``{prefix}-{epoch_ms}-{stem}.{ext}`` with the stem sanitised."""
        stem = PurePath(input_name or "file").stem
        stem = _UNSAFE_CHARS.sub("_", stem).strip("._") or "file"
        return f"{prefix}-{int(time.time() * 1000)}-{stem}.{ext}"

    def public_path(self, name: str) -> str:
        return f"{settings.public_upload_path.rstrip('/')}/{name}"

    async def save(self, name: str, data: bytes) -> str:
        """Write bytes under the upload dir; returns the public path.

        Raises:
            ShrinkrayError: If the write fails.
        """
        path = self.resolve(name)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error(
                f"Failed to store output: {e}",
                extra={"context": {"file": name, "size": len(data)}},
            )
            raise ShrinkrayError(f"Failed to store output file: {e}", filename=name)
        return self.public_path(name)

    async def read(self, name: str) -> bytes:
        path = self.resolve(name)
        if not path.is_file():
            raise NotFoundError("File not found", filename=name)
        return await asyncio.to_thread(path.read_bytes)

    def resolve(self, name: str) -> Path:
        """Map a stored file name onto a path inside the upload dir.

        Raises:
            NotFoundError: If the name tries to leave the upload dir.
        """
        if not name or PurePath(name).name != name or name in (".", ".."):
            raise NotFoundError("File not found", filename=name)
        return self.root / name

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


# Module-level singleton
file_store = LocalFileStore()
