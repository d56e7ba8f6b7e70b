import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath

from src.config import settings
from src.exceptions import BadInput, UploadFailed

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """
    Stores uploads flat under ``root`` with generated names, keeping the
    original extension. URLs are ``<url_prefix>/<name>`` and are served back
    by the StaticFiles mount.
    """

    def __init__(self, root: str | Path, url_prefix: str = "/uploads"):
        self.root = Path(root).resolve()
        self.url_prefix = url_prefix.rstrip("/")

    def _path_for(self, name: str) -> Path:
        path = (self.root / name).resolve()
        if path.parent != self.root:
            raise BadInput("Invalid storage path")
        return path

    def _name_from_url(self, url: str) -> str:
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            raise BadInput("Invalid storage path")
        return url[len(prefix):]

    def path_for_url(self, url: str) -> Path:
        return self._path_for(self._name_from_url(url))

    async def save(self, content: bytes, original_filename: str) -> str:
        suffix = PurePosixPath(original_filename or "").suffix.lower()
        name = f"{uuid.uuid4().hex}{suffix}"
        path = self._path_for(name)

        def write():
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        try:
            await asyncio.to_thread(write)
        except OSError as e:
            logger.exception(f"Failed to write upload {name}")
            raise UploadFailed() from e
        return f"{self.url_prefix}/{name}"

    async def delete(self, url: str) -> None:
        """Remove the file behind ``url``. Already-missing files are ignored."""
        path = self.path_for_url(url)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            logger.exception(f"Failed to delete upload {path.name}")
            raise UploadFailed("File deletion failed") from e

    async def discard(self, urls) -> int:
        """
        Delete files whose records are already gone.

        Failures are logged and skipped; the caller has committed and the
        leftover file is only an orphan on disk. Returns how many were removed.
        """
        removed = 0
        for url in urls:
            try:
                await self.delete(url)
            except (UploadFailed, BadInput):
                logger.warning(f"Orphaned upload left behind: {url}")
                continue
            removed += 1
        return removed


def get_storage() -> LocalFileStorage:
    return LocalFileStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)
