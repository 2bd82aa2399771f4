"""
Object storage collaborator for post images and founder reports.

The core only records the returned URLs.
"""

import asyncio
import uuid
from pathlib import Path
from typing import Optional, Protocol

from contentops.config import Settings, get_settings
from contentops.logging_config import get_logger

logger = get_logger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
}


class ObjectStorage(Protocol):
    """Stores opaque blobs and hands back a public URL."""

    async def store(self, data: bytes, content_type: str, path: str) -> str: ...

    async def delete(self, url: str) -> None: ...


def image_folder(founder_id: uuid.UUID, admin_id: uuid.UUID, post_id: Optional[uuid.UUID] = None) -> str:
    """Folder key for a founder's images, per post when a post id is known."""
    base = f"images/founders/{founder_id}/admins/{admin_id}"
    return f"{base}/posts/{post_id}" if post_id else f"{base}/general"


def report_folder(founder_id: uuid.UUID) -> str:
    return f"reports/founders/{founder_id}"


class LocalObjectStorage:
    """Filesystem-backed storage served under settings.public_upload_url."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.root = Path(settings.upload_dir)
        self.base_url = settings.public_upload_url.rstrip("/")

    async def store(self, data: bytes, content_type: str, path: str) -> str:
        """Write data under path with a generated file name; returns its URL."""
        key = f"{path.strip('/')}/{uuid.uuid4()}{_EXTENSIONS.get(content_type, '')}"
        target = self.root / key
        await asyncio.to_thread(self._write, target, data)
        logger.info("Object stored", extra={"key": key, "bytes": len(data)})
        return f"{self.base_url}/{key}"

    async def delete(self, url: str) -> None:
        if not url.startswith(self.base_url + "/"):
            return
        target = self.root / url[len(self.base_url) + 1:]
        await asyncio.to_thread(target.unlink, True)

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
