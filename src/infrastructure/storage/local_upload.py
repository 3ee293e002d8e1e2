"""Local disk upload service."""

import asyncio
import logging
import uuid
from pathlib import Path

from core.config import settings
from core.exceptions import ErrorCode, UploadRejectedError, UpstreamUnavailableError
from infrastructure.storage.provider import StoredMedia, UploadPurpose

logger = logging.getLogger(__name__)

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
VIDEO_TYPES = frozenset(
    {"video/mp4", "video/webm", "video/ogg", "video/avi", "video/mov", "video/quicktime"}
)

_ALLOWED_TYPES = {
    UploadPurpose.AVATAR: IMAGE_TYPES,
    UploadPurpose.BACKGROUND: IMAGE_TYPES | VIDEO_TYPES,
}

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/ogg": ".ogv",
    "video/avi": ".avi",
    "video/mov": ".mov",
    "video/quicktime": ".mov",
}


class LocalUploadService:
    """Writes uploads under ``upload_dir`` and serves them from ``url_prefix``."""

    def __init__(
        self,
        upload_dir: str = settings.upload_dir,
        url_prefix: str = settings.upload_url_prefix,
        avatar_max_bytes: int = settings.avatar_max_bytes,
        background_max_bytes: int = settings.background_max_bytes,
    ) -> None:
        self._root = Path(upload_dir)
        self._url_prefix = url_prefix.rstrip("/")
        self._max_bytes = {
            UploadPurpose.AVATAR: avatar_max_bytes,
            UploadPurpose.BACKGROUND: background_max_bytes,
        }

    async def store(self, data: bytes, content_type: str, purpose: UploadPurpose) -> StoredMedia:
        """Validate and write an upload, returning its public URL."""
        content_type = (content_type or "").split(";")[0].strip().lower()
        if content_type not in _ALLOWED_TYPES[purpose]:
            raise UploadRejectedError(
                ErrorCode.UNSUPPORTED_MEDIA_TYPE,
                f"Unsupported {purpose.value} media type: {content_type or 'unknown'}",
                415,
            )

        max_bytes = self._max_bytes[purpose]
        if len(data) > max_bytes:
            raise UploadRejectedError(
                ErrorCode.FILE_TOO_LARGE,
                f"{purpose.value.capitalize()} exceeds {max_bytes // (1024 * 1024)} MB limit",
                413,
            )
        if not data:
            raise UploadRejectedError(ErrorCode.VALIDATION_ERROR, "Uploaded file is empty", 400)

        extension = _EXTENSIONS[content_type]
        filename = f"{purpose.value}-{uuid.uuid4().hex}{extension}"
        path = self._root / filename

        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            logger.error("Failed to store upload %s: %s", filename, exc)
            raise UpstreamUnavailableError("upload storage") from exc

        kind = "video" if content_type in VIDEO_TYPES else "image"
        logger.info("Stored %s upload %s (%d bytes)", purpose.value, filename, len(data))
        return StoredMedia(url=f"{self._url_prefix}/{filename}", kind=kind)

    def max_bytes(self, purpose: UploadPurpose) -> int:
        return self._max_bytes[purpose]

    async def discard(self, url: str) -> None:
        """Delete a stored upload by its public URL."""
        if not url.startswith(f"{self._url_prefix}/"):
            return
        name = url[len(self._url_prefix) + 1 :]
        if not name or "/" in name or name.startswith("."):
            return
        try:
            await asyncio.to_thread((self._root / name).unlink, True)
        except OSError:
            logger.warning("Could not discard upload %s", name)

    def _write(self, path: Path, data: bytes) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
