"""Upload service protocol."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class UploadPurpose(StrEnum):
    """What an upload will be used for; selects the size and type limits."""

    AVATAR = "avatar"
    BACKGROUND = "background"


@dataclass(frozen=True)
class StoredMedia:
    """Reference to stored content plus its coarse media kind."""

    url: str
    kind: str  # "image" or "video"


class IUploadService(Protocol):
    """Stores uploaded bytes and hands back a URL."""

    async def store(self, data: bytes, content_type: str, purpose: UploadPurpose) -> StoredMedia:
        """
        Store an upload.

        Raises:
            UploadRejectedError: Size or media type not allowed for the purpose
            UpstreamUnavailableError: The storage backend failed
        """
        ...

    async def discard(self, url: str) -> None:
        """Remove previously stored content; missing content is ignored."""
        ...

    def max_bytes(self, purpose: UploadPurpose) -> int:
        """Largest upload accepted for ``purpose``."""
        ...
