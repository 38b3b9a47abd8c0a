"""Download of contract objects from the storage bucket."""
import logging

import httpx

from contramind.core.config import Settings
from contramind.core.exceptions import DocumentExtractionError

logger = logging.getLogger(__name__)


class StorageClient:
    def __init__(
        self,
        timeout: float = 60.0,
        max_bytes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageClient":
        return cls(timeout=settings.STORAGE_TIMEOUT_SECONDS, max_bytes=settings.MAX_UPLOAD_BYTES)

    async def fetch(self, url: str) -> bytes:
        """Return the object body stored at ``url``; stops reading once ``max_bytes`` is passed."""
        chunks: list[bytes] = []
        received = 0
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes():
                        received += len(chunk)
                        if self.max_bytes is not None and received > self.max_bytes:
                            raise DocumentExtractionError(
                                f"Stored file is larger than the {self.max_bytes // (1024 * 1024)}MB limit"
                            )
                        chunks.append(chunk)
        except httpx.HTTPStatusError as exc:
            raise DocumentExtractionError(
                f"Storage returned {exc.response.status_code} for the uploaded file"
            ) from exc
        except httpx.HTTPError as exc:
            raise DocumentExtractionError("Could not download the uploaded file") from exc

        logger.info("Fetched %d bytes from storage", received)
        return b"".join(chunks)
