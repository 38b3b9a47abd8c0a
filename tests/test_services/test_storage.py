import httpx
import pytest

from contramind.core.exceptions import DocumentExtractionError
from contramind.services.storage import StorageClient


def storage_streaming(pulled: list[int], chunks: int, chunk_size: int = 1024, max_bytes: int | None = None):
    async def body():
        for i in range(chunks):
            pulled.append(i)
            yield b"x" * chunk_size

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body())

    return StorageClient(max_bytes=max_bytes, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_returns_whole_body():
    pulled = []
    storage = storage_streaming(pulled, chunks=3, max_bytes=4096)

    content = await storage.fetch("https://storage.example/contracts/a.txt")

    assert content == b"x" * 3072


@pytest.mark.asyncio
async def test_oversized_object_stops_reading_past_limit():
    pulled = []
    storage = storage_streaming(pulled, chunks=1000, max_bytes=4096)

    with pytest.raises(DocumentExtractionError, match="larger than"):
        await storage.fetch("https://storage.example/contracts/huge.pdf")

    assert len(pulled) < 10


@pytest.mark.asyncio
async def test_missing_object_is_an_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, content=b"not found")

    storage = StorageClient(transport=httpx.MockTransport(handler))

    with pytest.raises(DocumentExtractionError, match="404"):
        await storage.fetch("https://storage.example/contracts/gone.pdf")
