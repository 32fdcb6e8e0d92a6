"""Shared fixtures: an in-memory ByteStream and a client wired to it."""

from typing import Callable, List, Optional

import pytest

from nanoget.clients.http1 import HTTP1Client
from nanoget.url import Locator


class FakeStream:
    """Scripted in-memory ByteStream.

    Reads hand out ``chunks`` one at a time (split further if the caller asks
    for less), then either raise ``error`` or signal end-of-data.
    """

    def __init__(
        self,
        data: bytes = b"",
        chunk_size: Optional[int] = None,
        chunks: Optional[List[bytes]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if chunks is None:
            size = chunk_size or max(len(data), 1)
            chunks = [data[i:i + size] for i in range(0, len(data), size)]
        self.chunks = list(chunks)
        self.error = error
        self.written = bytearray()
        self.closed = False
        self.reads = 0

    def read(self, size: int) -> bytes:
        self.reads += 1
        if self.chunks:
            chunk = self.chunks.pop(0)
            if len(chunk) > size:
                self.chunks.insert(0, chunk[size:])
                chunk = chunk[:size]
            return chunk
        if self.error is not None:
            raise self.error
        return b""

    def write(self, data: bytes) -> int:
        self.written.extend(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


class StreamFactory:
    """Stand-in for ``open_stream`` that hands out a prepared FakeStream."""

    def __init__(self, stream: FakeStream) -> None:
        self.stream = stream
        self.locators: List[Locator] = []
        self.options: List[dict] = []

    def __call__(self, locator: Locator, **options) -> FakeStream:
        self.locators.append(locator)
        self.options.append(options)
        return self.stream


@pytest.fixture
def make_stream() -> Callable[..., FakeStream]:
    return FakeStream


@pytest.fixture
def make_client() -> Callable[..., HTTP1Client]:
    """Build an HTTP1Client whose transport is a FakeStream over ``data``."""

    def factory(data: bytes = b"", **stream_options) -> HTTP1Client:
        stream = FakeStream(data, **stream_options)
        return HTTP1Client(stream_factory=StreamFactory(stream))

    return factory
