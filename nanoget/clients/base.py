"""
Byte stream interface for HTTP transports.

This module defines the capability every transport must offer to the
protocol engine. Plain sockets, TLS sockets and in-memory test streams
all satisfy it without sharing a base class.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ByteStream(Protocol):
    """A connected, bidirectional byte stream.

    For HTTPS the stream is already TLS-negotiated; the protocol engine
    never sees TLS.
    """

    def write(self, data: bytes) -> int:
        """Write ``data`` to the stream.

        Returns:
            Number of bytes written
        """
        ...

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes.

        Returns:
            The bytes read; an empty result signals end-of-data
        """
        ...

    def close(self) -> None:
        """Release the stream."""
        ...
