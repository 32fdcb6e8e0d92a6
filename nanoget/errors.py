"""
Exceptions raised by nanoget.

Every error derives from NanoGetError so that the one-shot facade has a
single error channel, while callers that need detail can catch the
specific subclass (or inspect the ``kind`` attribute).
"""

from enum import Enum
from typing import Optional, Union


class ErrorKind(Enum):
    """Kinds of failure a request can end with."""

    MALFORMED_LOCATOR = "malformed_locator"
    MALFORMED_STATUS_LINE = "malformed_status_line"
    MALFORMED_HEADER = "malformed_header"
    TRUNCATED_BODY = "truncated_body"
    IO_ERROR = "io_error"
    REQUEST_FROZEN = "request_frozen"


def _show(line: Union[bytes, str], limit: int = 80) -> str:
    """Return a short printable representation of an offending line."""
    if len(line) > limit:
        return f"{line[:limit]!r}..."
    return repr(line)


class NanoGetError(Exception):
    """Base exception for all nanoget errors."""

    kind: Optional[ErrorKind] = None


class MalformedLocator(NanoGetError, ValueError):
    """Raised when a URL cannot be parsed into a Locator."""

    kind = ErrorKind.MALFORMED_LOCATOR

    def __init__(self, message: str, locator: Optional[str] = None):
        if locator is not None:
            message = f"{message}: {_show(locator)}"
        super().__init__(message)
        self.locator = locator


class RequestFrozen(NanoGetError, RuntimeError):
    """Raised when a request is modified after it was serialized."""

    kind = ErrorKind.REQUEST_FROZEN


class ProtocolError(NanoGetError):
    """Base class for errors in the response received from the server."""


class MalformedStatusLine(ProtocolError):
    """Raised when the response status line cannot be parsed."""

    kind = ErrorKind.MALFORMED_STATUS_LINE

    def __init__(self, message: str, line: Optional[bytes] = None):
        if line is not None:
            message = f"{message}: {_show(line)}"
        super().__init__(message)
        self.line = line


class MalformedHeader(ProtocolError):
    """Raised when a header line (or a chunk-size line) is invalid."""

    kind = ErrorKind.MALFORMED_HEADER

    def __init__(self, message: str, line: Optional[bytes] = None):
        if line is not None:
            message = f"{message}: {_show(line)}"
        super().__init__(message)
        self.line = line


class MalformedChunk(MalformedHeader):
    """Raised when chunked transfer coding framing is invalid."""


class TruncatedBody(ProtocolError):
    """Raised when the stream ends before the body framing is satisfied.

    ``expected`` is exact for Content-Length bodies. For chunked bodies the
    total is not known in advance, so it is a lower bound, always greater
    than ``received``.
    """

    kind = ErrorKind.TRUNCATED_BODY

    def __init__(self, expected: int, received: int, message: Optional[str] = None):
        super().__init__(
            message or f"Stream closed after {received} of {expected} body bytes"
        )
        self.expected = expected
        self.received = received


class IoError(NanoGetError, ConnectionError):
    """Raised when the underlying transport fails.

    The transport's own exception is available as ``__cause__``.
    """

    kind = ErrorKind.IO_ERROR


class TlsError(IoError):
    """Raised when the TLS handshake with the server fails."""
