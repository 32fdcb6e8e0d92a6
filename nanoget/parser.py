"""
HTTP/1.x response parser.

The parser is a sequential state machine (STATUS_LINE -> HEADERS -> BODY ->
DONE) that pulls bytes incrementally from a readable byte stream. The body
is delimited by one of three framing strategies, chosen once the headers
are complete:

- ``Transfer-Encoding: chunked``: length-prefixed chunks ending with a zero
  chunk and optional trailer fields
- ``Content-Length``: exactly that many bytes
- neither: everything until the server closes the connection

The last strategy cannot tell a complete body from a dropped connection.
"""

import io
from enum import Enum
from typing import List, Optional, Tuple, Type

from nanoget.clients.base import ByteStream
from nanoget.errors import (
    IoError,
    MalformedChunk,
    MalformedHeader,
    MalformedStatusLine,
    ProtocolError,
    TruncatedBody,
)
from nanoget.headers import Headers
from nanoget.response import Framing, Response
from nanoget.utils.logging import get_logger

DEFAULT_MAX_LINE_SIZE = 65536
DEFAULT_READ_SIZE = 8192

HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")

# Statuses that never carry a body, whatever the headers say
NO_BODY_STATUSES = frozenset({204, 304})

SWITCHING_PROTOCOLS = 101


class ParserState(Enum):
    """States of the response parser."""

    STATUS_LINE = 1
    HEADERS = 2
    BODY = 3
    DONE = 4


class StreamReader:
    """Buffered line and block reader over a ByteStream.

    Reads at most ``read_size`` bytes at a time from the stream and keeps
    whatever was read past the current line or block for the next call.
    """

    def __init__(self, stream: ByteStream, read_size: int = DEFAULT_READ_SIZE) -> None:
        self._stream = stream
        self._read_size = read_size
        self._buffer = bytearray()
        self._eof = False

    @property
    def at_eof(self) -> bool:
        return self._eof and not self._buffer

    def _fill(self) -> bool:
        """Read one block from the stream into the buffer.

        Returns:
            False once the stream has signalled end-of-data
        """
        if self._eof:
            return False
        try:
            data = self._stream.read(self._read_size)
        except IoError:
            raise
        except OSError as e:
            raise IoError(f"Error receiving data: {e}") from e
        if not data:
            self._eof = True
            return False
        self._buffer.extend(data)
        return True

    def read_line(
        self,
        limit: int,
        error: Type[ProtocolError],
    ) -> Optional[bytes]:
        """Read one line, without its ``\\r\\n`` or bare ``\\n`` terminator.

        Args:
            limit: Maximum line length in bytes
            error: Exception class raised when the line exceeds ``limit``

        Returns:
            The line, the unterminated remainder if the stream ended mid-line,
            or None if the stream ended before any byte
        """
        start = 0
        while True:
            index = self._buffer.find(b"\n", start)
            if index != -1:
                if index > limit:
                    raise error(f"Line exceeds {limit} bytes")
                line = bytes(self._buffer[:index])
                del self._buffer[:index + 1]
                if line.endswith(b"\r"):
                    line = line[:-1]
                return line
            if len(self._buffer) > limit:
                raise error(f"Line exceeds {limit} bytes")
            start = len(self._buffer)
            if not self._fill():
                if not self._buffer:
                    return None
                line = bytes(self._buffer)
                self._buffer.clear()
                return line

    def read_exact(self, size: int) -> bytes:
        """Read ``size`` bytes, or fewer if the stream ends first."""
        while len(self._buffer) < size:
            if not self._fill():
                break
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def read_to_end(self) -> bytes:
        """Read everything until the stream signals end-of-data."""
        while self._fill():
            pass
        data = bytes(self._buffer)
        self._buffer.clear()
        return data


def _split_header(line: bytes) -> Tuple[str, str]:
    """Split a header line into a trimmed (name, value) pair."""
    if b":" not in line:
        raise MalformedHeader("Header line without ':' separator", line)
    name, value = line.split(b":", 1)
    name = name.strip()
    if not name:
        raise MalformedHeader("Header line with empty name", line)
    return (
        name.decode("utf-8", errors="replace"),
        value.strip().decode("utf-8", errors="replace"),
    )


class ResponseParser:
    """Parses an HTTP/1.0 or HTTP/1.1 response from a byte stream.

    A parser instance tracks the state of the response it is parsing, so use
    one instance per response.
    """

    def __init__(
        self,
        max_line_size: int = DEFAULT_MAX_LINE_SIZE,
        read_size: int = DEFAULT_READ_SIZE,
    ) -> None:
        """Initialize a new response parser.

        Args:
            max_line_size: Longest status, header or chunk-size line accepted
            read_size: Number of bytes requested from the stream per read
        """
        self.max_line_size = max_line_size
        self.read_size = read_size
        self.state = ParserState.STATUS_LINE
        self.logger = get_logger()

    def parse(self, stream: ByteStream, method: str = "GET") -> Response:
        """Parse a complete response from ``stream``.

        Args:
            stream: Connected readable byte stream positioned at the response
            method: Method of the request being answered; HEAD responses
                have no body

        Returns:
            The parsed Response

        Raises:
            MalformedStatusLine: If the status line is invalid
            MalformedHeader: If a header or chunk-size line is invalid
            TruncatedBody: If the stream ends before the body is complete
            IoError: If reading from the stream fails
        """
        reader = StreamReader(stream, self.read_size)

        while True:
            self.state = ParserState.STATUS_LINE
            version, status_code, status_text = self._read_status_line(reader)
            self.logger.debug(f"Status line: {version} {status_code} {status_text}")

            self.state = ParserState.HEADERS
            headers = self._read_headers(reader)

            # Interim responses (100 Continue, 103 Early Hints) precede the final one
            if 100 <= status_code < 200 and status_code != SWITCHING_PROTOCOLS:
                self.logger.debug(f"Skipping interim response {status_code}")
                continue
            break

        self.state = ParserState.BODY
        framing, content_length = self.resolve_framing(method, status_code, headers)
        self.logger.debug(f"Body framing: {framing.value}")

        trailers = Headers()
        if framing is Framing.NONE:
            body = b""
        elif framing is Framing.CHUNKED:
            body, trailers = self._read_chunked_body(reader)
        elif framing is Framing.CONTENT_LENGTH:
            body = self._read_content_length_body(reader, content_length)
        else:
            body = reader.read_to_end()
        self.logger.debug(f"Received body: {len(body)} bytes")

        self.state = ParserState.DONE
        return Response(
            status_code=status_code,
            status_text=status_text,
            headers=headers,
            body=body,
            http_version=version,
            trailers=trailers,
            framing=framing,
        )

    def _read_status_line(self, reader: StreamReader) -> Tuple[str, int, str]:
        """Read and split the status line into version, code and reason."""
        line = reader.read_line(self.max_line_size, MalformedStatusLine)
        # Tolerate empty lines ahead of the status line
        while line == b"":
            line = reader.read_line(self.max_line_size, MalformedStatusLine)
        if line is None:
            raise MalformedStatusLine("Connection closed before status line")

        parts = line.decode("utf-8", errors="replace").split(None, 2)
        if len(parts) < 2:
            raise MalformedStatusLine("Status line has too few fields", line)

        version, code = parts[0], parts[1]
        if not version.startswith("HTTP/"):
            raise MalformedStatusLine("Invalid protocol version", line)
        if not (code.isascii() and code.isdigit()):
            raise MalformedStatusLine("Invalid status code", line)
        status_code = int(code)
        if not 100 <= status_code <= 599:
            raise MalformedStatusLine("Status code out of range", line)

        status_text = parts[2].strip() if len(parts) > 2 else ""
        return version, status_code, status_text

    def _read_headers(self, reader: StreamReader) -> Headers:
        """Read header lines up to and including the empty line."""
        fields: List[Tuple[str, str]] = []
        while True:
            line = reader.read_line(self.max_line_size, MalformedHeader)
            if line is None:
                raise MalformedHeader("Connection closed before end of headers")
            if not line:
                break
            if line[:1] in (b" ", b"\t") and fields:
                # Obsolete line folding continues the previous value
                name, value = fields[-1]
                continuation = line.strip().decode("utf-8", errors="replace")
                fields[-1] = (name, f"{value} {continuation}".strip())
                continue
            fields.append(_split_header(line))
        return Headers(fields)

    def resolve_framing(
        self,
        method: str,
        status_code: int,
        headers: Headers,
    ) -> Tuple[Framing, Optional[int]]:
        """Decide how the body of a response is delimited.

        Returns:
            The framing strategy and, for CONTENT_LENGTH, the body length
        """
        if method.upper() == "HEAD" or status_code < 200 or status_code in NO_BODY_STATUSES:
            return Framing.NONE, None

        transfer_encoding = headers.get("Transfer-Encoding")
        if transfer_encoding is not None and "chunked" in transfer_encoding.lower():
            return Framing.CHUNKED, None

        lengths = headers.get_all("Content-Length")
        if lengths:
            # "5, 5" is a list-valued Content-Length carrying one length
            values = {v.strip() for value in lengths for v in value.split(",")}
            if len(values) > 1:
                raise MalformedHeader(f"Conflicting Content-Length values: {sorted(values)}")
            value = values.pop()
            if value.isascii() and value.isdigit():
                return Framing.CONTENT_LENGTH, int(value)
            self.logger.warning(f"Ignoring invalid Content-Length: {value!r}")

        return Framing.UNTIL_CLOSE, None

    def _read_content_length_body(self, reader: StreamReader, length: int) -> bytes:
        body = reader.read_exact(length)
        if len(body) < length:
            raise TruncatedBody(length, len(body))
        return body

    def _read_chunked_body(self, reader: StreamReader) -> Tuple[bytes, Headers]:
        """Decode a chunked body.

        Returns:
            The reassembled body and any trailer fields
        """
        body = bytearray()
        while True:
            line = reader.read_line(self.max_line_size, MalformedChunk)
            if line is None:
                raise TruncatedBody(
                    len(body) + 1, len(body), "Stream closed before chunk size line"
                )

            size_text = line.split(b";", 1)[0].strip()
            if not size_text or not all(c in HEX_DIGITS for c in size_text):
                raise MalformedChunk("Invalid chunk size", line)
            size = int(size_text, 16)

            if size == 0:
                return bytes(body), self._read_trailers(reader)

            chunk = reader.read_exact(size)
            if len(chunk) < size:
                raise TruncatedBody(len(body) + size, len(body) + len(chunk))
            body.extend(chunk)

            terminator = reader.read_line(self.max_line_size, MalformedChunk)
            if terminator is None:
                raise TruncatedBody(
                    len(body) + 1, len(body), "Stream closed before end of chunk"
                )
            if terminator:
                raise MalformedChunk("Chunk data not followed by CRLF", terminator)

    def _read_trailers(self, reader: StreamReader) -> Headers:
        """Read trailer fields after the last chunk.

        A stream that closes right after the zero-size chunk is accepted.
        """
        trailers = Headers()
        while True:
            line = reader.read_line(self.max_line_size, MalformedHeader)
            if not line:
                return trailers
            trailers.add(*_split_header(line))


def parse_response(stream: ByteStream, method: str = "GET") -> Response:
    """Parse a response from ``stream`` with a default ResponseParser."""
    return ResponseParser().parse(stream, method)


def parse_bytes(data: bytes, method: str = "GET") -> Response:
    """Parse a response held entirely in memory."""
    return ResponseParser().parse(io.BytesIO(data), method)
