"""
HTTP/1.1 client.

This module wires the pieces together for one request: open a transport for
the request's Locator, write the serialized request, parse the response and
close the transport on every exit path. There is no connection reuse; each
call owns its stream exclusively.
"""

import dataclasses
import ssl
import time
from typing import Callable, Optional

from nanoget.clients.base import ByteStream
from nanoget.clients.transport import open_stream
from nanoget.errors import IoError
from nanoget.parser import DEFAULT_MAX_LINE_SIZE, ResponseParser
from nanoget.request import Request
from nanoget.response import Response
from nanoget.url import Locator
from nanoget.utils.logging import get_logger, log_request, log_response

DEFAULT_TIMEOUT = 15.0
DEFAULT_CONNECT_TIMEOUT = 5.0

StreamFactory = Callable[..., ByteStream]


def send_request(stream: ByteStream, request: Request) -> None:
    """Write a serialized request to ``stream``.

    Raises:
        IoError: If writing fails
    """
    data = request.serialize()
    try:
        stream.write(data)
    except IoError:
        raise
    except OSError as e:
        raise IoError(f"Error sending data: {e}") from e


def receive_response(
    stream: ByteStream,
    method: str = "GET",
    max_line_size: int = DEFAULT_MAX_LINE_SIZE,
) -> Response:
    """Parse the response to a request of ``method`` from ``stream``."""
    return ResponseParser(max_line_size=max_line_size).parse(stream, method)


def execute(stream: ByteStream, request: Request, method: Optional[str] = None) -> Response:
    """Run ``request`` over an already-connected stream.

    ``method`` overrides the request method when deciding whether the
    response has a body. The stream is left open; closing it is the
    caller's responsibility.
    """
    send_request(stream, request)
    return receive_response(stream, method or request.method)


class HTTP1Client:
    """One-request-per-connection HTTP/1.1 client.

    Features:
    - Plain TCP or TLS transport, selected by the request's scheme
    - Read and connect timeouts enforced by the transport
    - Guaranteed transport release, including on parse failures
    - Timing of each request, recorded on ``Response.elapsed``
    """

    def __init__(
        self,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT,
        verify_ssl: bool = True,
        ssl_context: Optional[ssl.SSLContext] = None,
        max_line_size: int = DEFAULT_MAX_LINE_SIZE,
        stream_factory: StreamFactory = open_stream,
    ) -> None:
        """Initialize a new HTTP/1.1 client.

        Args:
            timeout: Read timeout in seconds, None to wait forever
            connect_timeout: Connection timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            ssl_context: Custom SSL context for HTTPS connections
            max_line_size: Longest response line accepted by the parser
            stream_factory: Callable opening a ByteStream for a Locator
        """
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.verify_ssl = verify_ssl
        self.ssl_context = ssl_context
        self.max_line_size = max_line_size
        self.stream_factory = stream_factory
        self.logger = get_logger()

    def connect(self, locator: Locator) -> ByteStream:
        """Open a new stream to ``locator``.

        Raises:
            IoError: If the connection or TLS handshake fails
        """
        return self.stream_factory(
            locator,
            timeout=self.timeout,
            connect_timeout=self.connect_timeout,
            verify_ssl=self.verify_ssl,
            ssl_context=self.ssl_context,
        )

    def execute(self, request: Request) -> Response:
        """Send ``request`` over a fresh connection and parse the response.

        Args:
            request: Request to send; it is frozen by this call

        Returns:
            The parsed Response, with ``elapsed`` set

        Raises:
            IoError: If the transport fails
            ProtocolError: If the response is malformed or truncated
        """
        log_request(
            self.logger, request.method, request.path, request.headers.items(), request.body
        )
        start_time = time.monotonic()

        stream = self.connect(request.locator)
        try:
            send_request(stream, request)
            response = receive_response(stream, request.method, self.max_line_size)
        finally:
            stream.close()

        response = dataclasses.replace(response, elapsed=time.monotonic() - start_time)
        log_response(
            self.logger,
            response.status_code,
            response.headers.items(),
            response.body,
            response.elapsed,
        )
        return response
