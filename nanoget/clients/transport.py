"""
Socket transport provider.

``open_stream`` dials the Locator's host and port and, for HTTPS, wraps the
socket in TLS. Both cases yield a SocketStream, so the protocol engine
handles plain and encrypted connections the same way.
"""

import socket
import ssl
from typing import Optional

from nanoget.errors import IoError, TlsError
from nanoget.url import Locator
from nanoget.utils import tls
from nanoget.utils.logging import get_logger


class SocketStream:
    """ByteStream over one connected socket (plain or TLS)."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock: Optional[socket.socket] = sock
        self.logger = get_logger()

    @property
    def closed(self) -> bool:
        return self._sock is None

    def _socket(self) -> socket.socket:
        if self._sock is None:
            raise IoError("Not connected")
        return self._sock

    def write(self, data: bytes) -> int:
        """Send all of ``data``.

        Raises:
            IoError: If the socket fails
        """
        sock = self._socket()
        try:
            self.logger.debug(f"Sending {len(data)} bytes")
            sock.sendall(data)
        except OSError as e:
            self.logger.error(f"Error sending data: {e}")
            raise IoError(f"Error sending data: {e}") from e
        return len(data)

    def read(self, size: int) -> bytes:
        """Receive up to ``size`` bytes; empty bytes mean the peer closed.

        Raises:
            IoError: If the socket fails or the read times out
        """
        sock = self._socket()
        try:
            data = sock.recv(size)
        except socket.timeout as e:
            self.logger.error(f"Read timed out after {sock.gettimeout()} seconds")
            raise IoError(f"Read timed out after {sock.gettimeout()} seconds") from e
        except OSError as e:
            self.logger.error(f"Error receiving data: {e}")
            raise IoError(f"Error receiving data: {e}") from e
        self.logger.debug(f"Received {len(data)} bytes")
        return data

    def close(self) -> None:
        """Close the socket. Closing twice is a no-op."""
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        self.logger.debug("Closing connection")
        try:
            sock.close()
        except OSError as e:
            self.logger.debug(f"Error closing connection: {e}")

    def __enter__(self) -> "SocketStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_stream(
    locator: Locator,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    verify_ssl: bool = True,
    ssl_context: Optional[ssl.SSLContext] = None,
) -> SocketStream:
    """Open a connected stream to the Locator's host and port.

    Args:
        locator: Target; its scheme selects plain TCP or TLS
        timeout: Read/write timeout in seconds, None to block forever
        connect_timeout: Connection and TLS handshake timeout in seconds
        verify_ssl: Whether to verify the server certificate (HTTPS only)
        ssl_context: SSL context to use instead of the default one

    Returns:
        A connected SocketStream

    Raises:
        IoError: If the connection cannot be established
        TlsError: If the TLS handshake fails
    """
    logger = get_logger()
    logger.debug(
        f"Connecting to {locator.host_with_port} ({'HTTPS' if locator.is_https else 'HTTP'})"
    )
    try:
        sock = socket.create_connection(
            (locator.connect_host, locator.port), timeout=connect_timeout
        )
    except socket.timeout as e:
        logger.error(f"Connection to {locator.host_with_port} timed out")
        raise IoError(f"Connection to {locator.host_with_port} timed out") from e
    except (OSError, UnicodeError) as e:
        # Hostnames are IDNA-encoded, which rejects empty or overlong labels
        logger.error(f"Failed to connect to {locator.host_with_port}: {e}")
        raise IoError(f"Failed to connect to {locator.host_with_port}: {e}") from e

    if locator.is_https:
        context = ssl_context or tls.get_http1_ssl_context(verify=verify_ssl)
        try:
            sock = context.wrap_socket(sock, server_hostname=locator.connect_host)
        except (OSError, UnicodeError) as e:
            sock.close()
            logger.error(f"TLS handshake with {locator.host_with_port} failed: {e}")
            raise TlsError(f"TLS handshake with {locator.host_with_port} failed: {e}") from e
        protocol = tls.get_negotiated_protocol(sock)
        if protocol:
            logger.debug(f"Negotiated protocol: {protocol}")

    sock.settimeout(timeout)
    logger.debug("Connection established")
    return SocketStream(sock)
