"""
TLS utilities for the HTTPS transport.

Contexts built here advertise only HTTP/1.1 over ALPN, since nanoget never
speaks HTTP/2.
"""

import ssl
from typing import Optional

HTTP1_ALPN_PROTOCOLS = ["http/1.1"]


def get_http1_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """Build a client SSL context for HTTP/1.1 connections.

    Args:
        verify: Whether to verify server certificates and hostnames

    Returns:
        Client SSL context with the ``http/1.1`` ALPN protocol set
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    context.set_alpn_protocols(HTTP1_ALPN_PROTOCOLS)
    return context


def get_negotiated_protocol(ssl_socket: ssl.SSLSocket) -> Optional[str]:
    """Return the ALPN protocol agreed on by the server, if any."""
    return ssl_socket.selected_alpn_protocol()
