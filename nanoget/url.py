"""
Locator parsing.

This module turns URL-like strings of the form
``scheme://host[:port][/path][?query]`` into immutable Locator objects
carrying everything needed to open a connection and write a request line.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from nanoget.errors import MalformedLocator


class Scheme(Enum):
    """Supported URL schemes."""

    HTTP = "http"
    HTTPS = "https"

    @property
    def default_port(self) -> int:
        return 443 if self is Scheme.HTTPS else 80


@dataclass(frozen=True)
class Locator:
    """Parsed representation of a URL's scheme, host, port and path.

    Attributes:
        scheme: URL scheme, which selects the default port and TLS usage
        host: Hostname or IP address (IPv6 literals keep their brackets)
        port: TCP port
        path: Request target written on the request line, query included
    """

    scheme: Scheme
    host: str
    port: int
    path: str = "/"

    def __post_init__(self) -> None:
        if not self.host:
            raise MalformedLocator("Locator host must not be empty")

    @classmethod
    def parse(cls, raw: str) -> "Locator":
        return parse(raw)

    @property
    def is_https(self) -> bool:
        return self.scheme is Scheme.HTTPS

    @property
    def default_port(self) -> int:
        return self.scheme.default_port

    @property
    def host_with_port(self) -> str:
        """Return ``host:port``, the form used to dial the server."""
        return f"{self.host}:{self.port}"

    @property
    def connect_host(self) -> str:
        """Return the host without IPv6 brackets, as sockets expect it."""
        if self.host.startswith("["):
            return self.host[1:-1]
        return self.host

    @property
    def host_header(self) -> str:
        """Return the value for the ``Host`` request header."""
        if self.port == self.default_port:
            return self.host
        return self.host_with_port

    @property
    def url(self) -> str:
        return f"{self.scheme.value}://{self.host_header}{self.path}"

    def __str__(self) -> str:
        return self.url


def _split_port(authority: str, raw: str) -> tuple[str, str]:
    """Split an authority into host and (possibly empty) port strings."""
    if authority.startswith("["):
        end = authority.find("]")
        if end == -1:
            raise MalformedLocator("Unterminated IPv6 literal", raw)
        host, rest = authority[:end + 1], authority[end + 1:]
        if rest and not rest.startswith(":"):
            raise MalformedLocator("Unexpected characters after IPv6 literal", raw)
        return host, rest[1:]
    if ":" in authority:
        host, port = authority.split(":", 1)
        return host, port
    return authority, ""


def parse(raw: str) -> Locator:
    """Parse a URL string into a Locator.

    Args:
        raw: URL of the form ``scheme://host[:port][/path]``

    Returns:
        The parsed Locator

    Raises:
        MalformedLocator: If the scheme is missing or unsupported, the host is
            empty, or the port is invalid
    """
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedLocator("Empty locator")
    text = raw.strip()

    if "://" not in text:
        raise MalformedLocator("Missing scheme", raw)
    scheme_name, rest = text.split("://", 1)
    try:
        scheme = Scheme(scheme_name.lower())
    except ValueError:
        raise MalformedLocator(f"Unsupported scheme {scheme_name!r}", raw) from None

    # The fragment is never part of the request target
    rest = rest.split("#", 1)[0]

    # The authority ends at the first '/' or '?'
    cut = len(rest)
    for delimiter in ("/", "?"):
        index = rest.find(delimiter)
        if index != -1:
            cut = min(cut, index)
    authority, path = rest[:cut], rest[cut:]
    if not path:
        path = "/"
    elif path.startswith("?"):
        path = "/" + path

    if "@" in authority:
        raise MalformedLocator("Credentials in locator are not supported", raw)
    if any(c.isspace() for c in authority):
        raise MalformedLocator("Whitespace in host", raw)

    host, port_str = _split_port(authority, raw)
    if not host or host == "[]":
        raise MalformedLocator("Missing host", raw)

    if port_str:
        if not (port_str.isascii() and port_str.isdigit()):
            raise MalformedLocator(f"Invalid port {port_str!r}", raw)
        port = int(port_str)
        if not 0 < port < 65536:
            raise MalformedLocator(f"Port out of range: {port}", raw)
    else:
        port = scheme.default_port

    return Locator(scheme=scheme, host=host, port=port, path=path)


def to_locator(value: Union[str, Locator]) -> Locator:
    """Return ``value`` as a Locator, parsing it when given a string."""
    if isinstance(value, Locator):
        return value
    return parse(value)
