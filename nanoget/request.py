"""
HTTP/1.1 request builder.

A Request holds a method, a Locator, an ordered header map and an optional
body, and serializes them to the HTTP/1.1 wire format. Requests are
mutable until they are serialized or executed, after which they are frozen.
"""

from typing import TYPE_CHECKING, Optional, Union

from nanoget.errors import RequestFrozen
from nanoget.headers import HeaderPairs, Headers
from nanoget.url import Locator, to_locator

if TYPE_CHECKING:
    from nanoget.clients.http1 import HTTP1Client
    from nanoget.response import Response

USER_AGENT = "nanoget/0.1.0"

# Methods this client knows how to frame responses for
METHODS = ("GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS")

DEFAULT_HEADERS = (
    ("User-Agent", USER_AGENT),
    ("Accept", "*/*"),
    ("Connection", "close"),
)


class Request:
    """An HTTP/1.1 request bound to a single Locator.

    Header names are matched case-insensitively and written in insertion
    order. ``add_header`` overwrites an existing header of the same name, so
    a request never carries duplicate header lines.
    """

    def __init__(
        self,
        locator: Union[str, Locator],
        method: str = "GET",
        headers: Optional[HeaderPairs] = None,
        body: Optional[Union[bytes, str]] = None,
    ) -> None:
        """Initialize a new request.

        Args:
            locator: Target URL, as a string or a parsed Locator
            method: HTTP method, one of METHODS
            headers: Extra headers, overriding the defaults by name
            body: Optional request body; str bodies are UTF-8 encoded

        Raises:
            MalformedLocator: If ``locator`` cannot be parsed
            ValueError: If ``method`` is not supported
        """
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        self.method = method
        self.locator = to_locator(locator)
        self.headers = Headers()
        self.body: Optional[bytes] = None
        self._frozen = False

        self.headers.set("Host", self.locator.host_header)
        for name, value in DEFAULT_HEADERS:
            self.headers.set(name, value)
        if headers:
            for name, value in Headers(headers).items():
                self.headers.set(name, value)
        if body is not None:
            self.set_body(body)

    @classmethod
    def default_get_request(cls, locator: Union[str, Locator]) -> "Request":
        """Build a GET request with the Host header and standard defaults."""
        return cls(locator)

    @property
    def path(self) -> str:
        return self.locator.path

    @property
    def is_https(self) -> bool:
        return self.locator.is_https

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RequestFrozen("Request can no longer be modified once serialized")

    def add_header(self, name: str, value: str) -> None:
        """Insert a header, overwriting any header with the same name."""
        self._check_mutable()
        self.headers.set(name, value)

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    def set_body(self, body: Union[bytes, str]) -> None:
        """Attach a body and the matching Content-Length header."""
        self._check_mutable()
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = bytes(body)
        self.headers.set("Content-Length", str(len(self.body)))

    def serialize(self) -> bytes:
        """Serialize the request to HTTP/1.1 wire format.

        Produces the request line, one ``Name: Value`` line per header in
        insertion order, a blank line and the body, if any. The request is
        frozen afterwards.

        Returns:
            Raw request as bytes
        """
        self._frozen = True

        request_parts = [f"{self.method} {self.locator.path} HTTP/1.1\r\n"]
        for name, value in self.headers.items():
            request_parts.append(f"{name}: {value}\r\n")
        request_parts.append("\r\n")

        # Header octets are ISO-8859-1 on the wire
        request_bytes = "".join(request_parts).encode("latin-1", errors="replace")
        if self.body:
            request_bytes += self.body
        return request_bytes

    def execute(self, client: Optional["HTTP1Client"] = None) -> "Response":
        """Send this request over a fresh connection and parse the response.

        Args:
            client: Client carrying timeouts and TLS settings; a default
                HTTP1Client is used when omitted

        Returns:
            The parsed Response

        Raises:
            NanoGetError: On any locator, transport or protocol failure
        """
        if client is None:
            from nanoget.clients.http1 import HTTP1Client

            client = HTTP1Client()
        return client.execute(self)

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.locator.url}>"
