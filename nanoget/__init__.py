"""
nanoget: a minimal HTTP/1.1 GET client.

Quick example::

    import nanoget

    body = nanoget.get("http://example.com/")

    request = nanoget.Request.default_get_request("https://example.com/")
    request.add_header("Accept-Language", "en")
    response = request.execute()
    print(response.status, len(response.body))
"""

__version__ = "0.1.0"

from nanoget.api import get, get_http, get_https, request_get
from nanoget.clients.http1 import HTTP1Client, execute
from nanoget.errors import (
    ErrorKind,
    IoError,
    MalformedChunk,
    MalformedHeader,
    MalformedLocator,
    MalformedStatusLine,
    NanoGetError,
    ProtocolError,
    RequestFrozen,
    TlsError,
    TruncatedBody,
)
from nanoget.headers import Headers
from nanoget.parser import ResponseParser, parse_bytes, parse_response
from nanoget.request import Request
from nanoget.response import Framing, Response, ResponseStatus, StatusClass
from nanoget.url import Locator, Scheme, parse as parse_locator

__all__ = [
    "ErrorKind",
    "Framing",
    "HTTP1Client",
    "Headers",
    "IoError",
    "Locator",
    "MalformedChunk",
    "MalformedHeader",
    "MalformedLocator",
    "MalformedStatusLine",
    "NanoGetError",
    "ProtocolError",
    "Request",
    "RequestFrozen",
    "Response",
    "ResponseParser",
    "ResponseStatus",
    "Scheme",
    "StatusClass",
    "TlsError",
    "TruncatedBody",
    "execute",
    "get",
    "get_http",
    "get_https",
    "parse_bytes",
    "parse_locator",
    "parse_response",
    "request_get",
]
