"""
One-shot convenience functions.

``get`` returns the body text of a GET request. Every failure, whether a
bad URL, a transport error or a malformed response, is raised as a
NanoGetError subclass; callers needing the status line or headers use
``request_get`` or build a Request themselves.
"""

from typing import Any, Optional, Union

from nanoget.clients.http1 import HTTP1Client
from nanoget.errors import MalformedLocator
from nanoget.headers import HeaderPairs
from nanoget.request import Request
from nanoget.response import Response
from nanoget.url import Locator, Scheme, to_locator


def request_get(
    url: Union[str, Locator],
    headers: Optional[HeaderPairs] = None,
    **client_options: Any,
) -> Response:
    """Send a GET request and return the full Response.

    Args:
        url: Target URL
        headers: Extra request headers
        **client_options: Keyword arguments for HTTP1Client

    Raises:
        NanoGetError: On any failure
    """
    request = Request(url, headers=headers)
    return HTTP1Client(**client_options).execute(request)


def get(url: Union[str, Locator], **client_options: Any) -> str:
    """Send a GET request and return the response body as text.

    Raises:
        NanoGetError: On any failure
    """
    return request_get(url, **client_options).text


def _get_with_scheme(url: Union[str, Locator], scheme: Scheme, **client_options: Any) -> str:
    locator = to_locator(url)
    if locator.scheme is not scheme:
        raise MalformedLocator(f"Expected an {scheme.value} URL", locator.url)
    return get(locator, **client_options)


def get_http(url: Union[str, Locator], **client_options: Any) -> str:
    """Like ``get``, but only for ``http`` URLs."""
    return _get_with_scheme(url, Scheme.HTTP, **client_options)


def get_https(url: Union[str, Locator], **client_options: Any) -> str:
    """Like ``get``, but only for ``https`` URLs."""
    return _get_with_scheme(url, Scheme.HTTPS, **client_options)
