"""
HTTP response model.

Responses are created by the ResponseParser and are immutable afterwards.
The body is kept as raw bytes; ``text`` offers a best-effort UTF-8 view.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from nanoget.headers import Headers


class Framing(Enum):
    """How the end of a response body was determined."""

    NONE = "none"
    CONTENT_LENGTH = "content-length"
    CHUNKED = "chunked"
    UNTIL_CLOSE = "until-close"


class StatusClass(Enum):
    """Status code classes, per RFC 9110 section 15."""

    INFORMATIONAL = 1
    SUCCESS = 2
    REDIRECTION = 3
    CLIENT_ERROR = 4
    SERVER_ERROR = 5

    @classmethod
    def from_code(cls, code: int) -> "StatusClass":
        return cls(code // 100)


class ResponseStatus(NamedTuple):
    """Status code and reason phrase of a response."""

    code: int
    reason: str

    @property
    def status_class(self) -> StatusClass:
        return StatusClass.from_code(self.code)

    def __str__(self) -> str:
        if self.reason:
            return f"{self.code} - {self.reason}"
        return str(self.code)


@dataclass(frozen=True)
class Response:
    """A parsed HTTP response."""

    status_code: int
    status_text: str
    headers: Headers
    body: bytes = b""
    http_version: str = "HTTP/1.1"
    trailers: Headers = field(default_factory=Headers)
    framing: Framing = Framing.UNTIL_CLOSE
    elapsed: Optional[float] = field(default=None, compare=False)

    @property
    def status(self) -> ResponseStatus:
        return ResponseStatus(self.status_code, self.status_text)

    @property
    def status_class(self) -> StatusClass:
        return StatusClass.from_code(self.status_code)

    @property
    def ok(self) -> bool:
        return self.status_class is StatusClass.SUCCESS

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, with invalid sequences replaced."""
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    def __repr__(self) -> str:
        return f"<Response [{self.status}] {len(self.body)} bytes>"
