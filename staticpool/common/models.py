"""Data models for StaticPool.

``FileBody`` is what a worker hands back after loading a file.  The
``Outcome`` types form the closed set of per-request results that the
request handler translates into an HTTP response.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class FileBody:
    """Bytes read from disk, possibly gzip-encoded."""

    data: bytes
    original_length: int
    gzip: bool = False

    @property
    def length(self) -> int:
        """Number of bytes that go on the wire."""
        return len(self.data)


@dataclass(frozen=True)
class Success:
    """File served."""

    body: bytes
    length: int
    content_type: Optional[str] = None
    gzip: bool = False

    @classmethod
    def from_file_body(cls, file_body: FileBody, content_type: Optional[str]) -> "Success":
        return cls(
            body=file_body.data,
            length=file_body.length,
            content_type=content_type,
            gzip=file_body.gzip,
        )


@dataclass(frozen=True)
class NotFound:
    """The resolved file does not exist."""


@dataclass(frozen=True)
class MethodNotAllowed:
    """Request method other than GET."""


@dataclass(frozen=True)
class InternalError:
    """Any other I/O or compression failure.  ``cause`` is for logs only."""

    cause: str


@dataclass(frozen=True)
class ServiceUnavailable:
    """The worker pool queue is full (only with a bounded queue)."""


Outcome = Union[Success, NotFound, MethodNotAllowed, InternalError, ServiceUnavailable]

# (status, headers, body) as emitted by the handler
ResponseTuple = tuple[int, dict[str, str], bytes]
