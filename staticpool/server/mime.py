"""File extension to MIME type mapping."""

import re
from pathlib import PurePath
from typing import Optional, Union

from staticpool.server.paths import has_extension

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "txt": "text/plain",
    "md": "text/plain",
    "html": "text/html",
    "xml": "application/xml",
    "json": "application/json",
    "css": "text/css",
}

# RFC 7230 token characters
_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_MIME_RE = re.compile(rf"^{_TOKEN}/{_TOKEN}$")


def extension(path: Union[str, PurePath]) -> Optional[str]:
    """Return the extension of *path* without the dot, or None."""
    name = PurePath(path).name
    if not has_extension(name):
        return None
    return name.rsplit(".", 1)[1]


def parse_mime(value: str) -> Optional[str]:
    """Return *value* if it is a well-formed ``type/subtype``, else None."""
    if _MIME_RE.match(value):
        return value.lower()
    return None


def content_type(path: Union[str, PurePath]) -> Optional[str]:
    """Best-effort content type for *path*.

    Known extensions come from :data:`CONTENT_TYPES`; anything else is
    tried as a MIME type verbatim and dropped when it does not parse.
    """
    ext = extension(path)
    if ext is None:
        return None
    if ext in CONTENT_TYPES:
        return CONTENT_TYPES[ext]
    return parse_mime(ext)
