"""Request path resolution.

Turns the path component of a URL into a filesystem path confined to the
server root.  Segments are applied one at a time: ``.`` is dropped and
``..`` pops a previously pushed segment.  Popping with nothing pushed is a
no-op, so no request can climb above the root.
"""

from pathlib import Path
from typing import Union

from staticpool.common.constants import DEFAULT_EXTENSION, INDEX_FILE


def split_request_path(request_path: str) -> list[str]:
    """Strip the leading separator and split into non-empty segments."""
    return [segment for segment in request_path.lstrip("/").split("/") if segment]


def has_extension(name: str) -> bool:
    """Return True when *name* carries an extension.

    A leading dot does not count (``.bashrc`` has none), a trailing one
    does (``name.`` has the empty extension).
    """
    return "." in name[1:]


def canonicalize(root: Union[str, Path], request_path: str) -> Path:
    """Apply request segments to *root* without touching the filesystem."""
    segments: list[str] = []
    for segment in split_request_path(request_path):
        if segment == "..":
            if segments:
                segments.pop()
        elif segment != ".":
            segments.append(segment)
    return Path(root).joinpath(*segments)


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except (OSError, ValueError):
        # Embedded NUL bytes and over-long names are never directories
        return False


def resolve(root: Union[str, Path], request_path: str) -> Path:
    """Resolve *request_path* against *root*.

    Existing directories get ``index.html`` appended; a final component
    without an extension gets ``.html``.

    Args:
        root: Server root directory.
        request_path: URL path, with or without the leading ``/``.

    Returns:
        Path at or below *root*.
    """
    path = canonicalize(root, request_path)
    if _is_dir(path):
        path = path / INDEX_FILE
    if not has_extension(path.name):
        path = path.with_name(f"{path.name}.{DEFAULT_EXTENSION}")
    return path
