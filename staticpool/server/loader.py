"""Blocking file loader.

Runs on the I/O pool: opens the resolved path, reads it to EOF and
optionally gzip-compresses the bytes.  Failures are raised as
:class:`FileLoadError` subclasses so the request handler can map them
to status codes.
"""

import gzip
import logging
import os
import zlib
from pathlib import Path
from typing import Union

from staticpool.common.constants import DEFAULT_GZIP_LEVEL, MIN_GZIP_SIZE
from staticpool.common.models import FileBody

logger = logging.getLogger("staticpool.server.loader")


class FileLoadError(Exception):
    """Base class for file loading failures."""


class FileMissingError(FileLoadError):
    """The file does not exist."""


class FileReadError(FileLoadError):
    """Any other I/O or compression failure."""

    def __init__(self, path: Union[str, Path], cause: BaseException):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


def should_gzip(want_gzip: bool, length: int, min_size: int = MIN_GZIP_SIZE) -> bool:
    """Gzip only when the client asked for it and the file is big enough."""
    return want_gzip and length > min_size


def load_file(
    path: Union[str, Path],
    want_gzip: bool,
    min_gzip_size: int = MIN_GZIP_SIZE,
    gzip_level: int = DEFAULT_GZIP_LEVEL,
) -> FileBody:
    """Read *path* into memory, compressing it when eligible.

    Args:
        path: Resolved filesystem path.
        want_gzip: Client advertised gzip in Accept-Encoding.
        min_gzip_size: Files of this size or smaller are sent raw.
        gzip_level: zlib compression level.

    Returns:
        The loaded :class:`FileBody`.

    Raises:
        FileMissingError: *path* does not exist.
        FileReadError: Any other failure.
    """
    logger.debug("==> %s", path)
    try:
        with open(path, "rb") as f:
            length = os.fstat(f.fileno()).st_size
            data = f.read()
    except FileNotFoundError:
        raise FileMissingError(str(path))
    except (OSError, ValueError) as e:
        raise FileReadError(path, e) from e

    if not should_gzip(want_gzip, length, min_gzip_size):
        return FileBody(data=data, original_length=length)

    try:
        compressed = gzip.compress(data, compresslevel=gzip_level)
    except (zlib.error, ValueError) as e:
        raise FileReadError(path, e) from e
    return FileBody(data=compressed, original_length=length, gzip=True)
