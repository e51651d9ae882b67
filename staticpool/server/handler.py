"""Request handler and response translator.

``StaticHandler.handle`` takes ``(method, path, headers)`` and returns
``(status, headers, body)``.  It is transport-agnostic: the FastAPI route
in :mod:`staticpool.server.routes.static` is a thin adapter around it.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Mapping, Union

from staticpool.common.constants import DEFAULT_GZIP_LEVEL, ENCODING_GZIP, MIN_GZIP_SIZE, Headers
from staticpool.common.models import (
    FileBody,
    InternalError,
    MethodNotAllowed,
    NotFound,
    Outcome,
    ResponseTuple,
    ServiceUnavailable,
    Success,
)
from staticpool.server.io_pool import IOPool, PoolSaturatedError
from staticpool.server.loader import FileLoadError, FileMissingError, load_file
from staticpool.server.mime import content_type
from staticpool.server.paths import resolve

logger = logging.getLogger("staticpool.server")
access_logger = logging.getLogger("staticpool.access")


def accepts_gzip(headers: Mapping[str, str]) -> bool:
    """True if any Accept-Encoding token is ``gzip``.

    Quality values are not interpreted.  All header lines are considered
    when *headers* is a multi-dict (e.g. starlette ``Headers``).
    """
    wanted = Headers.ACCEPT_ENCODING.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        for token in value.split(","):
            coding = token.split(";", 1)[0].strip().lower()
            if coding == ENCODING_GZIP:
                return True
    return False


def _log_abandoned(job: "asyncio.Future[FileBody]") -> None:
    """Retrieve the result of a load whose request was cancelled."""
    if job.cancelled():
        return
    error = job.exception()
    if isinstance(error, FileMissingError):
        logger.debug("Not found after client left: %s", error)
    elif error is not None:
        logger.warning("Load failed after client left: %s", error)


def translate(outcome: Outcome) -> ResponseTuple:
    """Turn an outcome into ``(status, headers, body)``."""
    if isinstance(outcome, Success):
        headers = {Headers.CONTENT_LENGTH: str(outcome.length)}
        if outcome.content_type:
            headers[Headers.CONTENT_TYPE] = outcome.content_type
        if outcome.gzip:
            headers[Headers.CONTENT_ENCODING] = ENCODING_GZIP
        return 200, headers, outcome.body
    if isinstance(outcome, NotFound):
        status = 404
    elif isinstance(outcome, MethodNotAllowed):
        status = 405
    elif isinstance(outcome, InternalError):
        status = 500
    elif isinstance(outcome, ServiceUnavailable):
        status = 503
    else:
        raise TypeError(f"Unknown outcome: {outcome!r}")
    return status, {Headers.CONTENT_LENGTH: "0"}, b""


class StaticHandler:
    """Serve files below *root* through an :class:`IOPool`."""

    def __init__(
        self,
        root: Union[str, Path],
        pool: IOPool,
        min_gzip_size: int = MIN_GZIP_SIZE,
        gzip_level: int = DEFAULT_GZIP_LEVEL,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.root = Path(root)
        self.pool = pool
        self.min_gzip_size = min_gzip_size
        self.gzip_level = gzip_level
        self._clock = clock

    async def handle(self, method: str, path: str, headers: Mapping[str, str]) -> ResponseTuple:
        """Run one request through the pipeline."""
        start = self._clock()
        outcome = await self._outcome(method, path, headers)
        response = translate(outcome)
        self._log(method, path, response[0], start)
        return response

    async def _outcome(self, method: str, path: str, headers: Mapping[str, str]) -> Outcome:
        if method != "GET":
            return MethodNotAllowed()

        resolved = resolve(self.root, path)
        gzip = accepts_gzip(headers)
        try:
            job = self.pool.submit(load_file, resolved, gzip, self.min_gzip_size, self.gzip_level)
        except PoolSaturatedError as e:
            logger.warning("Rejected %s: %s", path, e)
            return ServiceUnavailable()

        try:
            # A dropped connection cancels this task, never the job
            body = await asyncio.shield(job)
        except asyncio.CancelledError:
            job.add_done_callback(_log_abandoned)
            raise
        except FileMissingError:
            logger.debug("Not found: %s", resolved)
            return NotFound()
        except FileLoadError as e:
            logger.error("%s", e)
            return InternalError(cause=str(e))

        return Success.from_file_body(body, content_type(resolved))

    def _log(self, method: str, path: str, status: int, start: float) -> None:
        duration_us = int((self._clock() - start) * 1_000_000)
        access_logger.info("[%d] %s %s \t%dµs", status, method, path, duration_us)
