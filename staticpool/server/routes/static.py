"""Catch-all static file route."""

from fastapi import APIRouter, Request, Response

from staticpool.server.handler import StaticHandler


def request_path(request: Request) -> str:
    """Return the request path as sent, without percent-decoding.

    ``%2F`` and friends stay inside their segment.  Falls back to the
    decoded path for servers that do not provide ``raw_path``.
    """
    raw = request.scope.get("raw_path")
    if raw is None:
        return request.scope["path"]
    return raw.split(b"?", 1)[0].decode("latin-1")


def create_static_router(handler: StaticHandler) -> APIRouter:
    """Create the static file router.

    Every path and every method goes to *handler*; non-GET methods come
    back as 405 from the handler itself.  The route is a plain starlette
    route with no method list, so unknown methods (TRACE, PROPFIND, ...)
    reach the handler too.

    Args:
        handler: Request handler bound to the server root and I/O pool

    Returns:
        FastAPI router
    """
    router = APIRouter(tags=["Static"])

    async def serve(request: Request) -> Response:
        """Serve a file below the server root."""
        status, headers, body = await handler.handle(request.method, request_path(request), request.headers)
        return Response(content=body, status_code=status, headers=headers)

    router.add_route("/{path:path}", serve, methods=None, include_in_schema=False)

    return router
