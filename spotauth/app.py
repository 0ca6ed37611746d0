from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .constants import APP_VERSION, LOGGER


class FailureBoundaryMiddleware(BaseHTTPMiddleware):
    """Turn any unhandled exception into the generic failure envelope.

    The exception is logged with its traceback; the response body never
    carries details of it.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            LOGGER.exception("Unhandled failure on %s %s", request.method, request.url.path)
            return JSONResponse(
                {"success": False, "message": None, "data": None},
                status_code=500,
            )


def health_route() -> Route:
    async def health(request: Request) -> Response:
        del request
        return JSONResponse({"status": "ok", "version": APP_VERSION})

    return Route("/health", health, methods=["GET"])
