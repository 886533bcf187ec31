"""Access log middleware — one log line per request."""

import logging
import time

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next

logger = logging.getLogger("perch.access")


class AccessLogMiddleware:
    """Log ``METHOD path status duration`` for every request.

    Requests that raise are logged by the error pipeline instead; the
    exception propagates unchanged.
    """

    __slots__ = ("_logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        response = await next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client[0] if request.client else "-"
        self._logger.info(
            '%s "%s %s" %d %.1fms',
            client,
            request.method,
            request.url,
            response.status,
            elapsed_ms,
        )
        return response
