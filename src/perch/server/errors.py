"""Error handling pipeline for perch requests.

Maps HTTPError exceptions and unexpected failures to ordinary page
responses, using registered error handlers or plain defaults. Clients
never see a traceback unless the app runs with ``debug=True``.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from kida import Environment

from perch.errors import ChainExhausted, HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.server")

type ErrorHandler = Callable[..., Any]


async def call_error_handler(
    handler: ErrorHandler,
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
    template_suffix: str,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result
    return negotiate(result, kida_env=kida_env, template_suffix=template_suffix)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, ErrorHandler],
    kida_env: Environment | None,
    template_suffix: str,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env, template_suffix)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    response = Response(body=html.escape(exc.detail or f"Error {exc.status}"), status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, ErrorHandler],
    kida_env: Environment | None,
    template_suffix: str,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions, including exhausted chains, as 500s."""
    if isinstance(exc, ChainExhausted):
        logger.critical("500 %s %s — %s", request.method, request.path, exc)
    else:
        logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env, template_suffix)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        trace = "".join(traceback.format_exception(exc))
        body = f"<h1>500 Internal Server Error</h1><pre>{html.escape(trace)}</pre>"
        return Response(body=body, status=500)

    return Response(body="Internal Server Error", status=500)
