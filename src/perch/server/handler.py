"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Converts the scope
to a typed Request, runs it through app middleware and the router, and
sends the Response back through ASGI send().
"""

from collections.abc import Callable
from typing import Any

from kida import Environment

from perch._internal.asgi import Receive, Scope, Send
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.routing.router import Router
from perch.server.dispatch import run_chain
from perch.server.errors import ErrorHandler, handle_http_error, handle_internal_error
from perch.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, ErrorHandler],
    kida_env: Environment | None = None,
    template_suffix: str = ".html",
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def dispatch(req: Request) -> Response:
        match = router.match(req.method, req.path)
        return await run_chain(
            match,
            req,
            kida_env=kida_env,
            template_suffix=template_suffix,
        )

    # Wrap middleware around the dispatch, first-added outermost
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = await handle_http_error(
            exc, request, error_handlers, kida_env, template_suffix
        )
    except Exception as exc:
        response = await handle_internal_error(
            exc, request, error_handlers, kida_env, template_suffix, debug
        )

    await send_response(response, send, head=request.method == "HEAD")
