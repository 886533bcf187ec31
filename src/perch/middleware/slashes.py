"""Trailing-slash middleware.

Routing is strict, so ``/profile`` and ``/profile/`` are different paths.
This middleware makes the slashed form canonical: any path longer than
``/`` that does not end in a slash gets a permanent redirect to the same
path with one appended, query string included.
"""

from perch.http.request import Request
from perch.http.response import Redirect, Response
from perch.middleware.protocol import Next


class AddSlashesMiddleware:
    """301 ``/path`` to ``base_url + /path/``.

    Usage::

        app.add_middleware(AddSlashesMiddleware())
        app.add_middleware(AddSlashesMiddleware(base_url="https://example.com"))
    """

    __slots__ = ("base_url",)

    def __init__(self, base_url: str = "") -> None:
        self.base_url = base_url.rstrip("/")

    async def __call__(self, request: Request, next: Next) -> Response:
        path = "/" + request.path.lstrip("/")
        if len(path) > 1 and not path.endswith("/"):
            target = f"{self.base_url}{path}/"
            if request.query_string:
                target = f"{target}?{request.query_string}"
            return Redirect(target, status=301).to_response()
        return await next(request)
