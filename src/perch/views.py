"""View factory — terminal steps built from a parameter.

Each factory closes over its argument and returns a ``TerminalStep``::

    ROUTES = {
        "/": authenticated_render(gate, "home"),
        "/error/(:err_no)?/?": error_page,
        "*": redirect_to("/error/404/"),
    }

Rendered templates receive ``params`` (the captured path segments) and
``user`` (the resolved ``User``, or ``None`` when anonymous).
"""

from perch.auth.gate import AuthGate
from perch.http.request import Request
from perch.http.response import Redirect
from perch.middleware.auth import current_user
from perch.routing.steps import Step, TerminalStep, terminal
from perch.templating.returns import Template

ERROR_TEMPLATE = "error"
DEFAULT_ERROR = "404"


def _principal():
    user = current_user()
    return user if user.is_authenticated else None


def redirect_to(url: str, *, status: int = 302) -> TerminalStep:
    """Always redirect to *url*."""

    def redirect_view(request: Request) -> Redirect:
        return Redirect(url, status=status)

    return terminal(redirect_view, name=f"redirect_to({url!r})")


def render(template: str) -> TerminalStep:
    """Render *template* with the path params and the current principal."""

    def render_view(request: Request) -> Template:
        return Template(template, params=dict(request.path_params), user=_principal())

    return terminal(render_view, name=f"render({template!r})")


def authenticated_render(gate: AuthGate, template: str) -> list[Step]:
    """``render(template)`` behind ``gate.require_login``.

    Returns the two-step chain itself, not a combined handler, so the
    gate's redirect ends the chain exactly as it would written out by hand.
    """
    return [gate.require_login, render(template)]


def _error_view(request: Request) -> Template:
    err_no = request.path_params.get("err_no") or DEFAULT_ERROR
    status = 200
    if err_no.isascii() and err_no.isdigit() and 400 <= int(err_no) <= 599:
        status = int(err_no)
    return Template(
        ERROR_TEMPLATE,
        status=status,
        err_no=err_no,
        params=dict(request.path_params),
        user=_principal(),
    )


error_page = terminal(_error_view, name="error_page")
"""Render the ``error`` template for the captured ``err_no`` (default ``"404"``)."""
