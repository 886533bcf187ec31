"""Maps step return values to Response objects.

isinstance-based dispatch, no magic, fully predictable:

1. ``Response``  -> pass through
2. ``Redirect``  -> status + ``Location`` header
3. ``Template``  -> render via kida -> text/html
4. ``str``       -> 200, text/html
5. ``bytes``     -> 200, application/octet-stream
"""

from typing import Any

from kida import Environment

from perch.errors import ConfigurationError
from perch.http.response import Redirect, Response
from perch.templating.integration import render_template
from perch.templating.returns import Template


def negotiate(
    value: Any,
    *,
    kida_env: Environment | None = None,
    template_suffix: str = ".html",
) -> Response:
    """Convert a step's return value to a Response."""
    match value:
        case Response():
            return value
        case Redirect():
            return value.to_response()
        case Template():
            if kida_env is None:
                msg = (
                    "Template return type requires kida integration. "
                    "Ensure a template_dir is configured in AppConfig."
                )
                raise ConfigurationError(msg)
            html = render_template(kida_env, value, suffix=template_suffix)
            return Response(body=html, status=value.status)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case _:
            msg = f"Cannot convert {type(value).__name__} to a response."
            raise TypeError(msg)
