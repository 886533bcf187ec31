"""Template return type.

A frozen value that steps return. The negotiation layer renders it
through the app's kida environment.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Template:
    """Render a full kida template.

    Usage::

        return Template("home", params=request.path_params, user=None)

    A name without an extension gets ``AppConfig.template_suffix``.
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)
    status: int = 200

    def __init__(self, name: str, /, *, status: int = 200, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
        object.__setattr__(self, "status", status)
