"""Kida environment setup and rendering.

Creates a kida Environment from perch's AppConfig and binds template
globals. The environment is created once during ``App._freeze()`` and
passed through the request pipeline.
"""

from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Any

from kida import Environment, FileSystemLoader

from perch.config import AppConfig
from perch.templating.returns import Template


def create_environment(
    config: AppConfig,
    globals_: dict[str, Callable[..., Any] | Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Called once during ``App._freeze()``. The returned environment is
    shared read-only by every request.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )
    for name, value in globals_.items():
        env.add_global(name, value)
    return env


def template_filename(name: str, suffix: str) -> str:
    """Resolve a bare view name (``"home"``) to a file (``"home.html"``)."""
    if PurePosixPath(name).suffix:
        return name
    return f"{name}{suffix}"


def render_template(env: Environment, tpl: Template, *, suffix: str = ".html") -> str:
    """Render a full template to string."""
    template = env.get_template(template_filename(tpl.name, suffix))
    return template.render(**tpl.context)
