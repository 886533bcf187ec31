"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, secret_key="s3cr3t")

    When ``secret_key`` is set, the app wires signed cookie sessions and
    principal resolution automatically.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Security
    secret_key: str = ""
    session_cookie: str = "perch_session"
    session_max_age: int = 86400  # 24 hours

    # Templates
    template_dir: str | Path = "templates"
    template_suffix: str = ".html"  # appended to bare names: render("home") -> home.html
    autoescape: bool = True

    # Routing
    case_sensitive_routing: bool = False
    add_slashes: bool = True  # 301 /profile -> /profile/
    slash_base_url: str = ""

    # Logging
    access_log: bool = True
    log_level: str = "info"
