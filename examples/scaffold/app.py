"""Scaffold — the route table of a small session-auth site.

Four pages behind a login form, one error page, and a fallback that
sends every unknown path to it. Two demo users: bob / pass and
joe / word.

Demonstrates:
- A declarative route table: plain chains, a verb map, the ``"*"`` fallback
- ``AuthGate`` steps: ``require_login``, ``redirect_if_authenticated``,
  ``login``, ``logout``
- ``authenticated_render`` as sugar for ``[gate.require_login, render(...)]``
- An optional captured segment (``/error/(:err_no)?/?``)

Run:
    python app.py
"""

from pathlib import Path

from perch import App, AppConfig, AuthGate, MemoryCredentialStore, User
from perch.security import hash_password
from perch.views import authenticated_render, error_page, redirect_to, render

TEMPLATES_DIR = Path(__file__).parent / "templates"

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

store = MemoryCredentialStore(
    [
        User(id=1, username="bob", password=hash_password("pass"), email="bob@example.com"),
        User(id=2, username="joe", password=hash_password("word"), email="joe@example.com"),
    ]
)
gate = AuthGate(store)

# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

ROUTES = {
    "/": authenticated_render(gate, "home"),
    "/profile/": [gate.require_login, render("profile")],
    "/login/": {
        "get": [gate.redirect_if_authenticated, render("login")],
        "post": [gate.login, redirect_to("/")],
    },
    "/logout/": [gate.logout, redirect_to("/login/")],
    "/error/(:err_no)?/?": error_page,
    "*": redirect_to("/error/404/"),
}

config = AppConfig(
    template_dir=TEMPLATES_DIR,
    secret_key=".PLEASE_CHANGE-ME*1a2b3c4d5e6f7g8h9i0j!",
)
app = App(config, routes=ROUTES, gate=gate)


if __name__ == "__main__":
    app.run()
