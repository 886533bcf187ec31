"""Perch — a small web scaffold with session auth and declarative routes.

A route table maps URL patterns to chains of steps; an auth gate supplies
the login, logout and redirect steps those chains depend on.

Basic usage::

    from perch import App, AppConfig, AuthGate, MemoryCredentialStore
    from perch.views import authenticated_render, redirect_to, render

    store = MemoryCredentialStore(USERS)
    gate = AuthGate(store)

    app = App(
        AppConfig(secret_key="change-me"),
        routes={
            "/": authenticated_render(gate, "home"),
            "/login/": {
                "get": [gate.redirect_if_authenticated, render("login")],
                "post": [gate.login, redirect_to("/")],
            },
            "/logout/": [gate.logout, redirect_to("/login/")],
            "*": redirect_to("/error/404/"),
        },
        gate=gate,
    )

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "AuthGate",
    "ConfigurationError",
    "HTTPError",
    "MemoryCredentialStore",
    "NotFound",
    "PerchError",
    "Redirect",
    "Request",
    "Response",
    "Template",
    "User",
    "UserNotFound",
    "get_session",
    "get_user",
    "middleware",
    "terminal",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name == "Template":
        from perch.templating.returns import Template

        return Template

    if name in ("AuthGate", "MemoryCredentialStore", "User"):
        import perch.auth as _auth

        return getattr(_auth, name)

    if name in ("ConfigurationError", "HTTPError", "NotFound", "PerchError", "UserNotFound"):
        from perch import errors as _errors

        return getattr(_errors, name)

    if name in ("get_session", "get_user"):
        from perch import middleware as _mw

        return getattr(_mw, name)

    if name in ("middleware", "terminal"):
        from perch.routing import steps as _steps

        return getattr(_steps, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
