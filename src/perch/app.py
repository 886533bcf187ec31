"""Perch application class.

Mutable during setup (route table, middleware, error handlers).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import threading
from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment

from perch._internal.asgi import Receive, Scope, Send
from perch.auth.gate import AuthGate
from perch.auth.principal import PrincipalResolver
from perch.auth.store import CredentialStore
from perch.config import AppConfig
from perch.errors import ConfigurationError
from perch.middleware.access_log import AccessLogMiddleware
from perch.middleware.auth import PrincipalMiddleware
from perch.middleware.protocol import Middleware
from perch.middleware.sessions import SessionConfig, SessionMiddleware
from perch.middleware.slashes import AddSlashesMiddleware
from perch.routing.router import Router, compile_routes
from perch.server.errors import ErrorHandler
from perch.server.handler import handle_request
from perch.templating.integration import create_environment


class App:
    """The perch application.

    Built from a declarative route table::

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
                "*": redirect_to("/error/404/"),
            },
            gate=gate,
        )

    With a ``secret_key`` configured the standard pipeline is wired on
    freeze: access log, trailing slashes, signed cookie sessions and
    principal resolution against the credential store. Middleware added
    with ``add_middleware()`` runs inside that pipeline, closest to the
    route chains.

    Thread safety:
        The setup phase is single-threaded (module import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app, even when several ASGI workers call
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_middleware",
        "_middleware_list",
        # Compiled state (populated by _freeze)
        "_router",
        "_routes",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_globals",
        "config",
        "store",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        routes: Mapping[str, Any] | None = None,
        store: CredentialStore | None = None,
        gate: AuthGate | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        if store is None and gate is not None:
            store = gate.store
        self.store: CredentialStore | None = store
        self._routes: dict[str, Any] = dict(routes or {})
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()
        self._kida_env: Environment | None = None

    # -- Routes --

    def route(self, pattern: str, target: Any) -> None:
        """Add one entry to the route table.

        Entries keep their insertion order; ``"*"`` is always tried last.
        """
        self._check_not_frozen()
        if pattern in self._routes:
            msg = f"Route table declares {pattern!r} twice."
            raise ConfigurationError(msg)
        self._routes[pattern] = target

    def mount(self, table: Mapping[str, Any]) -> None:
        """Add every entry of *table*, in order."""
        for pattern, target in table.items():
            self.route(pattern, target)

    @property
    def router(self) -> Router:
        """The compiled router. Freezes the app on first access."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Template integration --

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            global_name = name or func.__name__
            self._template_globals[global_name] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Compile the app and serve it with pounce.

        Route table problems surface here as ``ConfigurationError``,
        before the server binds.
        """
        from perch.server.dev import run_dev_server

        self._ensure_frozen()
        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            log_level=self.config.log_level,
            app_path=app_path,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            kida_env=self._kida_env,
            template_suffix=self.config.template_suffix,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        A route table that fails to compile fails startup, so the server
        refuses to come up instead of answering every request with 500.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _default_middleware(self) -> list[Middleware]:
        config = self.config
        pipeline: list[Middleware] = []
        if config.access_log:
            pipeline.append(AccessLogMiddleware())
        if config.add_slashes:
            pipeline.append(AddSlashesMiddleware(config.slash_base_url))
        if config.secret_key:
            pipeline.append(
                SessionMiddleware(
                    SessionConfig(
                        secret_key=config.secret_key,
                        cookie_name=config.session_cookie,
                        max_age=config.session_max_age,
                    )
                )
            )
            if self.store is not None:
                pipeline.append(PrincipalMiddleware(PrincipalResolver(self.store)))
        elif self.store is not None:
            msg = (
                "A credential store needs sessions to hold the principal. "
                "Set AppConfig(secret_key=...)."
            )
            raise ConfigurationError(msg)
        return pipeline

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Compile the route table; raises ConfigurationError on a bad table
        self._router = compile_routes(
            self._routes,
            case_sensitive=self.config.case_sensitive_routing,
        )

        # 2. Standard pipeline outermost, user middleware inside it
        self._middleware = (*self._default_middleware(), *self._middleware_list)

        # 3. Collect template globals from middleware
        # (e.g. PrincipalMiddleware -> current_user)
        for mw in self._middleware:
            mw_globals = getattr(mw, "template_globals", None)
            if mw_globals and isinstance(mw_globals, dict):
                for name, func in mw_globals.items():
                    self._template_globals.setdefault(name, func)

        # 4. Initialize kida environment
        self._kida_env = create_environment(self.config, self._template_globals)

        self._frozen = True

    def check(self) -> None:
        """Compile the route table and pipeline without serving.

        Raises ``ConfigurationError`` when the table is invalid.
        """
        self._ensure_frozen()

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and error handlers before calling app.run()."
            )
            raise RuntimeError(msg)
