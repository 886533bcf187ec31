"""Shared fixtures: demo users, a template directory, and a wired app."""

from pathlib import Path

import pytest

from perch.app import App
from perch.auth.gate import AuthGate
from perch.auth.store import MemoryCredentialStore, User
from perch.config import AppConfig
from perch.security.passwords import hash_password
from perch.views import authenticated_render, error_page, redirect_to, render

TEMPLATES = {
    "home.html": "home {% if user %}{{ user.username }}{% end %}",
    "profile.html": "profile {{ user.email }}",
    "login.html": "login form",
    "error.html": "error {{ err_no }}",
    "about.html": "about {{ params.slug }}",
}


@pytest.fixture(scope="session")
def users() -> list[User]:
    return [
        User(id=1, username="bob", password=hash_password("pass"), email="bob@example.com"),
        User(id=2, username="joe", password=hash_password("word"), email="joe@example.com"),
    ]


@pytest.fixture
def store(users: list[User]) -> MemoryCredentialStore:
    return MemoryCredentialStore(users)


@pytest.fixture
def gate(store: MemoryCredentialStore) -> AuthGate:
    return AuthGate(store)


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    for name, source in TEMPLATES.items():
        (tmp_path / name).write_text(source)
    return tmp_path


@pytest.fixture
def routes(gate: AuthGate) -> dict:
    """The scaffold route table, wildcard declared first."""
    return {
        "*": redirect_to("/error/404/"),
        "/": authenticated_render(gate, "home"),
        "/profile/": [gate.require_login, render("profile")],
        "/login/": {
            "get": [gate.redirect_if_authenticated, render("login")],
            "post": [gate.login, redirect_to("/")],
        },
        "/logout/": [gate.logout, redirect_to("/login/")],
        "/error/(:err_no)?/?": error_page,
    }


@pytest.fixture
def app(template_dir: Path, routes: dict, gate: AuthGate) -> App:
    config = AppConfig(template_dir=template_dir, secret_key="test-secret")
    return App(config, routes=routes, gate=gate)
