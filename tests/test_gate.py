"""Tests for perch.auth.gate — credential checks and the gate steps."""

from pathlib import Path

import pytest

from perch.app import App
from perch.auth.gate import INVALID_PASSWORD, AuthGate, AuthResult
from perch.config import AppConfig
from perch.middleware.auth import get_user
from perch.security.audit import SecurityEvent, set_security_event_sink
from perch.testing import TestClient, extract_cookie
from perch.views import redirect_to

FORM = {"Content-Type": "application/x-www-form-urlencoded"}


@pytest.fixture
def events():
    collected: list[SecurityEvent] = []
    set_security_event_sink(collected.append)
    yield collected
    set_security_event_sink(None)


def _whoami(request) -> str:
    user = get_user()
    return f"{user.username or 'anonymous'}"


class TestAuthenticate:
    async def test_success(self, gate: AuthGate) -> None:
        result = await gate.authenticate("bob", "pass")
        assert result.ok
        assert result.user is not None
        assert result.user.username == "bob"
        assert result.reason == ""

    async def test_unknown_user(self, gate: AuthGate) -> None:
        result = await gate.authenticate("mallory", "pass")
        assert not result.ok
        assert result.reason == "Unknown user mallory"

    async def test_invalid_password(self, gate: AuthGate) -> None:
        result = await gate.authenticate("bob", "word")
        assert not result.ok
        assert result.reason == INVALID_PASSWORD

    async def test_unknown_user_reported_before_password(self, gate: AuthGate) -> None:
        result = await gate.authenticate("mallory", "")
        assert result.reason.startswith("Unknown user")

    def test_result_constructors(self, users) -> None:
        assert AuthResult.success(users[0]).ok
        assert not AuthResult.failure("nope").ok


class TestGateSteps:
    """The gate's steps inside a real app pipeline."""

    @pytest.fixture
    def gated_app(self, gate: AuthGate, template_dir: Path) -> App:
        from perch.routing.steps import terminal

        whoami = terminal(_whoami)
        routes = {
            "/secret/": [gate.require_login, whoami],
            "/login/": {
                "get": [gate.redirect_if_authenticated, whoami],
                "post": [gate.login, whoami],
            },
            "/logout/": [gate.logout, whoami],
            "*": redirect_to("/error/404/"),
        }
        config = AppConfig(template_dir=template_dir, secret_key="gate-secret")
        return App(config, routes=routes, gate=gate)

    async def _login(self, client: TestClient) -> str:
        response = await client.post("/login/", body=b"username=bob&password=pass", headers=FORM)
        assert response.status == 200
        assert response.text == "bob"
        cookie = extract_cookie(response)
        assert cookie is not None
        return cookie

    async def test_require_login_redirects_anonymous(self, gated_app: App) -> None:
        async with TestClient(gated_app) as client:
            response = await client.get("/secret/")
            assert response.status == 302
            assert response.location == "/login/"
            assert response.text == ""

    async def test_require_login_proceeds_when_authenticated(self, gated_app: App) -> None:
        async with TestClient(gated_app) as client:
            cookie = await self._login(client)
            response = await client.get("/secret/", headers={"Cookie": f"perch_session={cookie}"})
            assert response.status == 200
            assert response.text == "bob"

    async def test_redirect_if_authenticated(self, gated_app: App) -> None:
        async with TestClient(gated_app) as client:
            anonymous = await client.get("/login/")
            assert anonymous.text == "anonymous"

            cookie = await self._login(client)
            response = await client.get("/login/", headers={"Cookie": f"perch_session={cookie}"})
            assert response.status == 302
            assert response.location == "/"

    async def test_failed_login_redirects_and_emits_event(self, gated_app: App, events) -> None:
        async with TestClient(gated_app) as client:
            response = await client.post(
                "/login/", body=b"username=bob&password=nope", headers=FORM
            )
            assert response.status == 302
            assert response.location == "/login/"
        failures = [e for e in events if e.name == "auth.login.failure"]
        assert len(failures) == 1
        assert failures[0].details == {"reason": "Invalid password"}
        assert failures[0].path == "/login/"

    async def test_failed_login_establishes_no_principal(self, gated_app: App) -> None:
        async with TestClient(gated_app) as client:
            response = await client.post(
                "/login/", body=b"username=mallory&password=pass", headers=FORM
            )
            cookie = extract_cookie(response)
            assert cookie is not None
            secret = await client.get("/secret/", headers={"Cookie": f"perch_session={cookie}"})
            assert secret.status == 302

    async def test_successful_login_emits_event(self, gated_app: App, events) -> None:
        async with TestClient(gated_app) as client:
            await self._login(client)
        assert [e.name for e in events] == ["auth.login.success"]
        assert events[0].user_id == 1

    async def test_json_credentials(self, gated_app: App) -> None:
        async with TestClient(gated_app) as client:
            response = await client.post("/login/", json={"username": "joe", "password": "word"})
            assert response.status == 200
            assert response.text == "joe"

    async def test_json_non_object_body_fails_login(self, gated_app: App) -> None:
        async with TestClient(gated_app) as client:
            response = await client.post("/login/", json=["joe", "word"])
            assert response.status == 302
            assert response.location == "/login/"

    @pytest.mark.parametrize(
        ("body", "content_type"),
        [
            (b"username=bob&password=pass", "text/plain"),
            (
                b"--x\r\nContent-Disposition: form-data; name=\"username\"\r\n\r\nbob\r\n--x--",
                "multipart/form-data; boundary=x",
            ),
            (b"{\"username\": ", "application/json"),
            (b"username=\xff&password=pass", "application/x-www-form-urlencoded"),
        ],
        ids=["text", "multipart", "malformed-json", "invalid-utf8"],
    )
    async def test_unreadable_body_fails_login(
        self, gated_app: App, events, body: bytes, content_type: str
    ) -> None:
        async with TestClient(gated_app) as client:
            response = await client.post(
                "/login/", body=body, headers={"Content-Type": content_type}
            )
            assert response.status == 302
            assert response.location == "/login/"
        assert [e.name for e in events] == ["auth.login.failure"]

    async def test_logout_clears_principal(self, gated_app: App, events) -> None:
        async with TestClient(gated_app) as client:
            cookie = await self._login(client)
            response = await client.get("/logout/", headers={"Cookie": f"perch_session={cookie}"})
            assert response.text == "anonymous"
            after = extract_cookie(response)
            secret = await client.get("/secret/", headers={"Cookie": f"perch_session={after}"})
            assert secret.status == 302
        assert "auth.logout.success" in [e.name for e in events]

    async def test_logout_is_idempotent(self, gated_app: App, events) -> None:
        async with TestClient(gated_app) as client:
            first = await client.get("/logout/")
            assert first.status == 200
            assert first.text == "anonymous"
            cookie = extract_cookie(first)
            second = await client.get("/logout/", headers={"Cookie": f"perch_session={cookie}"})
            assert second.status == 200
        assert events == []

    async def test_custom_urls_and_fields(self, store, template_dir: Path) -> None:
        from perch.routing.steps import terminal

        gate = AuthGate(
            store,
            login_url="/signin/",
            home_url="/dashboard/",
            username_field="user",
            password_field="pw",
        )
        whoami = terminal(_whoami)
        routes = {
            "/signin/": {
                "get": [gate.redirect_if_authenticated, whoami],
                "post": [gate.login, whoami],
            },
            "/dashboard/": [gate.require_login, whoami],
            "*": redirect_to("/"),
        }
        app = App(AppConfig(template_dir=template_dir, secret_key="s"), routes=routes, gate=gate)
        async with TestClient(app) as client:
            anonymous = await client.get("/dashboard/")
            assert anonymous.location == "/signin/"

            response = await client.post("/signin/", body=b"user=bob&pw=pass", headers=FORM)
            assert response.text == "bob"
            cookie = extract_cookie(response)
            again = await client.get("/signin/", headers={"Cookie": f"perch_session={cookie}"})
            assert again.location == "/dashboard/"
