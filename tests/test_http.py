"""Tests for perch.http — headers, cookies, request and response."""

import pytest

from perch.errors import HTTPError
from perch.http.cookies import SetCookie, parse_cookies
from perch.http.headers import Headers
from perch.http.request import Request
from perch.http.response import Redirect, Response


def _scope(**overrides) -> dict:
    scope = {
        "type": "http",
        "method": "get",
        "path": "/login/",
        "query_string": b"next=%2Fprofile%2F&x=1",
        "headers": [
            (b"Content-Type", b"application/x-www-form-urlencoded; charset=utf-8"),
            (b"cookie", b"a=1"),
            (b"cookie", b"b=2"),
        ],
        "client": ("10.0.0.1", 5000),
    }
    scope.update(overrides)
    return scope


def _receive_body(body: bytes):
    chunks = [body[: len(body) // 2], body[len(body) // 2 :]]

    async def receive() -> dict:
        chunk = chunks.pop(0)
        return {"type": "http.request", "body": chunk, "more_body": bool(chunks)}

    return receive


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"X-Token", b"abc"),))
        assert headers["x-token"] == "abc"
        assert "X-TOKEN" in headers

    def test_get_list(self) -> None:
        headers = Headers(((b"cookie", b"a=1"), (b"Cookie", b"b=2")))
        assert headers.get_list("cookie") == ["a=1", "b=2"]
        assert headers["cookie"] == "a=1"
        assert len(headers) == 1


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies('a=1; b="two"; junk') == {"a": "1", "b": "two"}

    def test_parse_empty(self) -> None:
        assert parse_cookies("") == {}

    def test_set_cookie_header(self) -> None:
        value = SetCookie("sid", "xyz", max_age=10, secure=True).to_header_value()
        assert value == "sid=xyz; Max-Age=10; Path=/; Secure; HttpOnly; SameSite=Lax"


class TestRequest:
    def test_from_asgi(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b""))
        assert request.method == "GET"
        assert request.path == "/login/"
        assert request.query == {"next": "/profile/", "x": "1"}
        assert request.cookies == {"a": "1", "b": "2"}
        assert request.client == ("10.0.0.1", 5000)
        assert request.content_type == "application/x-www-form-urlencoded"

    def test_url_keeps_raw_query(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b""))
        assert request.url == "/login/?next=%2Fprofile%2F&x=1"

    def test_with_path_params(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b""))
        updated = request.with_path_params({"id": "3"})
        assert updated.path_params == {"id": "3"}
        assert request.path_params == {}

    async def test_body_is_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b"hello world"))
        assert await request.body() == b"hello world"
        assert await request.body() == b"hello world"

    async def test_form(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b"username=bob&password=p%40ss"))
        assert await request.form() == {"username": "bob", "password": "p@ss"}

    async def test_form_rejects_other_types(self) -> None:
        scope = _scope(headers=[(b"content-type", b"text/plain")])
        request = Request.from_asgi(scope, _receive_body(b"x"))
        with pytest.raises(HTTPError) as exc_info:
            await request.form()
        assert exc_info.value.status == 415

    async def test_json(self) -> None:
        scope = _scope(headers=[(b"content-type", b"application/json")])
        request = Request.from_asgi(scope, _receive_body(b'{"username": "bob"}'))
        assert await request.json() == {"username": "bob"}

    async def test_malformed_json_is_400(self) -> None:
        scope = _scope(headers=[(b"content-type", b"application/json")])
        request = Request.from_asgi(scope, _receive_body(b"{nope"))
        with pytest.raises(HTTPError) as exc_info:
            await request.json()
        assert exc_info.value.status == 400


class TestResponse:
    def test_defaults(self) -> None:
        response = Response("hi")
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert response.body_bytes == b"hi"

    def test_with_header_is_immutable(self) -> None:
        response = Response("hi")
        updated = response.with_header("X-A", "1")
        assert updated.header("x-a") == "1"
        assert response.header("x-a") is None

    def test_redirect(self) -> None:
        response = Redirect("/login/").to_response()
        assert response.status == 302
        assert response.location == "/login/"
        assert response.body == ""

    def test_with_cookie(self) -> None:
        response = Response().with_cookie(SetCookie("a", "b"))
        assert response.cookies == (SetCookie("a", "b"),)
