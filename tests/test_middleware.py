"""Tests for the trailing-slash and access log middleware."""

import logging
from pathlib import Path

from perch.app import App
from perch.config import AppConfig
from perch.http.headers import Headers
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.slashes import AddSlashesMiddleware
from perch.testing import TestClient
from perch.views import render


def _request(path: str, query_string: str = "") -> Request:
    return Request(
        method="GET",
        path=path,
        headers=Headers(),
        query={},
        query_string=query_string,
        cookies={},
    )


async def _ok(request: Request) -> Response:
    return Response("ok")


class TestAddSlashes:
    async def test_appends_slash(self) -> None:
        response = await AddSlashesMiddleware()(_request("/profile"), _ok)
        assert response.status == 301
        assert response.location == "/profile/"

    async def test_keeps_query(self) -> None:
        response = await AddSlashesMiddleware()(_request("/search", "q=perch"), _ok)
        assert response.location == "/search/?q=perch"

    async def test_slashed_path_passes(self) -> None:
        response = await AddSlashesMiddleware()(_request("/profile/"), _ok)
        assert response.text == "ok"

    async def test_root_passes(self) -> None:
        response = await AddSlashesMiddleware()(_request("/"), _ok)
        assert response.text == "ok"

    async def test_base_url(self) -> None:
        middleware = AddSlashesMiddleware("https://example.com/app/")
        response = await middleware(_request("/profile"), _ok)
        assert response.location == "https://example.com/app/profile/"

    async def test_leading_slashes_collapsed(self) -> None:
        response = await AddSlashesMiddleware()(_request("//evil.example"), _ok)
        assert response.status == 301
        assert response.location == "/evil.example/"

    async def test_slashes_only_passes(self) -> None:
        response = await AddSlashesMiddleware()(_request("///"), _ok)
        assert response.text == "ok"

    async def test_disabled_by_config(self, template_dir: Path) -> None:
        app = App(
            AppConfig(template_dir=template_dir, add_slashes=False),
            routes={"*": render("login")},
        )
        async with TestClient(app) as client:
            response = await client.get("/profile")
            assert response.status == 200


class TestAccessLog:
    async def test_logs_one_line_per_request(self, template_dir: Path, caplog) -> None:
        app = App(AppConfig(template_dir=template_dir), routes={"*": render("login")})
        async with TestClient(app) as client:
            with caplog.at_level(logging.INFO, logger="perch.access"):
                await client.get("/login/?next=%2F")
        records = [r for r in caplog.records if r.name == "perch.access"]
        assert len(records) == 1
        message = records[0].getMessage()
        assert message.startswith('127.0.0.1 "GET /login/?next=%2F" 200')

    async def test_disabled_by_config(self, template_dir: Path, caplog) -> None:
        app = App(
            AppConfig(template_dir=template_dir, access_log=False),
            routes={"*": render("login")},
        )
        async with TestClient(app) as client:
            with caplog.at_level(logging.INFO, logger="perch.access"):
                await client.get("/login/")
        assert not [r for r in caplog.records if r.name == "perch.access"]
