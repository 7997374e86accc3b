"""Shared fixtures: a fake site served by aiohttp on localhost."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from anime365.http import HttpSession

HITS = web.AppKey("hits", list)

LOGIN_PAGE = "<html><body><h1>Вход по паролю</h1></body></html>"
BAD_LOGIN_PAGE = "<html><body><p>Неверный E-mail или пароль.</p>" + LOGIN_PAGE + "</body></html>"


async def echo(request: web.Request) -> web.Response:
    """Describe the request that reached the server."""
    body = await request.read()
    return web.json_response(
        {
            "method": request.method,
            "path_qs": request.path_qs,
            "query_string": request.query_string,
            "cookie": request.headers.get("Cookie", ""),
            "accept": request.headers.get("Accept", ""),
            "user_agent": request.headers.get("User-Agent", ""),
            "cache_control": request.headers.get("Cache-Control", ""),
            "content_type": request.headers.get("Content-Type", ""),
            "body": body.decode(),
        }
    )


async def hop1(request: web.Request) -> web.Response:
    response = web.Response(status=302, headers={"Location": "/hop2"})
    response.set_cookie("A", "1")
    return response


async def hop2(request: web.Request) -> web.Response:
    response = web.Response(status=302, headers={"Location": "/echo"})
    response.set_cookie("B", "2")
    return response


async def redirect_with_status(request: web.Request) -> web.Response:
    status = int(request.match_info["status"])
    return web.Response(status=status, headers={"Location": "/echo"})


async def relative_redirect(request: web.Request) -> web.Response:
    return web.Response(status=302, headers={"Location": "../echo"})


async def no_location(request: web.Request) -> web.Response:
    return web.Response(status=302, text="moved somewhere")


async def broken_redirect(request: web.Request) -> web.Response:
    response = web.Response(status=302, headers={"Location": "http://[broken/x"})
    response.set_cookie("before", "1")
    return response


async def chain(request: web.Request) -> web.Response:
    remaining = int(request.match_info["remaining"])
    if remaining == 0:
        return web.Response(text="end of chain")
    return web.Response(status=302, headers={"Location": f"/chain/{remaining - 1}"})


async def slow(request: web.Request) -> web.Response:
    step = int(request.match_info["step"])
    await asyncio.sleep(0.4)
    response = web.Response(status=302, headers={"Location": f"/slow/{step + 1}"})
    response.set_cookie(f"slow{step}", "1")
    return response


async def set_cookies(request: web.Request) -> web.Response:
    response = web.Response(text="ok")
    for name, value in request.query.items():
        response.set_cookie(name, value)
    return response


async def status(request: web.Request) -> web.Response:
    return web.Response(status=int(request.match_info["code"]), text="status page")


async def form(request: web.Request) -> web.Response:
    data = await request.post()
    return web.json_response(
        {
            "fields": [[k, v] for k, v in data.items()],
            "cookie": request.headers.get("Cookie", ""),
        }
    )


async def api_series(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "data": [
                {
                    "id": 1,
                    "query": [[k, v] for k, v in request.query.items()],
                    "updatedDateTime": "2024-01-15 14:30:00",
                    "episodes": [{"firstUploadedDateTime": "2000-01-01 00:00:00"}],
                }
            ]
        }
    )


async def api_series_item(request: web.Request) -> web.Response:
    series_id = int(request.match_info["series_id"])
    if series_id == 404:
        return web.json_response({"error": {"code": 404, "message": "Series not found"}})
    if series_id == 403:
        return web.json_response({"error": {"code": 403, "message": "Forbidden"}})
    if series_id == 500:
        return web.json_response({"error": {"code": 500, "message": "Internal failure"}})
    return web.json_response({"data": {"id": series_id, "accept": request.headers.get("Accept")}})


async def api_broken(request: web.Request) -> web.Response:
    return web.Response(text="<html>not json</html>", content_type="text/html")


async def api_unexpected(request: web.Request) -> web.Response:
    return web.json_response({"result": 1})


async def login(request: web.Request) -> web.Response:
    data = await request.post()
    csrf_cookie = request.cookies.get("csrf")
    if not csrf_cookie or data.get("csrf") != csrf_cookie:
        return web.Response(status=400, text="Bad CSRF token")
    if data.get("LoginForm[password]") != "secret":
        return web.Response(text=BAD_LOGIN_PAGE, content_type="text/html")
    response = web.Response(status=302, headers={"Location": "/users/profile"})
    username = str(data.get("LoginForm[username]"))
    response.set_cookie("PHPSESSID", "session-" + username.split("@")[0])
    return response


async def profile(request: web.Request) -> web.Response:
    if "PHPSESSID" not in request.cookies:
        return web.Response(text=LOGIN_PAGE, content_type="text/html")
    return web.Response(
        text="<html><body><content><div class='m-small-title'>Tester</div></content></body></html>",
        content_type="text/html",
    )


def build_site() -> web.Application:
    hits: list = []

    @web.middleware
    async def record_hits(request: web.Request, handler):
        hits.append((request.method, request.path))
        return await handler(request)

    app = web.Application(middlewares=[record_hits])
    app[HITS] = hits
    app.router.add_route("*", "/echo", echo)
    app.router.add_get("/hop1", hop1)
    app.router.add_get("/hop2", hop2)
    app.router.add_route("*", "/redirect/{status}", redirect_with_status)
    app.router.add_get("/dir/relative", relative_redirect)
    app.router.add_get("/no-location", no_location)
    app.router.add_get("/broken-redirect", broken_redirect)
    app.router.add_get("/chain/{remaining}", chain)
    app.router.add_get("/slow/{step}", slow)
    app.router.add_get("/set-cookies", set_cookies)
    app.router.add_get("/status/{code}", status)
    app.router.add_post("/form", form)
    app.router.add_get("/api/series", api_series)
    app.router.add_get("/api/series/{series_id}", api_series_item)
    app.router.add_get("/api/broken", api_broken)
    app.router.add_get("/api/unexpected", api_unexpected)
    app.router.add_post("/users/login", login)
    app.router.add_get("/users/profile", profile)
    return app


@pytest.fixture
def site() -> web.Application:
    """Create the fake site application."""
    return build_site()


@pytest.fixture
def hits(site: web.Application) -> list:
    """Requests received by the fake site, as (method, path) tuples."""
    return site[HITS]


@pytest_asyncio.fixture
async def server(site):
    """Serve the fake site on localhost."""
    async with TestServer(site) as test_server:
        yield test_server


@pytest.fixture
def base_url(server) -> str:
    return str(server.make_url("/"))


@pytest_asyncio.fixture
async def session(base_url):
    """Open an HttpSession against the fake site."""
    async with HttpSession(base_url) as http_session:
        yield http_session
