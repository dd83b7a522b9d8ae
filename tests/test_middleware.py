"""Tests for the request pipeline: security headers, CORS, body parsing, sessions."""

import json

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from blog.middleware.body_parser import BodyParserMiddleware, parse_body
from blog.middleware.security import DEFAULT_HEADERS, SecurityHeadersMiddleware
from blog.middleware.session import COOKIE_NAME, KEY_PREFIX, SessionMiddleware
from blog.middleware.session_store import MemorySessionStore


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


def _sid(response) -> str:
    cookie = response.headers["set-cookie"].split(";")[0]
    name, _, value = cookie.partition("=")
    assert name == COOKIE_NAME
    return value


# ----------------------
# security headers
# ----------------------
async def plain(request: Request):
    return PlainTextResponse("ok", headers={"X-Powered-By": "starlette"})


async def framed(request: Request):
    return PlainTextResponse("ok", headers={"X-Frame-Options": "DENY"})


security_app = Starlette(
    routes=[Route("/", plain), Route("/framed", framed)],
    middleware=[Middleware(SecurityHeadersMiddleware)],
)


@pytest.mark.asyncio
async def test_security_headers_are_added() -> None:
    async with _client(security_app) as client:
        response = await client.get("/")

    for name, value in DEFAULT_HEADERS.items():
        assert response.headers[name] == value
    assert "x-powered-by" not in response.headers


@pytest.mark.asyncio
async def test_handler_headers_win() -> None:
    async with _client(security_app) as client:
        response = await client.get("/framed")

    assert response.headers["x-frame-options"] == "DENY"


@pytest.mark.asyncio
async def test_cors_preflight_on_api(client: AsyncClient) -> None:
    response = await client.options(
        "/api/tags/",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://example.com")
    assert response.headers["x-content-type-options"] == "nosniff"


# ----------------------
# body parsing
# ----------------------
async def echo(request: Request):
    raw = await request.body()
    return JSONResponse({"body": request.state.body, "raw": raw.decode()})


body_app = Starlette(
    routes=[Route("/", echo, methods=["GET", "POST"])],
    middleware=[Middleware(BodyParserMiddleware, limit=64)],
)


def test_parse_body_by_media_type() -> None:
    assert parse_body(b'{"a": 1}', "application/json; charset=utf-8") == {"a": 1}
    assert parse_body(b"a=1&b=", "application/x-www-form-urlencoded") == {"a": "1", "b": ""}
    assert parse_body(b"hello", "text/plain") == "hello"
    assert parse_body(b"", "application/json") == {}
    assert parse_body(b"\x00\x01", "application/octet-stream") == {}
    with pytest.raises(ValueError):
        parse_body(b"{oops", "application/json")


@pytest.mark.asyncio
async def test_body_is_parsed_and_replayed() -> None:
    async with _client(body_app) as client:
        response = await client.post("/", json={"name": "x"})

    data = response.json()
    assert data["body"] == {"name": "x"}
    assert json.loads(data["raw"]) == {"name": "x"}


@pytest.mark.asyncio
async def test_empty_body_becomes_empty_dict() -> None:
    async with _client(body_app) as client:
        response = await client.get("/")

    assert response.json()["body"] == {}


@pytest.mark.asyncio
async def test_body_over_limit_is_rejected() -> None:
    async with _client(body_app) as client:
        response = await client.post("/", content=b"x" * 100, headers={"Content-Type": "text/plain"})

    assert response.status_code == 413


# ----------------------
# sessions
# ----------------------
async def login(request: Request):
    request.session["user"] = request.query_params.get("user", "anon")
    return PlainTextResponse("ok")


async def whoami(request: Request):
    return JSONResponse({"user": request.session.get("user")})


async def logout(request: Request):
    request.session.clear()
    return PlainTextResponse("bye")


def _session_app(store: MemorySessionStore) -> Starlette:
    return Starlette(
        routes=[Route("/login", login), Route("/me", whoami), Route("/logout", logout)],
        middleware=[Middleware(SessionMiddleware, store=store, max_age=60)],
    )


@pytest.mark.asyncio
async def test_session_round_trip_through_store() -> None:
    store = MemorySessionStore()
    async with _client(_session_app(store)) as client:
        first = await client.get("/login", params={"user": "ann"})
        sid = _sid(first)
        me = await client.get("/me", headers={"Cookie": f"{COOKIE_NAME}={sid}"})

    assert me.json() == {"user": "ann"}
    assert await store.get(KEY_PREFIX + sid) == {"user": "ann"}


@pytest.mark.asyncio
async def test_unmodified_session_sets_no_cookie() -> None:
    store = MemorySessionStore()
    async with _client(_session_app(store)) as client:
        response = await client.get("/me")

    assert response.json() == {"user": None}
    assert "set-cookie" not in response.headers
    assert len(store) == 0


@pytest.mark.asyncio
async def test_cleared_session_is_destroyed() -> None:
    store = MemorySessionStore()
    async with _client(_session_app(store)) as client:
        sid = _sid(await client.get("/login"))
        response = await client.get("/logout", headers={"Cookie": f"{COOKIE_NAME}={sid}"})

    assert "Max-Age=0" in response.headers["set-cookie"]
    assert await store.get(KEY_PREFIX + sid) is None


@pytest.mark.asyncio
async def test_memory_store_expires_entries() -> None:
    store = MemorySessionStore()
    await store.set("k", {"a": 1}, max_age=0)

    assert await store.get("k") is None
