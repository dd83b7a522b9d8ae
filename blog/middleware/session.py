# ----------------------
# file   : blog/middleware/session.py
# function: server-side sessions - the cookie holds an id, data lives in the store
# ----------------------

import json
import secrets

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from blog.utils.logger import logger

COOKIE_NAME = "blog.sid"
KEY_PREFIX = "blog:sess:"


def _snapshot(data: dict) -> str:
    return json.dumps(data, sort_keys=True, default=str)


class SessionMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        store,
        cookie_name: str = COOKIE_NAME,
        key_prefix: str = KEY_PREFIX,
        max_age: int = 24 * 60 * 60,
        path: str = "/",
        https_only: bool = False,
    ):
        self.app = app
        self.store = store
        self.cookie_name = cookie_name
        self.key_prefix = key_prefix
        self.max_age = max_age
        self.path = path
        self.security_flags = "httponly; samesite=lax"
        if https_only:
            self.security_flags += "; secure"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        sid = connection.cookies.get(self.cookie_name)
        data = {}
        if sid:
            try:
                data = await self.store.get(self.key_prefix + sid) or {}
            except Exception:
                logger.exception(f"[SESSION] load failed for {sid}")
                data = {}

        scope["session"] = data
        initial = _snapshot(data)

        async def send_wrapper(message: Message) -> None:
            nonlocal sid
            if message["type"] == "http.response.start":
                session = scope["session"]
                if _snapshot(session) != initial:
                    headers = MutableHeaders(scope=message)
                    try:
                        if session:
                            sid = sid or secrets.token_urlsafe(24)
                            await self.store.set(self.key_prefix + sid, dict(session), self.max_age)
                            headers.append("Set-Cookie", self._cookie(sid, self.max_age))
                        elif sid:
                            await self.store.destroy(self.key_prefix + sid)
                            headers.append("Set-Cookie", self._cookie("null", 0))
                    except Exception:
                        logger.exception(f"[SESSION] save failed for {sid}")
            await send(message)

        await self.app(scope, receive, send_wrapper)

    def _cookie(self, value: str, max_age: int) -> str:
        expires = "; expires=Thu, 01 Jan 1970 00:00:00 GMT" if max_age == 0 else ""
        return f"{self.cookie_name}={value}; path={self.path}; Max-Age={max_age}{expires}; {self.security_flags}"
