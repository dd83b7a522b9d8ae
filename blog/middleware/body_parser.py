# ----------------------
# file   : blog/middleware/body_parser.py
# function: parse json / form / text request bodies into request.state.body
# ----------------------

import json
from urllib.parse import parse_qsl

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

DEFAULT_LIMIT = 1024 * 1024  # 1MB


class BodyParserMiddleware:
    """
    Reads the whole body once, stores the parsed value in
    ``scope["state"]["body"]`` and replays the raw bytes downstream.
    """

    def __init__(self, app: ASGIApp, limit: int = DEFAULT_LIMIT):
        self.app = app
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        state = scope.setdefault("state", {})

        # ----------------------
        # read the raw body, refusing anything above the limit
        # ----------------------
        chunks = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.limit:
                response = JSONResponse({"detail": "Request body too large"}, status_code=413)
                await response(scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)
        raw = b"".join(chunks)

        try:
            state["body"] = parse_body(raw, headers.get("content-type", ""))
        except ValueError:
            response = JSONResponse({"detail": "Invalid JSON body"}, status_code=400)
            await response(scope, receive, send)
            return

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": raw, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


# ----------------------
# param   : raw - request body bytes
# param   : content_type - Content-Type header value
# function: decode by media type (json, urlencoded form, text)
# return  : dict / list / str, {} for empty or unknown bodies
# ----------------------
def parse_body(raw: bytes, content_type: str):
    if not raw.strip():
        return {}
    media_type = content_type.split(";")[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        return json.loads(raw.decode("utf-8"))
    if media_type == "application/x-www-form-urlencoded":
        return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
    if media_type.startswith("text/"):
        return raw.decode("utf-8")
    return {}
