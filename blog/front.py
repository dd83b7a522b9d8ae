# ----------------------
# file   : blog/front.py
# function: front server - static mounts + server-side rendering of every GET
# run    : python -m blog.front   (APP_ENV=production reads dist/ once)
# ----------------------

import os
import time
from contextlib import asynccontextmanager
from importlib.metadata import version
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, PlainTextResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from blog.core.config import Settings, settings as default_settings
from blog.ssr.dev_server import DevBundleWatcher
from blog.ssr.holder import RenderContextHolder
from blog.ssr.html_stream import html_stream, parse_template
from blog.ssr.renderer import RenderContext, create_renderer, load_bundle
from blog.utils.logger import logger

SERVER_INFO = f"fastapi/{version('fastapi')} jinja2/{version('jinja2')}"
BUNDLE_FILE = "ssr-bundle.json"
TEMPLATE_FILE = "index.html"
WEEK = 60 * 60 * 24 * 7


class CachedStaticFiles(StaticFiles):
    """StaticFiles with a fixed Cache-Control max-age."""

    def __init__(self, *args, max_age: int = 0, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_age = max_age

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = f"public, max-age={self.max_age}"
        return response


# ----------------------
# param   : holder - render context holder to fill
# param   : dist_dir - directory with the bundle and the shell
# function: production - read the build artifacts once
# ----------------------
def load_production_build(holder: RenderContextHolder, dist_dir: str) -> None:
    bundle = load_bundle(os.path.join(dist_dir, BUNDLE_FILE))
    with open(os.path.join(dist_dir, TEMPLATE_FILE), "r", encoding="utf-8") as f:
        template = parse_template(f.read())
    holder.set(create_renderer(bundle), template)
    logger.info(f"[SSR] production build loaded from {dist_dir}")


# ----------------------
# function: development - new renderer/template pair on every rebuild
# return  : DevBundleWatcher (started by the app lifespan)
# ----------------------
def setup_dev_server(holder: RenderContextHolder, settings: Settings) -> DevBundleWatcher:
    async def on_update(bundle: dict, template: str) -> None:
        await holder.swap(create_renderer(bundle), parse_template(template))

    return DevBundleWatcher(
        os.path.join(settings.DIST_DIR, BUNDLE_FILE),
        os.path.join(settings.DIST_DIR, TEMPLATE_FILE),
        on_update,
        interval=settings.WATCH_INTERVAL,
    )


def create_app(settings: Optional[Settings] = None, holder: Optional[RenderContextHolder] = None) -> FastAPI:
    settings = settings or default_settings
    holder = holder or RenderContextHolder()
    watcher = None

    if settings.is_prod:
        load_production_build(holder, settings.DIST_DIR)
    else:
        watcher = setup_dev_server(holder, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if watcher is not None:
            watcher.start()
        yield
        if watcher is not None:
            await watcher.stop()

    app = FastAPI(title="blog-front", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.holder = holder
    app.state.watcher = watcher
    app.add_middleware(GZipMiddleware, minimum_size=0)

    # ----------------------
    # static mounts (one week cache in production)
    # ----------------------
    cache_age = WEEK if settings.is_prod else 0
    app.mount("/dist", CachedStaticFiles(directory=settings.DIST_DIR, check_dir=False, max_age=cache_age), name="dist")
    app.mount("/public", CachedStaticFiles(directory=settings.PUBLIC_DIR, check_dir=False, max_age=cache_age), name="public")

    @app.get("/service-worker.js")
    async def service_worker():
        path = os.path.join(settings.DIST_DIR, "service-worker.js")
        if not os.path.isfile(path):
            return PlainTextResponse("404 | Page Not Found", status_code=404)
        return FileResponse(path, media_type="application/javascript", headers={"Cache-Control": "public, max-age=0"})

    @app.get("/favicon.ico")
    async def favicon():
        path = os.path.join(settings.PUBLIC_DIR, "header.jpg")
        if not os.path.isfile(path):
            return PlainTextResponse("404 | Page Not Found", status_code=404)
        return FileResponse(path, headers={"Cache-Control": f"public, max-age={cache_age}"})

    # ----------------------
    # function: render any other GET into the shell
    # return  : streamed text/html
    # ----------------------
    @app.get("/{full_path:path}")
    async def render(request: Request):
        current = holder.current
        if current is None:
            return PlainTextResponse("waiting for compilation... refresh in a moment.")

        started = time.perf_counter()
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        context = RenderContext(url=url)
        chunks = current.renderer.render_to_stream(context)

        # the first chunk decides the status code
        try:
            first = await chunks.__anext__()
        except StopAsyncIteration:
            first = None
        except Exception as e:
            if getattr(e, "code", None) == 404:
                return PlainTextResponse("404 | Page Not Found", status_code=404)
            logger.error(f"[SSR] error during render : {url}")
            logger.exception(e)
            return PlainTextResponse("500 | Internal Server Error", status_code=500)

        async def markup() -> AsyncIterator[str]:
            if first is None:
                return
            yield first
            async for chunk in chunks:
                yield chunk

        async def body() -> AsyncIterator[str]:
            try:
                async for part in html_stream(current.template, context, markup()):
                    yield part
            except Exception:
                logger.exception(f"[SSR] stream aborted : {url}")
            finally:
                logger.info(f"[SSR] whole request: {(time.perf_counter() - started) * 1000:.0f}ms")

        return StreamingResponse(body(), media_type="text/html", headers={"Server": SERVER_INFO})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"server started at localhost:{default_settings.PORT}")
    uvicorn.run("blog.front:app", host="0.0.0.0", port=default_settings.PORT, server_header=False)
