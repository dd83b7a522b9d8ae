# ----------------------
# file   : blog/main.py
# function: API server - middleware pipeline + CRUD routers for every model
# run    : uvicorn blog.main:app --port 3000
# ----------------------

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from blog.api.routes import api_router
from blog.core.config import Settings, settings as default_settings
from blog.db.mongo import close_db, get_db
from blog.middleware.pipeline import middleware
from blog.middleware.session_store import create_session_store
from blog.scripts.seed import seed
from blog.services.tag_manager import ensure_indexes
from blog.utils.logger import logger


# ----------------------
# param   : settings - environment settings
# param   : session_store - store behind the session middleware (defaults to SESSION_STORE)
# return  : FastAPI app
# ----------------------
def create_app(settings: Optional[Settings] = None, session_store=None) -> FastAPI:
    settings = settings or default_settings
    if session_store is None:
        session_store = create_session_store(settings.SESSION_STORE, settings.REDIS_URL)

    # ----------------------
    # startup: indexes, optional seeding / shutdown: close connections
    # ----------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("[INIT] API server starting")
        db = get_db()
        await ensure_indexes(db)
        if settings.SEED_ON_START:
            await seed()
            logger.info("[INIT] seed data inserted")
        yield
        close_db()
        await session_store.close()
        logger.info("[SHUTDOWN] API server stopped")

    app = FastAPI(title="blog-api", lifespan=lifespan, middleware=middleware(settings, session_store))
    app.state.session_store = session_store

    # ----------------------
    # function: API router registration
    # ----------------------
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("blog.main:app", host="0.0.0.0", port=default_settings.API_PORT)
