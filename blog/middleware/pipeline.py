# ----------------------
# file   : blog/middleware/pipeline.py
# function: the fixed request chain - security headers -> CORS -> body parsing -> session
# ----------------------

from typing import List

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware import Middleware

from blog.core.config import Settings
from blog.middleware.body_parser import BodyParserMiddleware
from blog.middleware.security import SecurityHeadersMiddleware
from blog.middleware.session import SessionMiddleware


# ----------------------
# param   : settings - CORS origins, body limit, session age
# param   : session_store - keyed store backing the sessions
# return  : middleware list, outermost first (pass to FastAPI(middleware=...))
# ----------------------
def middleware(settings: Settings, session_store) -> List[Middleware]:
    return [
        Middleware(SecurityHeadersMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        Middleware(BodyParserMiddleware, limit=settings.BODY_LIMIT),
        Middleware(SessionMiddleware, store=session_store, max_age=settings.SESSION_MAX_AGE),
    ]
