# src/flokkk/main.py
"""ASGI application: middleware, error envelope and the v1 routers."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from flokkk.api.v1 import (
    ai_router,
    comments_router,
    community_posts_router,
    contributions_router,
    engagement_router,
    history_router,
    notifications_router,
    posts_router,
    studio_router,
    users_router,
    votes_router,
)
from flokkk.core.errors import install_exception_handlers
from flokkk.core.settings import settings

API_PREFIX = "/api/v1"
API_TITLE = "flokkk API"

V1_ROUTERS = (
    users_router,
    posts_router,
    comments_router,
    votes_router,
    engagement_router,
    community_posts_router,
    contributions_router,
    notifications_router,
    history_router,
    studio_router,
    ai_router,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=API_TITLE,
    description="Discussions with curated links, threaded comments and an AI assistant",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(GZipMiddleware)

install_exception_handlers(app)

for router in V1_ROUTERS:
    app.include_router(router, prefix=API_PREFIX)


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "%s %s serving %d routers under %s",
        settings.app_name,
        settings.app_version,
        len(V1_ROUTERS),
        API_PREFIX,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "name": API_TITLE,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("flokkk.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
