# app/main.py
from __future__ import annotations

import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from app.settings import get_settings
from app.domain.game.handlers_common import GameRules
from app.store.redis_repo import RedisRepo
from app.transport.admin import router as admin_router
from app.transport.collector import router as collector_router
from app.transport.sync_client import SyncClient
from app.transport.ws import router as ws_router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = [o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()]
    if "null" not in allowed_origins:
        allowed_origins.append("null")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        app.state.redis = r
        app.state.repo = RedisRepo(
            r,
            state_ttl_sec=settings.STATE_TTL_SEC,
            results_max=settings.RESULTS_MAX,
        )
        app.state.http = httpx.AsyncClient(timeout=settings.SYNC_TIMEOUT_SEC)
        app.state.sync = SyncClient(
            http=app.state.http,
            collector_url=settings.COLLECTOR_URL,
            repo=app.state.repo,
            location_timeout_sec=settings.LOCATION_TIMEOUT_SEC,
        )
        app.state.rules = GameRules(
            draw_policy=settings.DRAW_POLICY,
            favorites_phase=settings.FAVORITES_PHASE,
            favorites_max=settings.FAVORITES_MAX,
        )
        await r.ping()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.sync.drain()
        await app.state.http.aclose()
        r: Redis = app.state.redis
        await r.close()

    @app.get("/health")
    async def health():
        r: Redis = app.state.redis
        pong = await r.ping()
        return {"ok": True, "redis": str(pong)}

    app.include_router(ws_router)
    app.include_router(collector_router)
    app.include_router(admin_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
