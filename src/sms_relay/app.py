from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sms_relay.api.middleware.api_key import ApiKeyMiddleware
from sms_relay.api.middleware.correlation_id import CorrelationIdMiddleware
from sms_relay.api.v1.routers import health, sms
from sms_relay.application.exceptions import (
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from sms_relay.config import Settings, settings as default_settings
from sms_relay.infrastructure.db.repositories.message import SqlAlchemyMessageStore
from sms_relay.infrastructure.db.session import build_engine, build_session_factory, create_schema
from sms_relay.infrastructure.delivery.telegram import TelegramDeliverySink
from sms_relay.workers.retry_worker import RetryScheduler

logger = logging.getLogger(__name__)


def _build_lifespan(cfg: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup / shutdown lifecycle."""
        engine = build_engine(
            cfg.DATABASE_URL,
            pool_size=cfg.DB_POOL_SIZE,
            max_overflow=cfg.DB_MAX_OVERFLOW,
            pool_recycle=cfg.DB_POOL_RECYCLE,
        )
        await create_schema(engine)
        app.state.store = SqlAlchemyMessageStore(build_session_factory(engine))
        logger.info("Message store ready")

        app.state.http = httpx.AsyncClient()
        app.state.sink = TelegramDeliverySink(
            app.state.http,
            cfg.TELEGRAM_BOT_TOKEN,
            cfg.TELEGRAM_CHAT_ID,
            base_url=cfg.TELEGRAM_API_BASE_URL,
            timeout=cfg.TELEGRAM_TIMEOUT,
        )

        scheduler: RetryScheduler | None = None
        if cfg.RETRY_WORKER_ENABLED:
            scheduler = RetryScheduler(
                app.state.store,
                app.state.sink,
                cfg.RETRY_INTERVAL_SECONDS,
            )
            await scheduler.start()

        yield

        if scheduler is not None:
            await scheduler.stop()
        await app.state.http.aclose()
        await engine.dispose()
        logger.info("Message store closed")

    return lifespan


def create_app(cfg: Settings | None = None) -> FastAPI:
    cfg = cfg or default_settings
    cfg.require_secrets()

    app = FastAPI(
        title="SMS Relay",
        version="0.1.0",
        lifespan=_build_lifespan(cfg),
    )

    app.add_middleware(ApiKeyMiddleware, api_key=cfg.API_KEY)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(sms.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(PersistenceError)
    async def _persistence(_req: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Persistence failure: %s", exc.detail)
        return JSONResponse(status_code=500, content={"detail": "Failed to store message"})
