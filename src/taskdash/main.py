"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (tables, Redis, demo seed).
Middleware, exception handlers, and both routers (JSON API and
browser UI) are all registered here.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import redis.asyncio as aioredis
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from taskdash import __version__
from taskdash.api import api_router
from taskdash.auth.sessions import InMemorySessionStore, RedisSessionStore, SessionStore
from taskdash.config import settings
from taskdash.exception_handlers import register_exception_handlers
from taskdash.web import ui_router

logger = structlog.get_logger()

STATIC_DIR = Path(__file__).resolve().parent / "static"


def configure_logging(json_logs: bool = False, debug: bool = False) -> None:
    """Route structlog output through one processor chain.

    Learn: merge_contextvars pulls in the request_id bound by
    RequestIdMiddleware, so every line logged while handling a request
    can be correlated.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors.append(structlog.processors.dict_tracebacks)
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        cache_logger_on_first_use=True,
    )


def build_session_store() -> SessionStore:
    if settings.session_backend == "redis":
        client = aioredis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        return RedisSessionStore(client, ttl_seconds=settings.session_ttl_seconds)
    return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    from taskdash.db.engine import async_session_factory, engine, init_models

    logger.info(
        "taskdash.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        session_backend=settings.session_backend,
    )

    await init_models(engine)

    if settings.seed_demo:
        from taskdash.services.seed import seed_demo_account

        async with async_session_factory() as db:
            await seed_demo_account(db)

    store = app.state.session_store
    if isinstance(store, RedisSessionStore):
        await store.redis.ping()
        logger.info("taskdash.redis_connected", url=settings.redis_url)

    yield

    logger.info("taskdash.shutdown")

    if isinstance(store, RedisSessionStore):
        await store.redis.aclose()

    await engine.dispose()


def create_app(session_store: Optional[SessionStore] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(json_logs=settings.log_json, debug=settings.debug)

    app = FastAPI(
        title="taskdash",
        description="Per-user task tracker — JSON API and browser UI on one backend",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.session_store = (
        session_store if session_store is not None else build_session_store()
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → Session → handler

    from taskdash.middleware.request_id import RequestIdMiddleware
    from taskdash.middleware.security import SecurityHeadersMiddleware
    from taskdash.middleware.session import SessionMiddleware

    app.add_middleware(
        SessionMiddleware,
        store=app.state.session_store,
        cookie_name=settings.session_cookie_name,
        max_age=settings.session_ttl_seconds,
        secure=settings.session_cookie_secure,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router)
    app.include_router(ui_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


# Default app instance (used by uvicorn: taskdash.main:app)
app = create_app()
