"""Engines and session factory.

Requests use a synchronous :class:`~sqlalchemy.orm.Session`; the async engine
only serves ``create_all`` at startup. When the configured database cannot be
reached in development the module falls back to a local SQLite file.
"""

from __future__ import annotations

import logging
import os
from time import perf_counter
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./learning_paths_local.db"

# Populated by ``configure_database``.
async_engine: AsyncEngine
sync_engine: Engine
SessionLocal: sessionmaker


def _prepare_async_url(url: str) -> tuple[str, dict[str, Any]]:
    """asyncpg rejects libpq's ``sslmode``; translate it into ``connect_args``."""

    try:
        parsed = make_url(url)
    except ArgumentError:
        return url, {}

    if not parsed.drivername.startswith("postgresql+asyncpg"):
        return url, {}

    query = dict(parsed.query)
    sslmode = query.pop("sslmode", None)
    connect_args: dict[str, Any] = {}
    if isinstance(sslmode, str):
        connect_args["ssl"] = sslmode.lower() != "disable"

    return parsed.set(query=query).render_as_string(hide_password=False), connect_args


def _derive_sync_url(async_url: str) -> tuple[str, dict[str, Any]]:
    try:
        parsed = make_url(async_url)
    except ArgumentError:
        return async_url.replace("+asyncpg", ""), {}

    connect_args: dict[str, Any] = {}
    if parsed.drivername.startswith("postgresql+"):
        parsed = parsed.set(drivername="postgresql")
    elif parsed.drivername == "sqlite+aiosqlite":
        parsed = parsed.set(drivername="sqlite")
        connect_args["check_same_thread"] = False

    return parsed.render_as_string(hide_password=False), connect_args


def _should_enable_sqlite_fallback() -> bool:
    if os.getenv("DISABLE_SQLITE_FALLBACK") == "1":
        return False
    return (settings.ENVIRONMENT or "").lower() in {"development", "local"}


def _install_slow_query_logger(engine: Engine) -> None:
    threshold_ms = max(settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS or 0, 0)
    if threshold_ms == 0 or getattr(engine, "_slow_query_hook", False):
        return
    engine._slow_query_hook = True  # type: ignore[attr-defined]

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        context._query_started_at = perf_counter()

    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = getattr(context, "_query_started_at", None)
        if started is None:
            return
        elapsed_ms = (perf_counter() - started) * 1000.0
        if elapsed_ms < threshold_ms:
            return

        snippet = " ".join(str(statement).split())
        if len(snippet) > 200:
            snippet = snippet[:197] + "..."
        params_preview = repr(parameters)
        if len(params_preview) > 200:
            params_preview = params_preview[:197] + "..."

        logger.warning("Slow SQL (%.1f ms) - %s | params=%s", elapsed_ms, snippet, params_preview)

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)


def _verify_database_connection(engine: Engine) -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def configure_database(database_url: str | None = None, *, allow_fallback: bool = True) -> None:
    """Initialise the engines and the session factory.

    ``database_url`` defaults to ``settings.DATABASE_URL``.
    """

    global async_engine, sync_engine, SessionLocal

    async_url, async_connect_args = _prepare_async_url(str(database_url or settings.DATABASE_URL))
    logger.info("Configuring database: %s", make_url(async_url).render_as_string(hide_password=True))

    candidate_async_engine = create_async_engine(async_url, echo=False, connect_args=async_connect_args)
    sync_url, sync_connect_args = _derive_sync_url(async_url)
    candidate_sync_engine = create_engine(sync_url, pool_pre_ping=True, connect_args=sync_connect_args)

    _install_slow_query_logger(candidate_sync_engine)

    try:
        _verify_database_connection(candidate_sync_engine)
    except (OperationalError, OSError) as exc:
        if allow_fallback and _should_enable_sqlite_fallback():
            logger.warning("Database unreachable (%s). Falling back to SQLite at %s.", exc, SQLITE_FALLBACK_URL)
            candidate_sync_engine.dispose()
            candidate_async_engine.sync_engine.dispose()
            configure_database(SQLITE_FALLBACK_URL, allow_fallback=False)
            return

        logger.error("Database connection failed: %s", exc)
        raise

    async_engine = candidate_async_engine
    sync_engine = candidate_sync_engine
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


configure_database()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
