"""Engine and session factories.

The API routers work with synchronous sessions; the SQLAdmin back-office needs
an async engine. Both are built from the same ``DATABASE_URL``. During local
development an unreachable database is replaced by a SQLite file so the
dashboard still boots.
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

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./lesson_admin_local.db"

# Populated by ``configure_database``.
async_engine: AsyncEngine
sync_engine: Engine
SessionLocal: sessionmaker


def _sync_url_for(async_url: str) -> tuple[str, dict[str, Any]]:
    """Map the async driver URL onto its synchronous counterpart."""

    try:
        parsed = make_url(async_url)
    except ArgumentError:
        return async_url.replace("+asyncpg", ""), {}

    connect_args: dict[str, Any] = {}
    drivername = parsed.drivername
    if drivername.startswith("postgresql+"):
        parsed = parsed.set(drivername="postgresql")
    elif drivername == "sqlite+aiosqlite":
        parsed = parsed.set(drivername="sqlite")
        connect_args["check_same_thread"] = False

    return parsed.render_as_string(hide_password=False), connect_args


def _should_enable_sqlite_fallback() -> bool:
    if os.getenv("DISABLE_SQLITE_FALLBACK") == "1":
        return False
    return (settings.ENVIRONMENT or "").lower() in {"development", "local"}


def _install_slow_query_logger(engine: Engine) -> None:
    """Warn about statements slower than ``SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS``."""

    threshold_ms = max(settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS or 0, 0)
    if threshold_ms == 0:
        return

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        context._lesson_admin_query_start = perf_counter()

    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start = getattr(context, "_lesson_admin_query_start", None)
        if start is None:
            return

        elapsed_ms = (perf_counter() - start) * 1000.0
        if elapsed_ms < threshold_ms:
            return

        snippet = " ".join(str(statement).split())
        if len(snippet) > 200:
            snippet = snippet[:197] + "..."
        logger.warning("Slow SQL (%.1f ms) - %s", elapsed_ms, snippet)

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)


def configure_database(database_url: str | None = None, *, allow_fallback: bool = True) -> None:
    """Build the engines and the session factory for *database_url*."""

    global async_engine, sync_engine, SessionLocal

    async_url = str(database_url or settings.DATABASE_URL)
    logger.info("Configuring database: %s", make_url(async_url).render_as_string(hide_password=True))

    candidate_async = create_async_engine(async_url, echo=False, future=True)
    sync_url, sync_connect_args = _sync_url_for(async_url)
    candidate_sync = create_engine(sync_url, pool_pre_ping=True, connect_args=sync_connect_args)

    _install_slow_query_logger(candidate_sync)

    try:
        with candidate_sync.connect() as connection:
            connection.execute(text("SELECT 1"))
    except (OperationalError, OSError) as exc:
        if allow_fallback and _should_enable_sqlite_fallback():
            logger.warning(
                "Database '%s' unreachable (%s). Falling back to SQLite.",
                make_url(async_url).render_as_string(hide_password=True),
                exc,
            )
            candidate_sync.dispose()
            configure_database(SQLITE_FALLBACK_URL, allow_fallback=False)
            return

        logger.error("Database connection failed: %s", exc)
        raise

    async_engine = candidate_async
    sync_engine = candidate_sync
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


configure_database()
