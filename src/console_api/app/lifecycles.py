"""FastAPI lifespan helpers for the console application."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import Lifespan
from sqlalchemy import text
from sqlalchemy.engine import make_url

from console_api.common.logging import log_context
from console_api.db import get_engine_from_app, get_session_factory_from_app, init_db, shutdown_db
from console_api.features.bootstrap.service import BootstrapService
from console_api.settings import Settings
from console_db.engine import assert_tables_exist, session_scope

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ["users", "teams", "team_roles", "team_members", "menus"]


def create_application_lifespan(
    *,
    settings: Settings,
) -> Lifespan[FastAPI]:
    """Return the FastAPI lifespan handler used by the app factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        logger.info(
            "console_api.startup",
            extra=log_context(
                logging_level=settings.effective_api_log_level,
                menu_visibility_mode=settings.menu_visibility_mode,
                version=settings.app_version,
            ),
        )

        safe_url = make_url(str(settings.database_url)).render_as_string(hide_password=True)
        logger.info("db.init.start", extra={"database_url": safe_url})
        init_db(app, settings)
        logger.info("db.init.complete", extra={"database_url": safe_url})

        engine = get_engine_from_app(app)
        session_factory = get_session_factory_from_app(app)

        def _check_db_connection() -> None:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))

        def _check_schema() -> None:
            assert_tables_exist(engine, REQUIRED_TABLES)

        def _run_bootstrap() -> None:
            with session_scope(session_factory) as session:
                BootstrapService(session=session, settings=settings).run()

        try:
            try:
                await asyncio.to_thread(_check_db_connection)
            except Exception as exc:
                logger.error(
                    "db.connection.failed",
                    extra={"database_url": safe_url},
                    exc_info=True,
                )
                raise RuntimeError(
                    "Database is not reachable. Verify CONSOLE_DATABASE_URL and credentials."
                ) from exc

            await asyncio.to_thread(_check_schema)
            if settings.bootstrap_enabled:
                await asyncio.to_thread(_run_bootstrap)

            yield
        finally:
            shutdown_db(app)
            logger.info("console_api.shutdown")

    return lifespan


__all__ = ["create_application_lifespan"]
