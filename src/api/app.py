"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.config import get_config
from src.storage.engine import create_db_engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database engine on startup and dispose it on shutdown."""
    config = get_config()

    app.state.config = config
    app.state.engine = create_db_engine(config.require_database_url())

    yield

    app.state.engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="dobiefetch",
        description="Read-only API over collected PetPlace dog listings",
        version="0.1.0",
        lifespan=lifespan,
    )

    from src.api.routes import public_router, router

    app.include_router(public_router)
    app.include_router(router)

    return app
