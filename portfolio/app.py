"""
FastAPI application entry point for the portfolio site.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from portfolio.config import Settings, get_settings
from portfolio.db import DbClient
from portfolio.dependencies import build_db_client, build_storage_client
from portfolio.pages import router as pages_router
from portfolio.routes import router
from portfolio.storage import StorageClient

STATIC_DIR = Path(__file__).parent / "static"


def create_app(
    settings: Optional[Settings] = None,
    *,
    db: Optional[DbClient] = None,
    storage: Optional[StorageClient] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Portfolio", version="0.1.0")
    app.state.settings = settings
    app.state.db = db if db is not None else build_db_client(settings)
    app.state.storage = storage if storage is not None else build_storage_client(settings)

    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(pages_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    return app


app = create_app()
