"""
FastAPI application entry point for the relief backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relief_api.config import get_settings
from relief_api.dependencies import close_clients, open_clients
from relief_api.errors import register_error_handlers
from relief_api.routes import router
from relief_api.schemas import StatusResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    open_clients()
    logger.info("Relief backend started")
    try:
        yield
    finally:
        close_clients()
        logger.info("Relief backend stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = FastAPI(title="Relief Backend (FastAPI)", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/", response_model=StatusResponse)
    def status():
        return StatusResponse(
            message="Server is running smoothly",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    return app


app = create_app()
