"""StoreHealth API: FastAPI entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import load_settings
from framework.context import AppContext

from .routers import cleanup, health, scan, settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("storehealth.app")

ENDPOINTS = [
    "/api/health",
    "/api/scan",
    "/api/scan/last",
    "/api/metrics",
    "/api/autoload/top",
    "/api/products/high-variation",
    "/api/cleanup/types",
    "/api/cleanup/counts",
    "/api/cleanup/preview",
    "/api/cleanup/run",
    "/api/settings",
]


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the API. With no context, one is built from STOREHEALTH_* settings
    at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.context is None
        if owned:
            app.state.context = AppContext.from_settings(load_settings())
        logger.info("StoreHealth app starting up")
        yield
        logger.info("StoreHealth app shutting down")
        if owned:
            app.state.context.close()
            app.state.context = None

    app = FastAPI(
        title="StoreHealth",
        description="Store bloat diagnostics: health score, recommendations and cleanup",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(scan.router)
    app.include_router(cleanup.router)
    app.include_router(settings.router)

    @app.get("/")
    async def root():
        return {"status": "ok", "app": "StoreHealth", "endpoints": ENDPOINTS}

    return app


app = create_app()
