"""FastAPI application for sitedesk."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import dataclasses
import logging
import os
import sys

from sitedesk import SiteDesk
from sitedesk.config import SiteDeskConfig
from .config import settings
from .routers import backup, content, health, records

# App-managed pattern: attach our own handler and don't propagate, so INFO
# logs are visible regardless of uvicorn's logging config
sitedesk_logger = logging.getLogger("sitedesk")
sitedesk_logger.setLevel(logging.INFO)
sitedesk_logger.propagate = False
sitedesk_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
sitedesk_logger.addHandler(console_handler)

if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    sitedesk_logger.handlers.clear()
    sitedesk_logger.propagate = True  # Fall back to server-managed pattern

logger = logging.getLogger(__name__)


def build_config() -> SiteDeskConfig:
    """Environment config with the API settings layered on top."""
    config = SiteDeskConfig.from_env()

    storage_overrides = {
        name: getattr(settings, name)
        for name in ("working_dir", "backup_dir", "partition_backend", "blob_backend")
        if getattr(settings, name)
    }
    if settings.redis_url:
        storage_overrides["redis_url"] = settings.redis_url
        storage_overrides["redis_password"] = settings.redis_password
    if settings.s3_bucket:
        storage_overrides["s3_bucket"] = settings.s3_bucket

    storage_config = dataclasses.replace(config.storage, **storage_overrides)
    return dataclasses.replace(config, storage=storage_config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage SiteDesk lifecycle."""
    logger.info("Initializing SiteDesk...")

    try:
        app.state.sitedesk = SiteDesk(config=build_config())
        logger.info("SiteDesk initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize SiteDesk: {e}")
        raise

    yield

    logger.info("Shutting down SiteDesk...")
    await app.state.sitedesk.close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(content.router, prefix=settings.api_prefix)
    app.include_router(records.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


app = create_app()
