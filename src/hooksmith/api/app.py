"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hooksmith import __version__
from hooksmith.alerts import log_alert
from hooksmith.api.routes import webhooks
from hooksmith.config import ListenerConfig
from hooksmith.listener import WebhookListener

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    config: ListenerConfig = app.state.config
    logger.info("Listening for webhooks from GitHub")
    logger.debug(f"Listening at {config.path} on {config.port}")
    logger.debug(f"Listening for repo {config.repository}, branch {config.branch}")

    yield

    listener: WebhookListener = app.state.listener
    listener.bus.remove_callback(log_alert)
    logger.info("Stopped listening for webhooks")


def create_app(config: ListenerConfig, listener: WebhookListener) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Hooksmith",
        description="Webhook-driven self-updating agent",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.listener = listener

    app.include_router(webhooks.build_router(config.path), tags=["webhooks"])

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "update_in_progress": listener.update_in_progress,
        }

    return app
