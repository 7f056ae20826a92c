"""FastAPI dependencies."""

from fastapi import Request

from hooksmith.config import ListenerConfig
from hooksmith.listener import WebhookListener


async def get_listener(request: Request) -> WebhookListener:
    """Get the webhook listener from app state."""
    return request.app.state.listener


async def get_config(request: Request) -> ListenerConfig:
    """Get the listener config from app state."""
    return request.app.state.config
