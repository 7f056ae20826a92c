"""Webhook receiver route.

The route is mounted at the configured callback path, so the router is
built per app by ``build_router``.
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel, ValidationError

from hooksmith.api.deps import get_config, get_listener
from hooksmith.api.security import verify_signature
from hooksmith.config import ListenerConfig
from hooksmith.events.repository import parse_event
from hooksmith.listener import WebhookListener

logger = logging.getLogger(__name__)


class WebhookResponse(BaseModel):
    """Response to a webhook delivery."""

    status: str
    event: str | None = None
    update_started: bool = False


async def receive_webhook(
    request: Request,
    listener: Annotated[WebhookListener, Depends(get_listener)],
    config: Annotated[ListenerConfig, Depends(get_config)],
    x_github_event: Annotated[str | None, Header()] = None,
    x_hub_signature_256: Annotated[str | None, Header()] = None,
    x_hub_signature: Annotated[str | None, Header()] = None,
) -> WebhookResponse:
    """Receive a webhook delivery."""
    body = await request.body()

    if not verify_signature(config.secret, body, x_hub_signature_256, x_hub_signature):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    if not x_github_event:
        raise HTTPException(status_code=400, detail="Missing X-GitHub-Event header")

    if x_github_event == "ping":
        return WebhookResponse(status="pong", event="ping")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}") from e
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")

    event = parse_event(x_github_event, payload)
    if event is None:
        logger.debug(f"Ignoring unsupported event {x_github_event!r}")
        return WebhookResponse(status="ignored", event=x_github_event)

    try:
        task = await listener.dispatch(event)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Malformed {event.kind.value} payload") from e

    return WebhookResponse(status="accepted", event=event.kind.value, update_started=task is not None)


def build_router(path: str) -> APIRouter:
    """Create a router serving the webhook at ``path``."""
    router = APIRouter()
    router.add_api_route(
        path,
        receive_webhook,
        methods=["POST"],
        status_code=202,
        response_model=WebhookResponse,
    )
    return router
