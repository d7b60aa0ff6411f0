"""
WebSocket generation gateway.

Clients send JSON tool calls and receive JSON events on the same socket:

    → {"action": "list_templates"}
    ← {"event": "templates", "templates": [...]}

    → {"action": "generate_report", "template_id": "...", "title": "...",
       "prompt": "...", "context": {...}}
    ← {"event": "generation", "result": {"status": "started", ...}}
    ← {"event": "generation", "result": {"status": "completed", "report_id": "...", ...}}

A malformed message gets an ``error`` event and the session stays open.
"""
from __future__ import annotations

import logging
from typing import Annotated, Optional, Union

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import Field, TypeAdapter, ValidationError

from app.dependencies.services import ServiceContainer, get_services
from app.models.schemas import (
    GatewayEvent,
    GatewayGenerateMessage,
    GatewayListTemplatesMessage,
    GenerateReportResponse,
    GenerationStatusSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter()

GatewayMessage = Annotated[
    Union[GatewayGenerateMessage, GatewayListTemplatesMessage],
    Field(discriminator="action"),
]
_message_adapter: TypeAdapter[GatewayMessage] = TypeAdapter(GatewayMessage)


async def _send(websocket: WebSocket, event: GatewayEvent) -> None:
    await websocket.send_text(event.model_dump_json(exclude_none=True))


async def _receive_text(websocket: WebSocket) -> Optional[str]:
    """Next text frame, or None for a binary frame."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    return message.get("text")


@router.websocket("/reports")
async def report_gateway(
    websocket: WebSocket,
    services: ServiceContainer = Depends(get_services),
) -> None:
    """Relay generation and listing calls for one client session."""
    await websocket.accept()
    logger.info("Gateway session opened from %s", websocket.client)

    try:
        while True:
            raw = await _receive_text(websocket)
            if raw is None:
                logger.warning("Gateway: rejected non-text frame")
                await _send(
                    websocket,
                    GatewayEvent(event="error", error="Invalid message: expected a JSON text frame"),
                )
                continue

            try:
                message = _message_adapter.validate_json(raw)
            except ValidationError as exc:
                logger.warning("Gateway: rejected message — %s", exc.errors()[:1])
                await _send(
                    websocket,
                    GatewayEvent(event="error", error=f"Invalid message: {exc.error_count()} error(s)"),
                )
                continue

            if isinstance(message, GatewayListTemplatesMessage):
                await _send(
                    websocket,
                    GatewayEvent(
                        event="templates",
                        request_id=message.request_id,
                        templates=services.report_service.list_template_summaries(),
                    ),
                )
                continue

            await _send(
                websocket,
                GatewayEvent(
                    event="generation",
                    request_id=message.request_id,
                    result=GenerateReportResponse(status=GenerationStatusSchema.STARTED),
                ),
            )
            result = await services.report_service.handle_generate(message)
            await _send(
                websocket,
                GatewayEvent(event="generation", request_id=message.request_id, result=result),
            )

    except WebSocketDisconnect:
        logger.info("Gateway session closed by client %s", websocket.client)
