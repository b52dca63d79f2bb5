# =============================================================================
# app/websocket/routes.py - Editor WebSocket
# =============================================================================
# Server-side debounced inline completion for an editor.
#
# Connect: ws://host/ws/editor
#
# Client -> server:
#   {"type": "buffer_changed", "text": "SELECT", "cursor": 6}
#   {"type": "trigger"}                       (manual, skips the debounce)
#   {"type": "trigger", "text": "...", "cursor": n}
#   "ping"
#
# Server -> client:
#   {"type": "connected", "connectionId": "..."}
#   {"type": "suggestion", "requestId": 3, "suggestion": " * FROM dummytable;"}
#   {"type": "error", "error": "..."}
# =============================================================================

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.dependencies import LLMDep, SchemaCacheDep
from app.websocket.manager import websocket_manager
from agents.completion_engine import InlineCompletionEngine, make_llm_fetcher

logger = logging.getLogger(__name__)

router = APIRouter()


def _cursor(event: dict) -> int | None:
    cursor = event.get("cursor")
    return cursor if isinstance(cursor, int) and cursor >= 0 else None


@router.websocket("/ws/editor")
async def editor_websocket(
    websocket: WebSocket,
    llm: LLMDep,
    schema_cache: SchemaCacheDep,
):
    """
    One completion engine per connection.

    Superseded responses never reach the client; only the latest request's
    suggestion is pushed.
    """
    fetch = make_llm_fetcher(llm)

    def engine_factory(on_suggestion):
        return InlineCompletionEngine(
            fetch=fetch,
            on_suggestion=on_suggestion,
            schema_provider=lambda: schema_cache.text,
        )

    connection_id = await websocket_manager.connect(websocket, engine_factory)
    engine = websocket_manager.get_engine(connection_id)
    # Manual triggers run as tasks so the receive loop keeps reading keystrokes
    triggers: set[asyncio.Task] = set()

    try:
        await websocket.send_json({"type": "connected", "connectionId": connection_id})

        while True:
            data = await websocket.receive_text()

            if data == "ping":
                await websocket.send_text("pong")
                continue

            try:
                event = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "error": "Invalid JSON message"})
                continue

            event_type = event.get("type") if isinstance(event, dict) else None

            if event_type == "buffer_changed":
                engine.buffer_changed(str(event.get("text", "")), _cursor(event))
            elif event_type == "trigger":
                text = event.get("text")
                task = asyncio.create_task(
                    engine.trigger(None if text is None else str(text), _cursor(event))
                )
                triggers.add(task)
                task.add_done_callback(triggers.discard)
            else:
                logger.debug(f"Editor {connection_id} sent unknown event: {data[:100]}")
                await websocket.send_json({
                    "type": "error",
                    "error": f"Unknown event type: {event_type}",
                })

    except WebSocketDisconnect:
        logger.info(f"Editor {connection_id} disconnected")
    finally:
        for task in triggers:
            task.cancel()
        websocket_manager.disconnect(connection_id)


@router.get("/ws/status")
async def websocket_status():
    """Number of open editor connections."""
    return {"total_connections": websocket_manager.get_connection_count()}
