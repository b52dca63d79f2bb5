# =============================================================================
# app/websocket/manager.py - Editor Connection Manager
# =============================================================================
# Tracks open editor WebSocket connections. Each connection owns exactly one
# InlineCompletionEngine, so debounce timers and "latest request wins"
# bookkeeping are scoped to a single editor, never shared.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   connection_id = await websocket_manager.connect(websocket, engine_factory)
#   engine = websocket_manager.get_engine(connection_id)
#   websocket_manager.disconnect(connection_id)
# =============================================================================

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Dict
from uuid import uuid4

from fastapi import WebSocket

from agents.completion_engine import InlineCompletionEngine
from core.models.completion import CompletionSuggestion

logger = logging.getLogger(__name__)


@dataclass
class EditorConnection:
    websocket: WebSocket
    engine: InlineCompletionEngine


EngineFactory = Callable[[Callable[[CompletionSuggestion], object]], InlineCompletionEngine]


class ConnectionManager:
    """
    Manages editor WebSocket connections keyed by a generated connection id.

    Suggestions surfaced by a connection's engine are pushed back to that
    connection only.
    """

    def __init__(self):
        # connection_id -> EditorConnection
        self.connections: Dict[str, EditorConnection] = {}

    async def connect(self, websocket: WebSocket, engine_factory: EngineFactory) -> str:
        """
        Accept a WebSocket and attach a fresh completion engine to it.

        Args:
            websocket: The editor's WebSocket
            engine_factory: Builds an engine given its on_suggestion callback

        Returns:
            str: The new connection id
        """
        await websocket.accept()
        connection_id = str(uuid4())

        async def push(suggestion: CompletionSuggestion) -> None:
            await self.send(connection_id, {
                "type": "suggestion",
                "requestId": suggestion.request_id,
                "suggestion": suggestion.text,
            })

        self.connections[connection_id] = EditorConnection(
            websocket=websocket,
            engine=engine_factory(push),
        )

        logger.info(
            f"Editor connected: {connection_id}. "
            f"Total connections: {len(self.connections)}"
        )
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """Stop the connection's engine and forget the connection."""
        connection = self.connections.pop(connection_id, None)
        if connection is not None:
            connection.engine.close()

        logger.info(
            f"Editor disconnected: {connection_id}. "
            f"Total connections: {len(self.connections)}"
        )

    def get_engine(self, connection_id: str) -> InlineCompletionEngine | None:
        connection = self.connections.get(connection_id)
        return connection.engine if connection else None

    async def send(self, connection_id: str, message: dict) -> bool:
        """
        Send a JSON message to one connection.

        Returns:
            bool: False if the connection is gone or the send failed
        """
        connection = self.connections.get(connection_id)
        if connection is None:
            logger.debug(f"No connection {connection_id}, dropping {message.get('type')}")
            return False

        try:
            await connection.websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"Failed to send to editor {connection_id}: {e}")
            return False

    def get_connection_count(self) -> int:
        return len(self.connections)


# Global instance
websocket_manager = ConnectionManager()
