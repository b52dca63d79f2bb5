# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Server-side inline completion for connected editors.
#
# Usage:
#   from app.websocket import websocket_manager
#   websocket_manager.get_connection_count()
# =============================================================================

from app.websocket.manager import ConnectionManager, websocket_manager

__all__ = [
    "ConnectionManager",
    "websocket_manager",
]
