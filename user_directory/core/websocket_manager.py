"""WebSocket connection manager pushing user-state changes to UI clients."""

import json
import logging
from typing import Any, Dict

from fastapi import WebSocket

from user_directory.core.exceptions import DirectoryError
from user_directory.core.state import UserState
from user_directory.models.client import Client

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Manages WebSocket connections and forwards state change messages."""

    def __init__(self, state: UserState):
        self.state = state
        self.connections: Dict[str, WebSocket] = {}
        self.clients: Dict[str, Client] = {}
        self._unsubscribe = state.subscribe(self._queue_message)

    def _queue_message(self, message: Dict[str, Any]) -> None:
        for client in self.clients.values():
            client.add_message(message)

    def _snapshot_message(self) -> Dict[str, Any]:
        return {
            "type": "reset",
            "data": self.state.snapshot(),
            "loading": self.state.loading,
            "version": self.state.data_version
        }

    async def connect(self, websocket: WebSocket, client_id: str) -> None:
        """
        Accept a new WebSocket connection and send the current snapshot.

        Args:
            websocket: WebSocket connection
            client_id: Unique identifier for the client
        """
        await websocket.accept()
        self.connections[client_id] = websocket
        self.clients[client_id] = Client(id=client_id, data_version=self.state.data_version)
        await websocket.send_text(json.dumps(self._snapshot_message()))
        logger.info(f"Client {client_id} connected")

    def disconnect(self, client_id: str) -> None:
        """
        Remove a client connection.

        Args:
            client_id: ID of the client to disconnect
        """
        self.connections.pop(client_id, None)
        self.clients.pop(client_id, None)
        logger.info(f"Client {client_id} disconnected")

    async def handle_message(self, client_id: str, message: str) -> None:
        """
        Process an incoming message from a client.

        Args:
            client_id: ID of the sending client
            message: JSON message string

        Raises:
            DirectoryError: If the message cannot be processed
        """
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            raise DirectoryError(f"Invalid JSON message: {str(e)}") from e

        websocket = self.connections[client_id]
        message_type = data.get('type')
        if message_type == 'ping':
            await websocket.send_text(json.dumps({"type": "pong", "version": self.state.data_version}))
        elif message_type == 'sync':
            if data.get('version') != self.state.data_version:
                self.clients[client_id].take_messages()
                await websocket.send_text(json.dumps(self._snapshot_message()))
        else:
            raise DirectoryError(f"Unknown message type: {message_type}")

    async def flush(self) -> None:
        """Send every queued state message to its client."""
        for client_id, websocket in list(self.connections.items()):
            client = self.clients.get(client_id)
            if client is None:
                continue
            pending = client.take_messages()
            for index, message in enumerate(pending):
                try:
                    await websocket.send_text(json.dumps(message))
                except Exception as e:
                    logger.error(f"Failed to send message to {client_id}: {str(e)}")
                    # Unsent messages go back to the front of the queue for the next flush
                    client.messages[:0] = pending[index:]
                    break

    def close(self) -> None:
        self._unsubscribe()
