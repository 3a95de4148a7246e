"""Client model for UI clients watching the user state."""

from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass
class Client:
    """Represents a connected UI client with its pending state messages."""

    id: str
    data_version: int
    messages: List[Dict[str, Any]] = field(default_factory=list)

    def add_message(self, message: Dict[str, Any]) -> None:
        """Queue a message to be sent to this client."""
        self.messages.append(message)
        self.data_version = max(self.data_version, message.get('version', self.data_version))

    def take_messages(self) -> List[Dict[str, Any]]:
        """Return queued messages and clear the queue."""
        messages = self.messages
        self.messages = []
        return messages

    def __repr__(self) -> str:
        return f"Client(id={self.id!r}, data_version={self.data_version!r})"
