"""Domain models for messaging."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class MessageDirection(Enum):
    """Direction of a message."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


@dataclass
class Message:
    """Unified message format across all channels.

    Adapts platform-specific messages to a common structure.
    """

    id: str
    channel: str
    session_key: str
    user_id: str
    content: str
    direction: MessageDirection = MessageDirection.INBOUND
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    reply_to_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_command(self, prefix: str) -> bool:
        """Check if message content starts with the command marker.

        Args:
            prefix: Command marker, e.g. ``"?"``.

        Returns:
            True if the raw content begins with ``prefix``.
        """
        return self.content.startswith(prefix)
