"""Base channel adapter interface."""

from abc import ABC, abstractmethod
from typing import Any

from cmdgraph.model.message import Message


class ChannelAdapter(ABC):
    """Outbound side of a chat transport.

    The command router replies through ``send_message`` only. Receiving,
    connecting and reconnecting stay with the transport, which hands each
    inbound Message to ``CommandRouter.execute``.
    """

    name: str = "base"

    @abstractmethod
    async def send_message(self, session_key: str, content: str, **kwargs: Any) -> Message:
        """Send a message to a session.

        Args:
            session_key: The session to send to.
            content: Message content.
            **kwargs: Channel-specific options.

        Returns:
            The sent Message object.
        """
        ...
