"""Base abstractions for the command system."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cmdgraph.channels.base import ChannelAdapter
    from cmdgraph.model.message import Message


@dataclass
class CommandContext:
    """Runtime context passed to guards and handlers.

    Attributes:
        channel: Channel the message arrived on; replies go back through it.
        bot_user_id: The router's own identity. Messages authored by it are ignored.
        services: External collaborators handlers need (HTTP clients, stores, ...).
    """

    channel: "ChannelAdapter"
    bot_user_id: str | None = None
    services: dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandArgs:
    """Everything a guard or handler gets for one matched message."""

    message: "Message"
    context: CommandContext
    params: dict[str, str] = field(default_factory=dict)

    async def reply(self, content: str, **kwargs: Any) -> "Message":
        """Send ``content`` back to the session the message came from."""
        return await self.context.channel.send_message(self.message.session_key, content, **kwargs)


Guard = Callable[[CommandArgs], bool]
Handler = Callable[[CommandArgs], Awaitable[None]]
UnauthorizedCallback = Callable[[CommandArgs], Awaitable[None]]
ErrorSink = Callable[[Exception], None]


@dataclass(frozen=True)
class CommandBinding:
    """Handler and guard bound to a template's accepting states.

    One binding is shared by every accepting state a template compiles to.
    ``param_names`` lists the parameters the template declares; templates
    of the same shape share capture states, so a match can carry names
    that belong to another template.
    """

    template: str
    handler: Handler
    guard: Guard
    param_names: tuple[str, ...] = ()

    def select(self, params: dict[str, str]) -> dict[str, str]:
        """Keep only the parameters this binding's template declares."""
        return {name: value for name, value in params.items() if name in self.param_names}

    def authorize(self, args: CommandArgs) -> bool:
        return bool(self.guard(args))

    async def call(self, args: CommandArgs) -> None:
        await self.handler(args)


@dataclass(frozen=True)
class HelpEntry:
    """Help listing entry recorded by ``register_help``."""

    description: str
    guard: Guard


class DispatchOutcome(Enum):
    """What ``dispatch`` did with a message."""

    NO_MATCH = "no_match"
    HANDLED = "handled"
    UNAUTHORIZED = "unauthorized"
    FAILED = "failed"
