"""cmdgraph - template-driven chat command router."""

from cmdgraph.channels.commands import (
    CommandArgs,
    CommandContext,
    CommandRouter,
    DispatchOutcome,
    allow_all,
    allowed_users,
    deny_all,
)
from cmdgraph.routing import CompileError

__version__ = "0.1.0"

__all__ = [
    "CommandArgs",
    "CommandContext",
    "CommandRouter",
    "CompileError",
    "DispatchOutcome",
    "allow_all",
    "allowed_users",
    "deny_all",
]
