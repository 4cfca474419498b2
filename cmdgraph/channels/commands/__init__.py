"""Template-driven command routing."""

from cmdgraph.channels.commands.base import (
    CommandArgs,
    CommandBinding,
    CommandContext,
    DispatchOutcome,
    HelpEntry,
)
from cmdgraph.channels.commands.guards import allow_all, allowed_users, deny_all
from cmdgraph.channels.commands.router import CommandRouter

__all__ = [
    "CommandArgs",
    "CommandBinding",
    "CommandContext",
    "CommandRouter",
    "DispatchOutcome",
    "HelpEntry",
    "allow_all",
    "allowed_users",
    "deny_all",
]
