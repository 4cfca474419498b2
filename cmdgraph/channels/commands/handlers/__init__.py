"""Built-in command handlers."""

from cmdgraph.channels.commands.handlers.help import HelpMenu

__all__ = ["HelpMenu"]
