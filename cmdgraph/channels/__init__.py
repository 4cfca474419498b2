"""Channel adapters and command handling."""

from cmdgraph.channels.base import ChannelAdapter

__all__ = ["ChannelAdapter"]
