"""Domain models."""

from cmdgraph.model.message import Message, MessageDirection

__all__ = ["Message", "MessageDirection"]
