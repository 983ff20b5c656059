"""Conversational assistant backed by a streamed language model."""

from .bot import ChatBot, ChatMessage

__all__ = ["ChatBot", "ChatMessage"]
