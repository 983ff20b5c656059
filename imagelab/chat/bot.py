"""Chat assistant that streams replies from a hosted language model."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from pydantic import BaseModel

from imagelab.config.settings import Settings
from imagelab.exceptions import ChatTimeoutError, ConfigurationError, EmptyReplyError
from imagelab.inference import models
from imagelab.inference.client import ReplicateClient

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "¡Bienvenido! ¿En qué puedo ayudarte hoy?"


class ChatMessage(BaseModel):
    """A single turn of the conversation history."""

    role: str
    content: str


def build_prompt(message: str, history: Sequence[ChatMessage]) -> str:
    """Flatten the history and the new message into one completion prompt."""

    conversation = "\n".join(f"{item.role}: {item.content}" for item in history)
    return f"{conversation}\nusuario: {message}\nasistente:"


class ChatBot:
    """Generates assistant replies, bounded by a response timeout."""

    def __init__(self, client: ReplicateClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def _collect(self, prompt: str) -> str:
        parts: list[str] = []
        async for token in self._client.stream_text(
            models.LLAMA_CHAT.ref,
            models.LLAMA_CHAT.build_input(prompt=prompt),
        ):
            parts.append(token)
        return "".join(parts)

    async def reply(self, message: str, history: Sequence[ChatMessage]) -> str:
        """Return the assistant answer to *message* given the prior *history*."""

        if not self._client.configured:
            raise ConfigurationError("Token de API no configurado")

        logger.info("Generating chat reply (%d history messages)", len(history))
        try:
            reply = await asyncio.wait_for(
                self._collect(build_prompt(message, history)),
                timeout=self._settings.chat_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Chat model did not answer within %.0fs", self._settings.chat_timeout)
            raise ChatTimeoutError("Tiempo de respuesta agotado") from exc

        if not reply.strip():
            raise EmptyReplyError("El bot devolvió una respuesta vacía.")
        return reply
