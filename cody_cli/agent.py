"""
Coding agent: one chat client plus one conversation.
"""
import logging
from typing import AsyncIterator, Optional

import httpx

from .config import CodyConfig
from .constants import SYSTEM_PROMPT
from .conversation import ConversationState, Message
from .llm import ChatClient

logger = logging.getLogger(__name__)


class CodingAgent:
    """
    Pairs a ChatClient with the conversation it talks about.

    The conversation is seeded with the system prompt that teaches the
    model the ```lang:path file convention.
    """

    def __init__(
        self,
        config: CodyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        system_prompt: str = SYSTEM_PROMPT
    ) -> None:
        self._client = ChatClient(config, transport=transport)
        self._conversation = ConversationState(system_prompt)
        self._last_prompt: Optional[str] = None

    @property
    def client(self) -> ChatClient:
        return self._client

    @property
    def conversation(self) -> ConversationState:
        return self._conversation

    @property
    def config(self) -> CodyConfig:
        return self._client.config

    @config.setter
    def config(self, value: CodyConfig) -> None:
        self._client.config = value

    @property
    def history(self) -> list[Message]:
        return self._conversation.messages

    @property
    def message_count(self) -> int:
        return self._conversation.message_count

    @property
    def last_response(self) -> Optional[str]:
        return self._conversation.last_response

    @property
    def last_prompt(self) -> Optional[str]:
        """Last text passed to send() or send_stream(), successful or not."""
        return self._last_prompt

    async def send(self, text: str) -> str:
        """Send a message and wait for the full reply."""
        self._last_prompt = text
        return await self._conversation.send_turn(text, self._client.chat)

    def send_stream(self, text: str) -> AsyncIterator[str]:
        """Send a message and stream the reply deltas."""
        self._last_prompt = text
        return self._conversation.stream_turn(text, self._client.chat_stream)

    def abort(self) -> None:
        """Cancel the in-flight request."""
        self._client.cancel()

    def clear_history(self) -> None:
        self._conversation.clear()

    def update_system_prompt(self, extra: str) -> None:
        self._conversation.update_system_prompt(extra)
