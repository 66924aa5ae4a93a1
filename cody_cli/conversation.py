"""
Conversation log with append/commit/rollback turns.

The log is what the model has seen: a system message followed by
alternating user and assistant messages. A turn appends the user message
up front and either commits the reply or removes that user message again,
so a failed or cancelled turn never leaves an unanswered prompt behind.
"""
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

StreamFactory = Callable[[list[dict]], AsyncIterator[str]]
SendFunction = Callable[[list[dict]], Awaitable[str]]


@dataclass(eq=False)
class Message:
    """A single chat message."""
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(eq=False)
class Turn:
    """A reply being accumulated for one user message."""
    user_message: Message
    parts: list[str] = field(default_factory=list)
    closed: bool = False

    def append(self, delta: str) -> None:
        self.parts.append(delta)

    @property
    def content(self) -> str:
        return "".join(self.parts)


class ConversationState:
    """
    Sole owner of the message log.

    Other components read the log through `messages` and change it only
    through begin_turn/commit/rollback, clear and update_system_prompt.
    """

    def __init__(self, system_prompt: str) -> None:
        self._base_prompt = system_prompt
        self._messages: list[Message] = [Message("system", system_prompt)]

    @property
    def messages(self) -> list[Message]:
        """Copy of the log."""
        return list(self._messages)

    def wire_messages(self) -> list[dict[str, str]]:
        """The log in request-body shape."""
        return [m.to_dict() for m in self._messages]

    @property
    def system_prompt(self) -> str:
        return self._messages[0].content

    @property
    def message_count(self) -> int:
        """Number of non-system messages."""
        return sum(1 for m in self._messages if m.role != "system")

    @property
    def last_response(self) -> Optional[str]:
        """Content of the most recent assistant message."""
        for message in reversed(self._messages):
            if message.role == "assistant":
                return message.content
        return None

    def clear(self) -> None:
        """Reset to the single system message."""
        self._messages = [self._messages[0]]
        logger.debug("Conversation cleared")

    def update_system_prompt(self, extra: str) -> None:
        """Replace the system message with the base prompt plus `extra`."""
        self._messages[0].content = f"{self._base_prompt}\n\n{extra}"

    def begin_turn(self, user_text: str) -> Turn:
        """Append the user message and start accumulating a reply."""
        message = Message("user", user_text)
        self._messages.append(message)
        return Turn(user_message=message)

    def commit(self, turn: Turn) -> bool:
        """
        Finish a turn that completed normally.

        Returns:
            True if the reply was appended, False if it was empty and the turn was rolled back
        """
        if turn.closed:
            return False
        content = turn.content
        if not content:
            logger.info("Empty reply, rolling back turn")
            self.rollback(turn)
            return False
        self._messages.append(Message("assistant", content))
        turn.closed = True
        return True

    def rollback(self, turn: Turn) -> None:
        """Remove exactly this turn's user message."""
        if turn.closed:
            return
        for index in range(len(self._messages) - 1, 0, -1):
            if self._messages[index] is turn.user_message:
                del self._messages[index]
                break
        turn.closed = True
        logger.debug("Turn rolled back")

    async def stream_turn(self, user_text: str, stream_factory: StreamFactory) -> AsyncIterator[str]:
        """
        Run a streaming turn.

        Args:
            user_text: The user's message
            stream_factory: Called with the wire messages, returns the delta stream

        Yields:
            Each delta as it arrives
        """
        turn = self.begin_turn(user_text)
        completed = False
        stream = stream_factory(self.wire_messages())
        try:
            async for delta in stream:
                turn.append(delta)
                yield delta
            completed = True
        finally:
            # Errors, cancellation and early close by the consumer all roll back
            if completed:
                self.commit(turn)
            else:
                self.rollback(turn)
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    async def send_turn(self, user_text: str, send: SendFunction) -> str:
        """
        Run a non-streaming turn.

        Args:
            user_text: The user's message
            send: Called with the wire messages, returns the full reply

        Returns:
            The reply text
        """
        turn = self.begin_turn(user_text)
        try:
            reply = await send(self.wire_messages())
        except BaseException:
            self.rollback(turn)
            raise
        turn.append(reply or "")
        self.commit(turn)
        return reply or ""
