"""
Session orchestrator: drives one prompt/reply turn end to end.
"""
import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from .agent import CodingAgent
from .block_extractor import BlockExtractor, FileArtifact

logger = logging.getLogger(__name__)


class TurnState(enum.Enum):
    IDLE = "idle"
    SENDING = "sending"
    COMMITTED = "committed"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class TurnResult:
    """Outcome of a successful turn."""
    reply: str
    artifacts: list[FileArtifact] = field(default_factory=list)
    state: TurnState = TurnState.COMMITTED


class SessionOrchestrator:
    """
    Streams one turn from the agent to the display and the block extractor.

    The conversation commits or rolls back on its own; the orchestrator
    decides what happens to extracted blocks. A clean turn force-flushes
    the extractor, a failed or cancelled one discards it.
    """

    def __init__(
        self,
        agent: CodingAgent,
        display: Callable[[str], None],
        on_block_open: Optional[Callable[[str], None]] = None,
        working_dir: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            agent: Agent that owns the client and conversation
            display: Sink receiving every delta as it arrives
            on_block_open: Called with the filename when a fenced block opens
            working_dir: Directory artifacts are checked against
        """
        self._agent = agent
        self._display = display
        self._on_block_open = on_block_open
        self._working_dir = working_dir
        self._extractor = BlockExtractor(on_block_open, working_dir)
        self._state = TurnState.IDLE
        self._last_state = TurnState.IDLE

    @property
    def agent(self) -> CodingAgent:
        return self._agent

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def last_state(self) -> TurnState:
        """Terminal state of the most recent turn."""
        return self._last_state

    @property
    def working_dir(self) -> Optional[Union[str, Path]]:
        return self._working_dir

    @working_dir.setter
    def working_dir(self, value: Union[str, Path]) -> None:
        self._working_dir = value
        self._extractor = BlockExtractor(self._on_block_open, value)

    async def run_turn(self, prompt: str) -> TurnResult:
        """
        Send a prompt and stream the reply.

        Args:
            prompt: User message

        Returns:
            TurnResult with the reply and any extracted files. Its state is
            EMPTY when the model sent nothing: the conversation rolled the
            turn back and nothing was committed.

        Raises:
            Whatever the transport raised, after the conversation rolled back
        """
        self._extractor.reset()
        self._state = TurnState.SENDING
        logger.debug("Turn started")
        parts: list[str] = []
        artifacts: list[FileArtifact] = []
        stream = self._agent.send_stream(prompt)
        try:
            async for delta in stream:
                parts.append(delta)
                self._display(delta)
                artifacts.extend(self._extractor.feed(delta))
        except BaseException:
            await stream.aclose()
            self._extractor.reset()
            self._finish(TurnState.FAILED)
            logger.info("Turn failed")
            raise

        artifacts.extend(self._extractor.finish())
        reply = "".join(parts)
        state = TurnState.COMMITTED if reply else TurnState.EMPTY
        self._finish(state)
        logger.debug("Turn %s with %d artifact(s)", state.value, len(artifacts))
        return TurnResult(reply=reply, artifacts=artifacts, state=state)

    def _finish(self, state: TurnState) -> None:
        self._last_state = state
        self._state = TurnState.IDLE

    def cancel(self) -> None:
        """Cancel the in-flight turn."""
        self._agent.abort()

    def reset(self) -> None:
        """Clear the conversation and any per-turn state."""
        self._agent.clear_history()
        self._extractor.reset()
        self._state = TurnState.IDLE
        self._last_state = TurnState.IDLE
