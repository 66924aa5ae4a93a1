"""
Server-sent event parsing for chat-completion streams.

The network delivers arbitrary byte chunks; LineBuffer reassembles them into
complete lines and parse_line turns each line into an SSEEvent.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..exceptions import ProtocolError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class SSEEvent:
    """A single meaningful event from the stream."""
    content: str = ""
    done: bool = False


class LineBuffer:
    """
    Splits incoming text into complete lines.

    An incomplete trailing line is held back until the next feed() call
    or until flush() at end of stream.
    """

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, text: str) -> list[str]:
        """
        Add text and return every line it completes.

        Args:
            text: Decoded chunk from the network

        Returns:
            Complete lines without their terminators
        """
        self._pending += text
        lines = self._pending.split("\n")
        self._pending = lines.pop()
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> str:
        """Return and clear whatever is left after the last newline."""
        leftover, self._pending = self._pending, ""
        return leftover.rstrip("\r")

    @property
    def pending(self) -> str:
        return self._pending


def _error_message(error: Any) -> str:
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return json.dumps(error)


def _raise_for_error(payload: Any) -> None:
    if isinstance(payload, dict) and payload.get("error"):
        raise ProtocolError(_error_message(payload["error"]))


def _delta_content(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not choices or not isinstance(choices, list):
        return ""
    choice = choices[0]
    if not isinstance(choice, dict):
        return ""
    delta = choice.get("delta") or {}
    if not isinstance(delta, dict):
        return ""
    return delta.get("content") or ""


def parse_line(line: str) -> Optional[SSEEvent]:
    """
    Parse one complete SSE line.

    Args:
        line: A line without its terminator

    Returns:
        SSEEvent for content or the end marker, None for anything to skip

    Raises:
        ProtocolError: If the line carries an error envelope
    """
    line = line.strip()
    if not line:
        return None

    if line.startswith(DATA_PREFIX):
        data = line[len(DATA_PREFIX):]
        if data.startswith(" "):
            data = data[1:]
        if data.strip() == DONE_SENTINEL:
            return SSEEvent(done=True)
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed stream line: %r", line[:200])
            return None
        _raise_for_error(payload)
        content = _delta_content(payload)
        return SSEEvent(content=content) if content else None

    # Some servers report errors as a bare JSON body inside the stream
    if line.startswith("{"):
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed stream line: %r", line[:200])
            return None
        _raise_for_error(payload)

    return None
