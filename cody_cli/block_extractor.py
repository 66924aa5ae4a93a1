"""
Streaming extractor for fenced file blocks in assistant replies.

The assistant marks files it wants written with a fence of the form

    ```python:src/app.py
    ...body...
    ```

Replies arrive as arbitrary text deltas, so a fence can be split across any
number of deltas. BlockExtractor consumes the deltas one at a time, keeps
only a bounded scan window while looking for an opening fence, and emits a
FileArtifact each time a block closes.
"""
import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

OPEN_FENCE = re.compile(r"```(\w+):([^\n]+)\n")
CLOSE_FENCE = "```"

# Maximum characters kept while scanning for an opening fence
SCAN_WINDOW = 200

# Characters held back from the body so a split closing fence is still seen
HOLD_BACK = len(CLOSE_FENCE) - 1


class ExtractorMode(enum.Enum):
    SCANNING = "scanning"
    CAPTURING = "capturing"


@dataclass(frozen=True)
class FileArtifact:
    """A file the assistant asked to create or replace."""
    filename: str
    content: str
    is_new: bool = True

    def resolve(self, base_dir: Union[str, Path]) -> Path:
        """
        Get the absolute target path.

        Args:
            base_dir: Directory relative paths are joined to

        Returns:
            Absolute path for this artifact. A ~user prefix naming an
            unknown user is kept literally, relative to base_dir.
        """
        path = Path(self.filename)
        try:
            path = path.expanduser()
        except RuntimeError:
            logger.debug("Cannot expand %s, keeping it as written", self.filename)
        if path.is_absolute():
            return path
        return (Path(base_dir) / path).resolve()


class BlockExtractor:
    """
    Incremental parser for ```lang:path fenced blocks.

    In SCANNING mode text goes into a window that never holds more than the
    current partial line (capped at SCAN_WINDOW). An opening fence never spans
    a newline before its own terminator, so discarding everything up to the
    last newline cannot hide one. Only a single line longer than the window
    can lose a fence.

    In CAPTURING mode text goes into the block body, except for the last
    HOLD_BACK characters which stay unflushed until more text shows whether
    they start a closing fence.
    """

    def __init__(
        self,
        on_block_open: Optional[Callable[[str], None]] = None,
        working_dir: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Initialize the extractor.

        Args:
            on_block_open: Called with the filename when a block opens
            working_dir: Directory used for the is_new check. Defaults to cwd.
        """
        self._on_block_open = on_block_open
        self._working_dir = Path(working_dir) if working_dir else None
        self.reset()

    @property
    def mode(self) -> ExtractorMode:
        return self._mode

    @property
    def current_filename(self) -> Optional[str]:
        return self._filename

    @property
    def window(self) -> str:
        """Current scan window contents."""
        return self._window

    def reset(self) -> None:
        """Discard all state, including any partially captured block."""
        self._mode = ExtractorMode.SCANNING
        self._window = ""
        self._filename: Optional[str] = None
        self._body: list[str] = []
        self._tail = ""

    def feed(self, text: str) -> list[FileArtifact]:
        """
        Consume one delta.

        Args:
            text: Next piece of the reply

        Returns:
            Artifacts whose closing fence arrived in this delta
        """
        artifacts: list[FileArtifact] = []
        while text:
            if self._mode is ExtractorMode.SCANNING:
                text = self._scan(text)
            else:
                text = self._capture(text, artifacts)
        return artifacts

    def finish(self) -> list[FileArtifact]:
        """
        Force-flush at end of stream.

        Returns:
            The unterminated block as a best-effort artifact, if it captured anything
        """
        artifacts: list[FileArtifact] = []
        if self._mode is ExtractorMode.CAPTURING:
            content = "".join(self._body) + self._tail
            if content.strip():
                logger.debug("Flushing unterminated block %s", self._filename)
                artifacts.append(self._make_artifact(content))
            else:
                logger.info("Skipping empty unterminated block %s", self._filename)
        self.reset()
        return artifacts

    def _scan(self, text: str) -> str:
        window = self._window + text
        match = OPEN_FENCE.search(window)
        if match is None:
            line_start = window.rfind("\n") + 1
            self._window = window[line_start:][-SCAN_WINDOW:]
            return ""

        self._filename = match.group(2).strip()
        self._window = ""
        self._body = []
        self._tail = ""
        self._mode = ExtractorMode.CAPTURING
        logger.debug("Block opened: %s", self._filename)
        if self._on_block_open is not None:
            self._on_block_open(self._filename)
        return window[match.end():]

    def _capture(self, text: str, artifacts: list[FileArtifact]) -> str:
        tail = self._tail + text
        index = tail.find(CLOSE_FENCE)
        if index == -1:
            split = max(len(tail) - HOLD_BACK, 0)
            if split:
                self._body.append(tail[:split])
            self._tail = tail[split:]
            return ""

        self._body.append(tail[:index])
        artifacts.append(self._make_artifact("".join(self._body)))
        logger.debug("Block closed: %s", self._filename)
        self._mode = ExtractorMode.SCANNING
        self._filename = None
        self._body = []
        self._tail = ""
        return tail[index + len(CLOSE_FENCE):]

    def _make_artifact(self, content: str) -> FileArtifact:
        filename = self._filename or ""
        base_dir = self._working_dir or Path.cwd()
        artifact = FileArtifact(filename=filename, content=content.strip())
        try:
            is_new = not artifact.resolve(base_dir).exists()
        except (OSError, ValueError) as e:
            logger.debug("Cannot check %s: %s", filename, e)
            is_new = True
        return FileArtifact(filename=filename, content=artifact.content, is_new=is_new)
