"""
Writes extracted file artifacts to disk after showing a diff and asking.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from ..block_extractor import FileArtifact

logger = logging.getLogger(__name__)

# Answers to the save prompt
ANSWER_YES = "y"
ANSWER_NO = "n"
ANSWER_ALL = "a"
ANSWER_SKIP_REST = "s"
ANSWERS = [ANSWER_YES, ANSWER_NO, ANSWER_ALL, ANSWER_SKIP_REST]


@dataclass
class WriteSummary:
    """What happened to each artifact in a batch."""
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class FileWriter:
    """
    Materializes FileArtifacts with a per-file [Y/n/a/s] confirmation.

    'a' turns on auto-accept for the rest of the session, 's' skips every
    remaining file in the batch.
    """

    def __init__(
        self,
        renderer=None,
        ask: Optional[Callable[[str], str]] = None,
        auto_accept: bool = False
    ) -> None:
        """
        Initialize the writer.

        Args:
            renderer: RichRenderer used for diffs and status lines
            ask: Returns the user's answer for a prompt; defaults to the renderer's prompt
            auto_accept: Write without asking
        """
        self._renderer = renderer
        self._ask = ask
        self.auto_accept = auto_accept

    def _prompt(self, message: str) -> str:
        if self._ask is not None:
            answer = self._ask(message)
        else:
            answer = self._renderer.prompt_choice(message, ANSWERS, default=ANSWER_YES)
        answer = (answer or ANSWER_YES).strip().lower()[:1]
        return answer if answer in ANSWERS else ANSWER_YES

    def _read_existing(self, path: Path) -> Optional[str]:
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s for diff: %s", path, e)
            return ""

    def process(self, artifacts: Iterable[FileArtifact], base_dir: Union[str, Path]) -> WriteSummary:
        """
        Review and write a batch of artifacts.

        Args:
            artifacts: Files extracted from one reply
            base_dir: Directory relative filenames resolve against

        Returns:
            WriteSummary of written, skipped and failed files
        """
        artifacts = list(artifacts)
        summary = WriteSummary()
        if not artifacts:
            return summary

        if self._renderer is not None:
            self._renderer.print_heading(f"{len(artifacts)} file(s) to save")

        skip_rest = False
        for artifact in artifacts:
            if skip_rest:
                summary.skipped.append(artifact.filename)
                self._info(f"Skipped {artifact.filename}")
                continue

            try:
                target = artifact.resolve(base_dir)
            except (OSError, ValueError) as e:
                self._fail(summary, artifact, str(e))
                continue

            if not self.auto_accept:
                if self._renderer is not None:
                    self._renderer.print_diff(self._read_existing(target), artifact.content, artifact.filename)
                answer = self._prompt("Save this file? [Y/n/a/s]")
                if answer == ANSWER_NO:
                    summary.skipped.append(artifact.filename)
                    self._info(f"Skipped {artifact.filename}")
                    continue
                if answer == ANSWER_SKIP_REST:
                    skip_rest = True
                    summary.skipped.append(artifact.filename)
                    self._info("Skipped remaining")
                    continue
                if answer == ANSWER_ALL:
                    self.auto_accept = True

            try:
                created = not target.exists()
                self.write(artifact, target)
            except (OSError, ValueError) as e:
                self._fail(summary, artifact, str(e))
                continue

            summary.written.append(target)
            if self._renderer is not None:
                self._renderer.print_file_change(artifact.filename, created=created)

        return summary

    def write(self, artifact: FileArtifact, target: Path) -> None:
        """Write one artifact, creating parent directories."""
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(artifact.content, encoding="utf-8")
        logger.debug("Wrote %s (%d chars)", target, len(artifact.content))

    def _fail(self, summary: WriteSummary, artifact: FileArtifact, reason: str) -> None:
        summary.failed[artifact.filename] = reason
        logger.warning("Failed to save %s: %s", artifact.filename, reason)
        if self._renderer is not None:
            self._renderer.print_error(f"Failed to save {artifact.filename}: {reason}")

    def _info(self, message: str) -> None:
        if self._renderer is not None:
            self._renderer.print_info(message)
