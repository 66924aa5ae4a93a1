"""
Last-session storage for cody_cli.
Remembers the project directory and model used most recently.
"""
import json
import logging
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ..constants import HISTORY_FILE

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    """Where and with which model the user last worked."""
    last_project: str = ""
    last_model: str = ""
    timestamp: float = 0

    def __post_init__(self) -> None:
        if self.timestamp == 0:
            self.timestamp = time.time()


class SessionStore:
    """
    Reads and writes history.json.
    """

    def __init__(self, history_file: Optional[Path] = None) -> None:
        self._history_file = Path(history_file) if history_file else HISTORY_FILE

    @property
    def history_file(self) -> Path:
        return self._history_file

    def load(self) -> Optional[SessionRecord]:
        """
        Load the last session.

        Returns:
            SessionRecord, or None if there is none or it cannot be read
        """
        if not self._history_file.exists():
            return None
        try:
            with open(self._history_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return SessionRecord(
                last_project=str(data.get('last_project', '')),
                last_model=str(data.get('last_model', '')),
                timestamp=float(data.get('timestamp', 0)),
            )
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.debug("Ignoring unreadable history %s: %s", self._history_file, e)
            return None

    def save(self, project: str, model: str) -> SessionRecord:
        """
        Record the current project and model.

        Args:
            project: Current working directory
            model: Current model ID

        Returns:
            The record written
        """
        record = SessionRecord(last_project=project, last_model=model)
        try:
            self._history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._history_file, 'w', encoding='utf-8') as f:
                json.dump(asdict(record), f, indent=2)
        except OSError as e:
            logger.warning("Could not save session: %s", e)
        return record


_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get the global session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
