"""
Model catalog cache.
Keeps the list of model IDs returned by the endpoint so the picker opens without a network round trip.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..constants import MODELS_CACHE_FILE, MODELS_CACHE_TTL_HOURS

logger = logging.getLogger(__name__)


@dataclass
class CachedModels:
    """Model IDs and when they were fetched."""
    models: list[str]
    timestamp: str  # ISO format datetime string


class ModelCache:
    """
    Caches the endpoint's model list for 24 hours.
    """

    CACHE_TTL_HOURS: int = MODELS_CACHE_TTL_HOURS

    def __init__(self, cache_file: Optional[Path] = None):
        """
        Initialize the model cache.

        Args:
            cache_file: Where to store the cache. Defaults to ~/.cody/models.json.
        """
        self._cache_file = Path(cache_file) if cache_file else MODELS_CACHE_FILE

    @property
    def cache_file(self) -> Path:
        return self._cache_file

    def load(self) -> Optional[list[str]]:
        """
        Return cached model IDs if present and fresh.

        Returns:
            List of model IDs, or None when the cache is missing, stale or corrupt.
        """
        if not self._cache_file.exists():
            return None

        try:
            with open(self._cache_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            cached = CachedModels(models=list(data['models']), timestamp=data['timestamp'])
        except (OSError, json.JSONDecodeError, TypeError, KeyError):
            logger.debug("Ignoring unreadable model cache %s", self._cache_file)
            return None

        if not self.is_valid(cached):
            return None
        return cached.models

    def save(self, models: list[str]) -> None:
        """
        Store model IDs with the current timestamp.

        Args:
            models: Model IDs to cache.
        """
        self._cache_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            'models': models,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        try:
            with open(self._cache_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Could not write model cache: %s", e)

    def is_valid(self, cached: CachedModels) -> bool:
        """Check whether the cache is younger than the TTL."""
        try:
            fetched_at = datetime.fromisoformat(cached.timestamp.replace('Z', '+00:00'))
        except (ValueError, AttributeError):
            return False
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        age_hours = (datetime.now(timezone.utc) - fetched_at).total_seconds() / 3600
        return 0 <= age_hours < self.CACHE_TTL_HOURS

    def clear(self) -> None:
        """Delete the cache file."""
        if self._cache_file.exists():
            self._cache_file.unlink()
