"""Round-robin rotation over configured LLM API keys."""

import logging
from collections.abc import Iterable

_logger = logging.getLogger(__name__)


class ApiKeyRotator:
    """Hands out API keys in turn so load spreads across the pool."""

    def __init__(self, keys: Iterable[str | None]) -> None:
        self._keys = [key for key in keys if key]
        self._index = 0

    @property
    def size(self) -> int:
        return len(self._keys)

    def next_key(self) -> str:
        """Return the next key, or an empty string when none are configured."""
        if not self._keys:
            _logger.error("No LLM API keys configured")
            return ""
        key = self._keys[self._index]
        self._index = (self._index + 1) % len(self._keys)
        return key
