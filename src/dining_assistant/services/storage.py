"""Key-value storage abstractions for persisted blobs."""

from dataclasses import dataclass, field
from typing import Protocol

CHAT_SESSIONS_KEY = "chatSessions"
MEAL_HISTORY_KEY = "mealHistory"


class KeyValueStore(Protocol):
    """Interface for string blob persistence."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store used when no database is configured."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
