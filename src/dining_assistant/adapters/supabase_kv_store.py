"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from dining_assistant.services.storage import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores blobs in the ``kv_store`` table, one row per key."""

    client: Client
    table_name: str = "kv_store"

    def get(self, key: str) -> str | None:
        """Return the value for a key, if stored."""
        response = (
            self.client.table(self.table_name)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table_name).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()
