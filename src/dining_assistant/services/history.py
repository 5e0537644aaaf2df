"""Chat session and meal history persistence over a key-value store."""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import ValidationError

from dining_assistant.domain.halls import display_period
from dining_assistant.domain.history import (
    ChatSession,
    MealHistoryEntry,
    NutritionalInfo,
    timestamp_ms,
)
from dining_assistant.domain.menus import MenuItem
from dining_assistant.domain.nutrition import NutritionFacts, extract_numeric_value
from dining_assistant.services.events import (
    MEAL_ADDED,
    MEAL_DELETED,
    MEAL_UPDATED,
    MealEvents,
)
from dining_assistant.services.storage import (
    CHAT_SESSIONS_KEY,
    MEAL_HISTORY_KEY,
    KeyValueStore,
)

_logger = logging.getLogger(__name__)

# meal type -> (calories, protein, carbs, fat)
BASE_MEAL_VALUES: dict[str, tuple[int, int, int, int]] = {
    "breakfast": (350, 15, 45, 12),
    "lunch": (550, 25, 65, 20),
    "dinner": (650, 35, 70, 25),
    "snack": (200, 8, 25, 8),
}

# keywords -> (calories, protein, carbs, fat) added when any keyword appears
KEYWORD_MODIFIERS: tuple[tuple[tuple[str, ...], tuple[int, int, int, int]], ...] = (
    (("chicken", "beef", "fish", "turkey", "protein"), (50, 10, 0, 0)),
    (("pasta", "rice", "bread", "potato", "carb"), (70, 0, 15, 0)),
    (("cheese", "butter", "oil", "fried", "fat"), (90, 0, 0, 8)),
    (("salad", "vegetable", "vegan", "veggie"), (-100, 0, -10, -5)),
)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def session_name(dining_hall: str, meal_period: str) -> str:
    return f"Chat - {dining_hall} ({display_period(meal_period)})"


def export_filename(session: ChatSession) -> str:
    """Return ``<name with whitespace as _>_<date>.json``."""
    name = re.sub(r"\s+", "_", session.name)
    return f"{name}_{session.date}.json"


def estimate_nutrition(meal_type: str, description: str) -> NutritionalInfo:
    """Estimate macros for a manually logged meal from its type and keywords."""
    base = BASE_MEAL_VALUES.get(meal_type.lower(), BASE_MEAL_VALUES["lunch"])
    lowered = description.lower()
    totals = list(base)
    for keywords, modifier in KEYWORD_MODIFIERS:
        if any(keyword in lowered for keyword in keywords):
            totals = [value + delta for value, delta in zip(totals, modifier, strict=True)]
    calories, protein, carbs, fat = (max(value, 0) for value in totals)
    return NutritionalInfo(calories=calories, protein=protein, carbs=carbs, fat=fat)


def nutrition_from_facts(facts: NutritionFacts | None) -> NutritionalInfo:
    """Convert a scraped label into numeric meal totals."""
    if facts is None:
        return NutritionalInfo()
    return NutritionalInfo(
        calories=extract_numeric_value(facts.calories),
        protein=extract_numeric_value(facts.protein),
        carbs=extract_numeric_value(facts.total_carbs),
        fat=extract_numeric_value(facts.total_fat),
        saturated_fat=extract_numeric_value(facts.saturated_fat),
        trans_fat=extract_numeric_value(facts.trans_fat),
        cholesterol=extract_numeric_value(facts.cholesterol),
        sodium=extract_numeric_value(facts.sodium),
        dietary_fiber=extract_numeric_value(facts.dietary_fiber),
        sugars=extract_numeric_value(facts.sugars),
    )


def _load_list(store: KeyValueStore, key: str) -> list[object]:
    raw = store.get(key)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        _logger.exception("Stored %s is not valid JSON; treating as empty", key)
        return []
    if not isinstance(data, list):
        _logger.error("Stored %s is not a list; treating as empty", key)
        return []
    return data


@dataclass
class ChatSessionStore:
    """Saved chat conversations, stored as one JSON list."""

    store: KeyValueStore
    clock: Clock = _utc_now

    def list_sessions(self) -> list[ChatSession]:
        """Return sessions, most recently updated first."""
        sessions = self._load()
        return sorted(sessions, key=lambda session: session.last_updated, reverse=True)

    def get(self, session_id: str) -> ChatSession | None:
        return next((s for s in self._load() if s.id == session_id), None)

    def autosave(self, session: ChatSession) -> ChatSession:
        """Replace any session with the same id and stamp the update time."""
        saved = session.model_copy(
            update={"last_updated": timestamp_ms(self.clock())}
        )
        sessions = [s for s in self._load() if s.id != session.id]
        sessions.append(saved)
        self._save(sessions)
        return saved

    def delete(self, session_id: str) -> bool:
        sessions = self._load()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            return False
        self._save(remaining)
        return True

    def export(self, session_id: str) -> tuple[str, str] | None:
        """Return ``(filename, json)`` for a session download."""
        session = self.get(session_id)
        if session is None:
            return None
        body = json.dumps(session.model_dump(by_alias=True, mode="json"), indent=2)
        return export_filename(session), body

    def _load(self) -> list[ChatSession]:
        sessions: list[ChatSession] = []
        for raw in _load_list(self.store, CHAT_SESSIONS_KEY):
            try:
                sessions.append(ChatSession.model_validate(raw))
            except ValidationError:
                _logger.warning("Skipping malformed chat session")
        return sessions

    def _save(self, sessions: list[ChatSession]) -> None:
        payload = [s.model_dump(by_alias=True, mode="json") for s in sessions]
        self.store.set(CHAT_SESSIONS_KEY, json.dumps(payload))


@dataclass
class MealHistoryStore:
    """Logged meals, newest first, with change notifications."""

    store: KeyValueStore
    events: MealEvents = field(default_factory=MealEvents)
    clock: Clock = _utc_now

    def list_meals(self) -> list[MealHistoryEntry]:
        return self._load()

    def get(self, entry_id: str) -> MealHistoryEntry | None:
        return next((m for m in self._load() if m.id == entry_id), None)

    def add(self, entry: MealHistoryEntry) -> MealHistoryEntry:
        """Prepend an entry and publish ``meal-added``."""
        meals = self._load()
        meals.insert(0, entry)
        self._save(meals)
        self.events.publish(MEAL_ADDED, entry)
        return entry

    def add_manual(  # noqa: PLR0913
        self,
        *,
        date: datetime,
        meal_type: str,
        name: str,
        description: str = "",
        dining_hall: str = "",
        rating: int = 0,
    ) -> MealHistoryEntry:
        """Log a meal described by the user, with estimated nutrition."""
        entry = MealHistoryEntry(
            id=self.next_id(),
            date=date,
            meal_type=meal_type,
            name=name,
            description=description,
            dining_hall=dining_hall,
            rating=rating,
            nutritional_info=estimate_nutrition(meal_type, description),
        )
        return self.add(entry)

    def add_from_menu(
        self,
        item: MenuItem,
        facts: NutritionFacts | None,
        dining_hall: str,
        meal_period: str,
        date: datetime,
    ) -> MealHistoryEntry:
        """Log a menu item, using its scraped label when available."""
        portion = (item.portion or "1 serving").replace("&nbsp;", " ")
        entry = MealHistoryEntry(
            id=self.next_id(),
            date=date,
            meal_type=meal_period.lower().replace("+", " ", 1),
            name=item.name,
            description=f"From {dining_hall}, portion: {portion}",
            dining_hall=dining_hall,
            nutritional_info=nutrition_from_facts(facts),
        )
        return self.add(entry)

    def update(self, entry: MealHistoryEntry) -> MealHistoryEntry | None:
        """Replace an entry in place; returns None when the id is unknown."""
        meals = self._load()
        for index, existing in enumerate(meals):
            if existing.id == entry.id:
                meals[index] = entry
                self._save(meals)
                self.events.publish(MEAL_UPDATED, entry)
                return entry
        return None

    def delete(self, entry_id: str) -> bool:
        meals = self._load()
        remaining = [m for m in meals if m.id != entry_id]
        if len(remaining) == len(meals):
            return False
        self._save(remaining)
        self.events.publish(MEAL_DELETED, entry_id)
        return True

    def next_id(self) -> str:
        """Millisecond timestamp id, bumped past any id already stored."""
        candidate = timestamp_ms(self.clock())
        existing = {m.id for m in self._load()}
        while str(candidate) in existing:
            candidate += 1
        return str(candidate)

    def _load(self) -> list[MealHistoryEntry]:
        meals: list[MealHistoryEntry] = []
        for raw in _load_list(self.store, MEAL_HISTORY_KEY):
            try:
                meals.append(MealHistoryEntry.model_validate(raw))
            except ValidationError:
                _logger.warning("Skipping malformed meal history entry")
        return meals

    def _save(self, meals: list[MealHistoryEntry]) -> None:
        payload = [m.model_dump(by_alias=True, mode="json") for m in meals]
        self.store.set(MEAL_HISTORY_KEY, json.dumps(payload))
