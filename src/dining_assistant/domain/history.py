"""Models for persisted meal history and chat sessions."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NutritionalInfo(_CamelModel):
    """Numeric nutrition totals attached to a logged meal."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    saturated_fat: float = 0
    trans_fat: float = 0
    cholesterol: float = 0
    sodium: float = 0
    dietary_fiber: float = 0
    sugars: float = 0

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_number(cls, value: object) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return 0
        return value


class MealHistoryEntry(_CamelModel):
    """A meal the user logged, manually or from a menu."""

    id: str
    date: datetime
    meal_type: str
    name: str
    description: str = ""
    dining_hall: str = ""
    rating: int = 0
    nutritional_info: NutritionalInfo = Field(default_factory=NutritionalInfo)

    @field_validator("date")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("nutritional_info", mode="before")
    @classmethod
    def _default_info(cls, value: object) -> object:
        return value if isinstance(value, dict | NutritionalInfo) else {}


class ChatMessage(_CamelModel):
    """One message in a chat conversation."""

    id: str
    role: str
    content: str
    timestamp: int | None = None


class ChatSession(_CamelModel):
    """A saved conversation started by loading a menu."""

    id: str
    name: str
    dining_hall: str
    meal_period: str
    date: str
    messages: list[ChatMessage] = Field(default_factory=list)
    last_updated: int = 0


def timestamp_ms(moment: datetime | None = None) -> int:
    """Return a millisecond epoch timestamp."""
    resolved = moment or datetime.now(tz=UTC)
    return int(resolved.timestamp() * 1000)
