"""Pydantic models for API request payloads."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dining_assistant.domain.history import ChatMessage


class ApiModel(BaseModel):
    """Request model accepting camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MenuRequest(ApiModel):
    dining_hall: str = Field(min_length=1)
    date: str = Field(min_length=1)
    meal_period: str = Field(min_length=1)


class NutritionRequest(ApiModel):
    nutrition_link: str = Field(min_length=1)


class AnalyzeMealRequest(ApiModel):
    meal_description: str = Field(min_length=1)


class ConversationMessage(ApiModel):
    role: str
    content: str


class ChatRequest(ApiModel):
    """Conversation so far, plus optional menu context."""

    messages: list[ConversationMessage] = Field(min_length=1)
    menu_summary: str | None = None
    menu: dict[str, object] | None = None


class DirectChatRequest(ApiModel):
    message: str = Field(min_length=1)
    menu_summary: str | None = None
    menu: dict[str, object] | None = None


class FormatRequest(ApiModel):
    text: str


class CalculatorRequest(ApiModel):
    age: int
    gender: str = "male"
    height: str
    weight: str
    activity_level: str = "moderate"


class SessionRequest(ApiModel):
    """Chat session snapshot sent by autosave; the name is derived when omitted."""

    name: str | None = None
    dining_hall: str
    meal_period: str
    date: str
    messages: list[ChatMessage] = Field(default_factory=list)


class ManualMealRequest(ApiModel):
    date: datetime | None = None
    meal_type: str = "lunch"
    name: str = Field(min_length=1)
    description: str = ""
    dining_hall: str = ""
    rating: int | None = Field(default=None, ge=0, le=5)


class MenuMealRequest(ApiModel):
    """A menu item to log, with the hall and period it was served at."""

    item: dict[str, object]
    dining_hall: str
    meal_period: str
    date: datetime | None = None
