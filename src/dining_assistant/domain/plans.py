"""Models for meal plans and meal analysis."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Goal = Literal["lose", "maintain", "gain", "muscle"]


class MealPlanRequest(BaseModel):
    """User preferences for a generated meal plan."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    dietary_restrictions: str = ""
    calorie_limit: str = ""
    avoid_foods: str = ""
    maintenance_calories: str = ""
    goal: Goal = "maintain"
    height: str = ""
    weight: str = ""
    selected_dining_hall: str | None = None
    selected_meal_period: str | None = None

    def goal_label(self) -> str:
        return {
            "lose": "Lose weight",
            "maintain": "Maintain weight",
            "gain": "Gain weight",
            "muscle": "Gain muscle (with exercise)",
        }[self.goal]


class MealAnalysis(BaseModel):
    """Estimated nutrition and advice for a described meal."""

    model_config = ConfigDict(populate_by_name=True)

    calories: float
    protein: float
    carbs: float
    fat: float
    health_score: int = Field(alias="healthScore", ge=1, le=10)
    recommendations: list[str]
