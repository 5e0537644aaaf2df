"""Nutrition domain models."""

import re
from dataclasses import dataclass, field

_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


@dataclass(frozen=True)
class NutritionFacts:
    """Nutrition label scraped from an item's detail page.

    Amounts are display strings with units embedded, e.g. ``"12g"``.
    """

    item_name: str
    serving_size: str
    calories: str
    total_fat: str
    saturated_fat: str
    trans_fat: str
    cholesterol: str
    sodium: str
    total_carbs: str
    dietary_fiber: str
    sugars: str
    protein: str
    ingredients: str
    allergens: str
    percent_daily_values: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        """Return the JSON representation used by the HTTP API."""
        return {
            "itemName": self.item_name,
            "servingSize": self.serving_size,
            "calories": self.calories,
            "totalFat": self.total_fat,
            "saturatedFat": self.saturated_fat,
            "transFat": self.trans_fat,
            "cholesterol": self.cholesterol,
            "sodium": self.sodium,
            "totalCarbs": self.total_carbs,
            "dietaryFiber": self.dietary_fiber,
            "sugars": self.sugars,
            "protein": self.protein,
            "ingredients": self.ingredients,
            "allergens": self.allergens,
            "percentDailyValues": dict(self.percent_daily_values),
        }


@dataclass(frozen=True)
class MacroProfile:
    """Headline macros shown next to a food item."""

    calories: str
    protein: str
    carbs: str
    fat: str

    @classmethod
    def from_facts(cls, facts: NutritionFacts) -> "MacroProfile":
        """Pick the headline macros out of a full nutrition label."""
        return cls(
            calories=facts.calories or "0",
            protein=facts.protein or "0g",
            carbs=facts.total_carbs or "0g",
            fat=facts.total_fat or "0g",
        )

    def as_parenthetical(self) -> str:
        """Render the macros in the ``(Calories: ..., Fat: ...)`` convention."""
        return (
            f"(Calories: {self.calories}, Protein: {self.protein}, "
            f"Carbs: {self.carbs}, Fat: {self.fat})"
        )


def extract_numeric_value(value: object) -> float:
    """Return the first number in a display string such as ``"150 mg"``, else 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str) or not value:
        return 0.0
    match = _NUMBER_PATTERN.search(value)
    if not match:
        return 0.0
    return float(match.group(0))
