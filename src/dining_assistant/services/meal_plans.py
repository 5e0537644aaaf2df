"""Personalised meal plan generation."""

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo

from dining_assistant.domain.plans import MealPlanRequest
from dining_assistant.services.llm import LlmGateway
from dining_assistant.services.menus import MenuService
from dining_assistant.services.summary import format_menu_summary

_logger = logging.getLogger(__name__)

CAMPUS_TZ = ZoneInfo("America/New_York")
DEFAULT_CALORIES = 2000

# goal -> (calorie multiplier, protein multiplier)
GOAL_ADJUSTMENTS: dict[str, tuple[float, float]] = {
    "lose": (0.8, 1.2),
    "maintain": (1.0, 1.0),
    "gain": (1.2, 1.0),
    "muscle": (1.1, 1.5),
}

_LEADING_INT = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class _SimulatedMeal:
    title: str
    share: float
    names: tuple[str, str, str]
    default_hall: str
    items: tuple[str, ...]


_SIMULATED_MEALS = (
    _SimulatedMeal(
        title="Breakfast",
        share=0.25,
        names=(
            "Tofu Scramble with Vegetables",
            "Vegetable Omelette with Cheese",
            "Scrambled Eggs with Turkey Bacon",
        ),
        default_hall="The Atrium",
        items=(
            "**Eggs** (Calories: 120, Protein: 12g, Carbs: 1g, Fat: 8g)",
            "**Toast** (Calories: 80, Protein: 3g, Carbs: 15g, Fat: 1g)",
            "**Fruit** (Calories: 60, Protein: 1g, Carbs: 15g, Fat: 0g)",
        ),
    ),
    _SimulatedMeal(
        title="Lunch",
        share=0.3,
        names=(
            "Quinoa Bowl with Roasted Vegetables",
            "Mediterranean Salad with Feta",
            "Grilled Chicken Wrap with Sweet Potato Fries",
        ),
        default_hall="Livingston Dining Commons",
        items=(
            "**Grilled Chicken** (Calories: 180, Protein: 30g, Carbs: 0g, Fat: 6g)",
            "**Whole Wheat Wrap** (Calories: 120, Protein: 4g, Carbs: 20g, Fat: 3g)",
            "**Sweet Potato Fries** (Calories: 150, Protein: 2g, Carbs: 30g, Fat: 5g)",
        ),
    ),
    _SimulatedMeal(
        title="Dinner",
        share=0.35,
        names=(
            "Vegetable Stir Fry with Tofu",
            "Eggplant Parmesan with Pasta",
            "Grilled Salmon with Roasted Vegetables",
        ),
        default_hall="Busch Dining Hall",
        items=(
            "**Salmon Fillet** (Calories: 220, Protein: 25g, Carbs: 0g, Fat: 12g)",
            "**Brown Rice** (Calories: 150, Protein: 3g, Carbs: 32g, Fat: 1g)",
            "**Roasted Vegetables** (Calories: 100, Protein: 2g, Carbs: 20g, Fat: 2g)",
        ),
    ),
    _SimulatedMeal(
        title="Snack",
        share=0.1,
        names=(
            "Fresh Fruit with Almond Butter",
            "Greek Yogurt with Honey and Berries",
            "Protein Shake with Banana",
        ),
        default_hall="Neilson Dining Hall",
        items=(
            "**Protein Shake** (Calories: 120, Protein: 20g, Carbs: 5g, Fat: 2g)",
            "**Banana** (Calories: 105, Protein: 1g, Carbs: 27g, Fat: 0g)",
        ),
    ),
)


@dataclass(frozen=True)
class MealPlanResult:
    success: bool
    meal_plan: str
    simulated: bool = False


@dataclass
class MealPlanService:
    """Generates meal plans, falling back to a simulated plan offline."""

    llm: LlmGateway
    menu_service: MenuService
    max_tokens: int = 1000
    clock: Callable[[], datetime] = field(
        default=lambda: datetime.now(tz=CAMPUS_TZ)
    )

    async def generate(self, request: MealPlanRequest) -> MealPlanResult:
        """Generate a meal plan; any failure yields the simulated plan."""
        try:
            menu_summary = await self._menu_summary(request)
            text = await self.llm.complete_prompt(
                meal_plan_prompt(request, menu_summary), max_tokens=self.max_tokens
            )
            if not text:
                raise RuntimeError("Failed to generate meal plan text")
            return MealPlanResult(success=True, meal_plan=text)
        except Exception:
            _logger.exception("Meal plan generation failed; using simulated plan")
            return MealPlanResult(
                success=True, meal_plan=simulated_meal_plan(request), simulated=True
            )

    async def _menu_summary(self, request: MealPlanRequest) -> str:
        if not (request.selected_dining_hall and request.selected_meal_period):
            return ""
        today = self.clock()
        date = f"{today.month}/{today.day}/{today.year}"
        try:
            menu = await self.menu_service.get_menu(
                request.selected_dining_hall, date, request.selected_meal_period
            )
        except Exception:
            _logger.exception("Menu fetch for meal plan failed")
            return ""
        summary = format_menu_summary(menu)
        _logger.info("Menu summary created (%s characters)", len(summary))
        return summary


def meal_plan_prompt(request: MealPlanRequest, menu_summary: str) -> str:
    """Build the meal plan prompt from user preferences and an optional menu."""
    lines = ["Create a personalized meal plan for a Rutgers University student with the following preferences:", ""]
    lines.extend(_preference_lines(request))
    lines.append("")
    if menu_summary:
        lines.extend(
            [
                f"Based on the current menu available at {request.selected_dining_hall}:",
                "",
                menu_summary,
                "Create a meal plan using ONLY items from this menu. For each meal:",
            ]
        )
    else:
        lines.extend(
            [
                "Create a full day meal plan with breakfast, lunch, dinner, and a snack. For each meal:",
                "- Specify which Rutgers dining hall to visit (The Atrium, Livingston Dining Commons, Busch Dining Hall, or Neilson Dining Hall)",
            ]
        )
    lines.extend(
        [
            "- Provide the name of the meal",
            "- Include estimated calories and macronutrients (protein, carbs, fat) for EACH food item",
            "- Include a total nutrition count for each meal",
            "",
            "Format the response as a markdown document with sections for each meal.",
            'For each food item, use the format "**[Food Item]** (Calories: X, Protein: Xg, Carbs: Xg, Fat: Xg)" on its own line.',
        ]
    )
    return "\n".join(lines)


def simulated_meal_plan(request: MealPlanRequest) -> str:
    """Deterministic plan scaled from the user's calorie target and goal."""
    calorie_multiplier, protein_multiplier = GOAL_ADJUSTMENTS.get(
        request.goal, GOAL_ADJUSTMENTS["maintain"]
    )
    base_calories = target_calories(request, calorie_multiplier)
    restrictions = request.dietary_restrictions.lower()
    if "vegan" in restrictions:
        variant = 0
    elif "vegetarian" in restrictions:
        variant = 1
    else:
        variant = 2

    lines = ["# Personalized Meal Plan", "", "Based on your preferences:"]
    lines.extend(_preference_lines(request))
    totals = [0, 0, 0, 0]
    for meal in _SIMULATED_MEALS:
        share = base_calories * meal.share
        macros = (
            _round_half_up(share),
            _round_half_up(share / 16 * protein_multiplier),
            _round_half_up(share / 4 * 0.5),
            _round_half_up(share / 9 * 0.3),
        )
        totals = [total + value for total, value in zip(totals, macros, strict=True)]
        hall = request.selected_dining_hall or meal.default_hall
        lines.extend(["", f"## {meal.title}", f"{meal.names[variant]} ({hall})"])
        lines.extend(f"- {item}" for item in meal.items)
        lines.extend(
            [
                "",
                f"Total: Calories: {macros[0]}, Protein: {macros[1]}g, "
                f"Carbs: {macros[2]}g, Fat: {macros[3]}g",
            ]
        )
    lines.extend(
        [
            "",
            "### Daily Totals",
            f"- Total Calories: {totals[0]}",
            f"- Total Protein: {totals[1]}g",
            f"- Total Carbs: {totals[2]}g",
            f"- Total Fat: {totals[3]}g",
        ]
    )
    return "\n".join(lines)


def target_calories(request: MealPlanRequest, calorie_multiplier: float) -> float:
    """Calorie limit wins; otherwise maintenance calories scaled by goal; else 2000."""
    if request.calorie_limit:
        return _leading_int(request.calorie_limit) or DEFAULT_CALORIES
    if request.maintenance_calories:
        maintenance = _leading_int(request.maintenance_calories) or DEFAULT_CALORIES
        return maintenance * calorie_multiplier
    return DEFAULT_CALORIES


def _preference_lines(request: MealPlanRequest) -> list[str]:
    lines = [
        f"- Dietary restrictions: {request.dietary_restrictions}"
        if request.dietary_restrictions
        else "- No dietary restrictions"
    ]
    if request.calorie_limit:
        lines.append(f"- Calorie limit: {request.calorie_limit} calories per day")
    lines.append(
        f"- Foods to avoid: {request.avoid_foods}"
        if request.avoid_foods
        else "- No specific foods to avoid"
    )
    if request.maintenance_calories:
        lines.append(f"- Maintenance calories: {request.maintenance_calories}")
    lines.append(f"- Goal: {request.goal_label()}")
    if request.height:
        lines.append(f"- Height: {request.height}")
    if request.weight:
        lines.append(f"- Weight: {request.weight}")
    return lines


def _leading_int(value: str) -> int:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
