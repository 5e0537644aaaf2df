"""Dashboard statistics over logged meals."""

import calendar
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Literal

from dining_assistant.domain.history import MealHistoryEntry

TimeRange = Literal["today", "week", "month", "all"]

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass
class NutritionSummary:
    """Totals and frequencies for a set of meals."""

    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fat: float = 0
    total_saturated_fat: float = 0
    total_sodium: float = 0
    total_sugars: float = 0
    total_fiber: float = 0
    total_cholesterol: float = 0
    meal_count: int = 0
    average_rating: float = 0
    dining_hall_frequency: dict[str, int] = field(default_factory=dict)
    meal_type_frequency: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return _camelize(asdict(self))


@dataclass
class DailyNutrition:
    """Macro totals for one calendar day, labelled by weekday."""

    date: str
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def filter_meals(
    meals: list[MealHistoryEntry], time_range: TimeRange, now: datetime
) -> list[MealHistoryEntry]:
    """Keep meals inside the range; week and month look back from ``now``."""
    if time_range == "today":
        return [m for m in meals if _local(m.date, now).date() == now.date()]
    if time_range == "week":
        start = now - timedelta(days=7)
        return [m for m in meals if m.date >= start]
    if time_range == "month":
        start = _month_before(now)
        return [m for m in meals if m.date >= start]
    return list(meals)


def summarize_meals(
    meals: list[MealHistoryEntry], time_range: TimeRange, now: datetime
) -> NutritionSummary:
    """Aggregate nutrition, ratings and frequencies for meals in range."""
    selected = filter_meals(meals, time_range, now)
    summary = NutritionSummary(meal_count=len(selected))
    halls: Counter[str] = Counter()
    meal_types: Counter[str] = Counter()
    total_rating = 0
    for meal in selected:
        info = meal.nutritional_info
        summary.total_calories += info.calories
        summary.total_protein += info.protein
        summary.total_carbs += info.carbs
        summary.total_fat += info.fat
        summary.total_saturated_fat += info.saturated_fat
        summary.total_sodium += info.sodium
        summary.total_sugars += info.sugars
        summary.total_fiber += info.dietary_fiber
        summary.total_cholesterol += info.cholesterol
        total_rating += meal.rating
        if meal.dining_hall:
            halls[meal.dining_hall] += 1
        if meal.meal_type:
            meal_types[meal.meal_type] += 1
    summary.average_rating = total_rating / len(selected) if selected else 0
    summary.dining_hall_frequency = dict(halls)
    summary.meal_type_frequency = dict(meal_types)
    return summary


def daily_totals(meals: list[MealHistoryEntry], now: datetime) -> list[DailyNutrition]:
    """Sum macros per calendar day over the seven days ending today, ordered Sun..Sat.

    Days are taken in ``now``'s timezone; older meals are left out so every
    weekday label appears at most once.
    """
    today = now.date()
    first_day = today - timedelta(days=6)
    by_day: dict[object, DailyNutrition] = {}
    for meal in meals:
        day = _local(meal.date, now).date()
        if not first_day <= day <= today:
            continue
        totals = by_day.get(day)
        if totals is None:
            # date.weekday() is Monday=0; labels start at Sunday
            totals = DailyNutrition(date=WEEKDAY_LABELS[(day.weekday() + 1) % 7])
            by_day[day] = totals
        info = meal.nutritional_info
        totals.calories += info.calories
        totals.protein += info.protein
        totals.carbs += info.carbs
        totals.fat += info.fat
    return sorted(by_day.values(), key=lambda totals: WEEKDAY_LABELS.index(totals.date))


def _local(moment: datetime, now: datetime) -> datetime:
    return moment.astimezone(now.tzinfo) if now.tzinfo else moment


def _month_before(now: datetime) -> datetime:
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def _camelize(values: dict[str, object]) -> dict[str, object]:
    camel = {}
    for key, value in values.items():
        head, *rest = key.split("_")
        camel[head + "".join(part.capitalize() for part in rest)] = value
    return camel
