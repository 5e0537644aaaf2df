"""BMR, TDEE and macro targets from free-text body measurements."""

import re
from dataclasses import asdict, dataclass

CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54
KG_PER_POUND = 0.453592
MIN_AGE = 15
MAX_AGE = 80

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "veryActive": 1.9,
}

_FEET_INCHES = re.compile(r"(\d+)'(\d+)")
_LEADING_NUMBER = re.compile(r"^\s*([+-]?\d*\.?\d+)")


class CalculatorInputError(ValueError):
    """Raised when calculator inputs are missing or out of range."""


@dataclass(frozen=True)
class MacroRange:
    min: int
    max: int


@dataclass(frozen=True)
class CalculatorResult:
    bmr: int
    tdee: int
    protein: MacroRange
    carbs: MacroRange
    fat: MacroRange
    goal_calories: dict[str, int]

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["goalCalories"] = payload.pop("goal_calories")
        return payload


def parse_height(text: str) -> float:
    """Return height in cm from ``5'10"``, ``5'10``, ``178cm`` or a bare number."""
    match = _FEET_INCHES.search(text)
    if match:
        return int(match.group(1)) * CM_PER_FOOT + int(match.group(2)) * CM_PER_INCH
    lowered = text.lower()
    if "cm" in lowered:
        return _leading_float(lowered.replace("cm", ""))
    value = _leading_float(text)
    # small bare numbers are feet
    if 0 < value < 10:
        return value * CM_PER_FOOT
    return value


def parse_weight(text: str) -> float:
    """Return weight in kg from ``lbs``/``lb``/``kg`` suffixes or a bare number."""
    lowered = text.lower()
    if "lb" in lowered:
        return _leading_float(re.sub(r"lbs|lb", "", lowered)) * KG_PER_POUND
    if "kg" in lowered:
        return _leading_float(lowered.replace("kg", ""))
    value = _leading_float(text)
    if value > 90:
        return value * KG_PER_POUND
    return value


def calculate_bmr(age: int, gender: str, height_cm: float, weight_kg: float) -> float:
    """Mifflin-St Jeor basal metabolic rate."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + 5 if gender == "male" else base - 161


def calculate_tdee(bmr: float, activity_level: str) -> int:
    try:
        multiplier = ACTIVITY_MULTIPLIERS[activity_level]
    except KeyError:
        raise CalculatorInputError(f"Unknown activity level: {activity_level}") from None
    return _round(bmr * multiplier)


def calculate_macros(tdee: int, weight_kg: float) -> tuple[MacroRange, MacroRange, MacroRange]:
    """Protein by body weight, fat by calorie share, carbs from what remains."""
    protein = MacroRange(_round(weight_kg * 1.6), _round(weight_kg * 2.2))
    fat = MacroRange(_round(tdee * 0.2 / 9), _round(tdee * 0.35 / 9))
    remaining = tdee - (protein.min + protein.max) / 2 * 4 - (fat.min + fat.max) / 2 * 9
    carbs = MacroRange(_round(remaining * 0.8 / 4), _round(remaining * 1.2 / 4))
    return protein, carbs, fat


def calculate_goals(tdee: int) -> dict[str, int]:
    return {"lose": _round(tdee * 0.8), "maintain": tdee, "gain": _round(tdee * 1.15)}


def calculate(
    age: int, gender: str, height: str, weight: str, activity_level: str = "moderate"
) -> CalculatorResult:
    """Validate inputs and compute every calculator output."""
    if not MIN_AGE <= age <= MAX_AGE:
        raise CalculatorInputError(f"Age must be between {MIN_AGE} and {MAX_AGE}")
    if not height.strip():
        raise CalculatorInputError("Height is required")
    if not weight.strip():
        raise CalculatorInputError("Weight is required")
    height_cm = parse_height(height)
    weight_kg = parse_weight(weight)
    if height_cm <= 0 or weight_kg <= 0:
        raise CalculatorInputError("Height and weight must be positive numbers")

    bmr = _round(calculate_bmr(age, gender, height_cm, weight_kg))
    tdee = calculate_tdee(bmr, activity_level)
    protein, carbs, fat = calculate_macros(tdee, weight_kg)
    return CalculatorResult(
        bmr=bmr,
        tdee=tdee,
        protein=protein,
        carbs=carbs,
        fat=fat,
        goal_calories=calculate_goals(tdee),
    )


def _leading_float(text: str) -> float:
    match = _LEADING_NUMBER.match(text)
    return float(match.group(1)) if match else 0.0


def _round(value: float) -> int:
    # half-up, not banker's rounding
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
