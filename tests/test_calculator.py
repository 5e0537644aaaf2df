"""Tests for the nutrition calculator."""

import pytest

from dining_assistant.services.calculator import (
    CalculatorInputError,
    MacroRange,
    calculate,
    calculate_bmr,
    parse_height,
    parse_weight,
)


def test_reference_profile() -> None:
    result = calculate(age=20, gender="male", height="5'10\"", weight="170lbs")

    assert result.bmr == 1787
    assert result.tdee == 2770
    assert result.goal_calories["lose"] == 2216
    assert result.goal_calories["maintain"] == 2770
    assert result.protein == MacroRange(123, 170)
    assert result.fat == MacroRange(62, 108)
    assert result.carbs == MacroRange(284, 426)


def test_result_serialises_goal_calories_in_camel_case() -> None:
    payload = calculate(age=20, gender="male", height="178cm", weight="77kg").to_dict()

    assert set(payload) == {"bmr", "tdee", "protein", "carbs", "fat", "goalCalories"}
    assert set(payload["protein"]) == {"min", "max"}


@pytest.mark.parametrize(
    ("text", "expected"),
    [("5'10\"", 177.8), ("5'10", 177.8), ("178cm", 178.0), ("6", 182.88), ("170", 170.0)],
)
def test_parse_height(text: str, expected: float) -> None:
    assert parse_height(text) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("text", "expected"),
    [("170lbs", 77.11064), ("170 lb", 77.11064), ("70kg", 70.0), ("70", 70.0), ("180", 81.64656)],
)
def test_parse_weight(text: str, expected: float) -> None:
    assert parse_weight(text) == pytest.approx(expected)


def test_female_bmr_uses_lower_constant() -> None:
    male = calculate_bmr(30, "male", 165, 60)
    female = calculate_bmr(30, "female", 165, 60)

    assert male - female == 166


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"age": 14}, "Age must be between 15 and 80"),
        ({"age": 81}, "Age must be between 15 and 80"),
        ({"height": "  "}, "Height is required"),
        ({"weight": ""}, "Weight is required"),
        ({"weight": "heavy"}, "Height and weight must be positive numbers"),
        ({"activity_level": "extreme"}, "Unknown activity level: extreme"),
    ],
)
def test_invalid_inputs(kwargs: dict[str, object], message: str) -> None:
    arguments = {"age": 20, "gender": "male", "height": "5'10\"", "weight": "170lbs"}
    arguments.update(kwargs)

    with pytest.raises(CalculatorInputError, match=message):
        calculate(**arguments)
