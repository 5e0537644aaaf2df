"""Tests for assistant response formatting."""

import pytest

from dining_assistant.domain.display import (
    Bullet,
    FoodItem,
    FoodItemLabel,
    LineBreak,
    MealTotal,
    NutritionBadge,
    NutritionGroup,
    OptionHeader,
    ProteinTotal,
    Text,
)
from dining_assistant.services.response_formatter import (
    format_response,
    nodes_to_text,
    normalize_response,
    tag_response,
)

EGGS_BADGES = (
    NutritionBadge("calories", "120"),
    NutritionBadge("protein", "12g"),
    NutritionBadge("carbs", "1g"),
    NutritionBadge("fat", "8g"),
)

SAMPLE_RESPONSE = """Here are three ideas:
**Option 1: Protein Power**
**Grilled Chicken** (Calories: 180, Protein: 30g, Carbs: 0g, Fat: 6g)
**Brown Rice** (Calories: 150, Protein: 3g, Carbs: 32g, Fat: 1g)
Total: Calories: 330, Protein: 33g, Carbs: 32g, Fat: 7g
Total Protein: 33g
• Add a side salad
- Drink water"""


def test_eggs_example_renders_one_food_item() -> None:
    nodes = format_response("**Eggs** (Calories: 120, Protein: 12g, Carbs: 1g, Fat: 8g)")

    assert nodes == [FoodItem(name="Eggs", badges=EGGS_BADGES)]


def test_sample_response_structure() -> None:
    nodes = format_response(SAMPLE_RESPONSE)

    assert [node for node in nodes if not isinstance(node, LineBreak)] == [
        Text("Here are three ideas:"),
        OptionHeader("Option 1: Protein Power"),
        FoodItem(
            "Grilled Chicken",
            (
                NutritionBadge("calories", "180"),
                NutritionBadge("protein", "30g"),
                NutritionBadge("carbs", "0g"),
                NutritionBadge("fat", "6g"),
            ),
        ),
        FoodItem(
            "Brown Rice",
            (
                NutritionBadge("calories", "150"),
                NutritionBadge("protein", "3g"),
                NutritionBadge("carbs", "32g"),
                NutritionBadge("fat", "1g"),
            ),
        ),
        MealTotal(
            (
                NutritionBadge("calories", "330"),
                NutritionBadge("protein", "33g"),
                NutritionBadge("carbs", "32g"),
                NutritionBadge("fat", "7g"),
            )
        ),
        ProteinTotal("33g"),
        Bullet("Add a side salad"),
        Bullet("Drink water"),
    ]
    assert sum(isinstance(node, LineBreak) for node in nodes) == 7


@pytest.mark.parametrize(
    "text",
    [
        "**Eggs** (Calories: 120, Protein: 12g, Carbs: 1g, Fat: 8g)",
        SAMPLE_RESPONSE,
        "**Breakfast Pick:** something light\n**Oatmeal**",
        "Side salad (Calories: 50, Protein: 2g, Carbs: 8g, Fat: 1g)",
        "**40g of protein** in this meal",
        "**Option 1: Eggs (Calories: 350, Protein: 20g, Carbs: 30g, Fat: 15g)**",
        "**Option 1: Total Protein: 40g**",
    ],
)
def test_formatting_is_idempotent(text: str) -> None:
    nodes = format_response(text)

    assert format_response(nodes_to_text(nodes)) == nodes


def test_option_title_keeps_text_around_nested_tags() -> None:
    nodes = format_response(
        "**Option 1: Eggs (Calories: 350, Protein: 20g, Carbs: 30g, Fat: 15g)**"
    )

    assert nodes == [
        OptionHeader("Option 1: Eggs"),
        NutritionGroup(
            (
                NutritionBadge("calories", "350"),
                NutritionBadge("protein", "20g"),
                NutritionBadge("carbs", "30g"),
                NutritionBadge("fat", "15g"),
            )
        ),
    ]
    assert format_response("**Option 2: Total Protein: 40g**") == [
        OptionHeader("Option 2:"),
        ProteinTotal("40g"),
    ]


def test_label_and_bare_item() -> None:
    nodes = format_response("**Breakfast Pick:** something light\n**Oatmeal**")

    assert nodes == [
        FoodItemLabel("Breakfast Pick"),
        Text("something light"),
        LineBreak(),
        FoodItem("Oatmeal"),
    ]


def test_standalone_nutrition_group() -> None:
    nodes = format_response("Side salad (Calories: 50 Protein: 2g Carbs: 8g Fat: 1g)")

    assert nodes == [
        Text("Side salad"),
        NutritionGroup(
            (
                NutritionBadge("calories", "50"),
                NutritionBadge("protein", "2g"),
                NutritionBadge("carbs", "8g"),
                NutritionBadge("fat", "1g"),
            )
        ),
    ]


def test_bold_protein_total() -> None:
    assert format_response("**40g of protein**") == [ProteinTotal("40g")]


def test_bold_total_label_becomes_meal_total() -> None:
    nodes = format_response("**Total:** Calories: 500, Protein: 40g")

    assert nodes == [
        MealTotal((NutritionBadge("calories", "500"), NutritionBadge("protein", "40g")))
    ]


def test_normalize_collapses_doubled_punctuation() -> None:
    assert normalize_response("((Calories: 5,, Fat: 1g))") == "(Calories: 5, Fat: 1g)"
    assert normalize_response("(, Protein: 2g,)") == "(Protein: 2g)"
    assert normalize_response("***Pasta***") == "**Pasta**"
    assert normalize_response("a ** ** b") == "a  b"


def test_adjacent_bold_items_stay_separate() -> None:
    nodes = format_response("**Toast** **Jam**")

    assert nodes == [FoodItem("Toast"), FoodItem("Jam")]


def test_plain_text_passes_through() -> None:
    assert format_response("Enjoy your meal!") == [Text("Enjoy your meal!")]
    assert tag_response("Enjoy your meal!") == "Enjoy your meal!"


def test_nodes_serialise_with_kind() -> None:
    payload = format_response("**Eggs** (Calories: 120, Protein: 12g, Carbs: 1g, Fat: 8g)")[
        0
    ].to_dict()

    assert payload["kind"] == "food-item"
    assert payload["name"] == "Eggs"
    assert payload["badges"][0] == {"type": "calories", "value": "120"}
