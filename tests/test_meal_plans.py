"""Tests for meal plan generation."""

import asyncio

from dining_assistant.domain.plans import MealPlanRequest
from dining_assistant.services.cache import InMemoryCache
from dining_assistant.services.meal_plans import (
    MealPlanService,
    meal_plan_prompt,
    simulated_meal_plan,
    target_calories,
)
from dining_assistant.services.menus import MenuService
from tests.conftest import FIXED_NOW, FakeLlmClient, FakePortalClient, make_gateway


def _service(client: FakeLlmClient, portal: FakePortalClient) -> MealPlanService:
    return MealPlanService(
        llm=make_gateway(client),
        menu_service=MenuService(portal_client=portal, cache=InMemoryCache()),
        clock=lambda: FIXED_NOW,
    )


def test_simulated_plan_scales_from_calorie_limit() -> None:
    plan = simulated_meal_plan(MealPlanRequest(calorie_limit="2000"))

    assert "## Breakfast" in plan
    assert "Scrambled Eggs with Turkey Bacon (The Atrium)" in plan
    assert "Total: Calories: 500, Protein: 31g, Carbs: 63g, Fat: 17g" in plan
    assert "- Total Calories: 2000" in plan


def test_simulated_plan_honours_diet_and_hall() -> None:
    request = MealPlanRequest.model_validate(
        {"dietaryRestrictions": "Vegan", "selectedDiningHall": "Busch Dining Hall"}
    )

    plan = simulated_meal_plan(request)

    assert "Tofu Scramble with Vegetables (Busch Dining Hall)" in plan
    assert "Vegetable Stir Fry with Tofu (Busch Dining Hall)" in plan
    assert "- Dietary restrictions: Vegan" in plan


def test_target_calories_prefers_limit_then_maintenance() -> None:
    assert target_calories(MealPlanRequest(calorie_limit="1800 kcal"), 0.8) == 1800
    assert target_calories(MealPlanRequest(maintenance_calories="2500"), 0.8) == 2000
    assert target_calories(MealPlanRequest(), 1.2) == 2000


def test_generate_uses_todays_menu() -> None:
    client = FakeLlmClient(replies=["## Breakfast\n**Scrambled Eggs**"])
    portal = FakePortalClient()
    request = MealPlanRequest(
        selected_dining_hall="Busch Dining Hall", selected_meal_period="Breakfast"
    )

    result = asyncio.run(_service(client, portal).generate(request))

    assert result.success is True
    assert result.simulated is False
    assert result.meal_plan == "## Breakfast\n**Scrambled Eggs**"
    assert "dtdate=10/18/2026" in portal.requested[0]
    prompt = client.calls[0]["messages"][0]["content"]
    assert "Create a meal plan using ONLY items from this menu." in prompt
    assert "- Scrambled Eggs" in prompt


def test_generate_without_hall_skips_menu() -> None:
    client = FakeLlmClient(replies=["A plan"])
    portal = FakePortalClient()

    result = asyncio.run(_service(client, portal).generate(MealPlanRequest()))

    assert result.meal_plan == "A plan"
    assert portal.requested == []


def test_generate_falls_back_to_simulated_plan() -> None:
    client = FakeLlmClient(replies=[RuntimeError("no keys")])
    request = MealPlanRequest(goal="lose", maintenance_calories="2500")

    result = asyncio.run(_service(client, FakePortalClient()).generate(request))

    assert result.success is True
    assert result.simulated is True
    assert result.meal_plan.startswith("# Personalized Meal Plan")
    assert "- Goal: Lose weight" in result.meal_plan


def test_menu_failure_still_prompts_without_menu() -> None:
    client = FakeLlmClient(replies=["Plan"])
    portal = FakePortalClient(error=RuntimeError("portal down"))
    request = MealPlanRequest(
        selected_dining_hall="Busch Dining Hall", selected_meal_period="Lunch"
    )

    result = asyncio.run(_service(client, portal).generate(request))

    assert result.simulated is False
    assert "breakfast, lunch, dinner, and a snack" in client.calls[0]["messages"][0]["content"]


def test_prompt_lists_preferences() -> None:
    request = MealPlanRequest(avoid_foods="mushrooms", height="5'10\"", goal="muscle")

    prompt = meal_plan_prompt(request, "")

    assert "- Foods to avoid: mushrooms" in prompt
    assert "- Goal: Gain muscle (with exercise)" in prompt
    assert "- Height: 5'10\"" in prompt
    assert "- No dietary restrictions" in prompt
