"""Meal nutrition analysis using LLMs."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from dining_assistant.domain.plans import MealAnalysis
from dining_assistant.services.llm import LlmGateway

_logger = logging.getLogger(__name__)

MEAL_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "carbs": {"type": "number"},
        "fat": {"type": "number"},
        "healthScore": {"type": "integer", "minimum": 1, "maximum": 10},
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["calories", "protein", "carbs", "fat", "healthScore", "recommendations"],
    "additionalProperties": False,
}


class MealAnalysisError(RuntimeError):
    """Raised when a meal cannot be analyzed."""


@dataclass
class MealAnalysisService:
    """Asks the LLM for a structured meal estimate and validates it."""

    llm: LlmGateway
    max_tokens: int = 1000

    async def analyze(self, meal_description: str) -> MealAnalysis:
        """Return validated nutrition estimates for a free-text meal."""
        try:
            raw = await self.llm.complete_json(
                _analysis_prompt(meal_description),
                MEAL_ANALYSIS_SCHEMA,
                max_tokens=self.max_tokens,
            )
        except Exception as exc:
            _logger.exception("Meal analysis request failed")
            raise MealAnalysisError("Failed to analyze meal") from exc
        return parse_meal_analysis(raw)


def parse_meal_analysis(raw: dict[str, object]) -> MealAnalysis:
    """Validate raw LLM output; out-of-range health scores are rejected."""
    try:
        return MealAnalysis.model_validate(raw)
    except ValidationError as exc:
        _logger.warning("Meal analysis failed validation: %s", exc)
        raise MealAnalysisError("Failed to analyze meal") from exc


def _analysis_prompt(meal_description: str) -> str:
    return f"""Analyze the following meal and provide nutritional information:

"{meal_description}"

Provide a reasonable estimate of:
1. Calories
2. Protein (grams)
3. Carbohydrates (grams)
4. Fat (grams)
5. Health score (1-10, where 10 is extremely healthy)
6. A list of 2-3 recommendations to improve the nutritional value of this meal

If the meal description is vague, make educated assumptions based on typical dining hall portions."""
