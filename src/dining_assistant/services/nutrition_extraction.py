"""Extraction of nutrition facts from FoodPro label pages.

Each field is read by an ordered list of regex probes: the first pattern
matches the portal's current label template, later ones cover structural
variants.  A field whose probes all miss falls back to its default.
"""

import re
from collections.abc import Sequence

from bs4 import BeautifulSoup

from dining_assistant.domain.nutrition import NutritionFacts

_FLAGS = re.IGNORECASE

_PROBES: dict[str, tuple[tuple[re.Pattern[str], ...], str]] = {
    "item_name": (
        (
            re.compile(r"<h2>([\s\S]*?)</h2>", _FLAGS),
            re.compile(r"<h1[^>]*>([\s\S]*?)</h1>", _FLAGS),
        ),
        "Unknown Item",
    ),
    "serving_size": (
        (re.compile(r"Serving Size\s*([\s\S]*?)</p>", _FLAGS),),
        "1 EACH",
    ),
    "calories": (
        (
            re.compile(r"Calories&nbsp;(\d+)", _FLAGS),
            re.compile(r"Calories[^<]*?(\d+)", _FLAGS),
        ),
        "0",
    ),
    "total_fat": (
        (
            re.compile(r"<b>Total Fat</b>&nbsp;([^<]*)", _FLAGS),
            re.compile(r"Total Fat[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "saturated_fat": (
        (
            re.compile(r"Sat\. Fat&nbsp;([^<]*)", _FLAGS),
            re.compile(r"Saturated Fat[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "trans_fat": (
        (
            re.compile(r"Trans Fat&nbsp;([^<]*)", _FLAGS),
            re.compile(r"Trans Fat[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "cholesterol": (
        (
            re.compile(r"<b>Cholesterol&nbsp;</b>([^<]*)", _FLAGS),
            re.compile(r"Cholesterol[^<]*?([0-9.]+mg)", _FLAGS),
        ),
        "0mg",
    ),
    "sodium": (
        (
            re.compile(r"<b>Sodium&nbsp;</b>([^<]*)", _FLAGS),
            re.compile(r"Sodium[^<]*?([0-9.]+mg)", _FLAGS),
        ),
        "0mg",
    ),
    "total_carbs": (
        (
            re.compile(r"<b>Tot\. Carb\.</b>&nbsp;([^<]*)", _FLAGS),
            re.compile(r"Total Carb(?:s|ohydrates?)?[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "dietary_fiber": (
        (
            re.compile(r"Dietary Fiber&nbsp;([^<]*)", _FLAGS),
            re.compile(r"Dietary Fiber[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "sugars": (
        (
            re.compile(r"Sugars&nbsp;([^<]*)", _FLAGS),
            re.compile(r"Sugars[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "protein": (
        (
            re.compile(r"<b>Protein&nbsp;</b>([^<]*)", _FLAGS),
            re.compile(r"Protein[^<]*?([0-9.]+g)", _FLAGS),
        ),
        "0g",
    ),
    "ingredients": (
        (
            re.compile(r"<b>INGREDIENTS:(?:&nbsp;)*</b>([\s\S]*?)</p>", _FLAGS),
            re.compile(r"INGREDIENTS:([\s\S]*?)(?:</div>|<div)", _FLAGS),
        ),
        "",
    ),
    "allergens": (
        (
            re.compile(r"<b>ALLERGENS:(?:&nbsp;)*</b>([\s\S]*?)</p>", _FLAGS),
            re.compile(r"ALLERGENS:([\s\S]*?)(?:</div>|<div|</p>)", _FLAGS),
        ),
        "",
    ),
}

# Label text as it appears on the page, keyed by the reported nutrient name.
DAILY_VALUE_LABELS: dict[str, str] = {
    "Total Fat": r"Total Fat",
    "Saturated Fat": r"Sat\. Fat",
    "Cholesterol": r"Cholesterol",
    "Sodium": r"Sodium",
    "Total Carbs": r"Tot\. Carb\.",
    "Dietary Fiber": r"Dietary Fiber",
}

_PERCENT_CELL = r"[\s\S]*?<td[^>]*align=\"center\"[^>]*>\s*<b>(\d+)</b>%"


def parse_nutrition_facts(page: str) -> NutritionFacts:
    """Parse a nutrition label page; every field falls back to its default."""
    values = {field: probe_field(page, field) for field in _PROBES}
    return NutritionFacts(
        **values,
        percent_daily_values={
            nutrient: probe_percent_daily_value(page, nutrient)
            for nutrient in DAILY_VALUE_LABELS
        },
    )


def probe_field(page: str, field: str) -> str:
    """Return a single field from the page, or its default when no probe matches."""
    patterns, default = _PROBES[field]
    value = first_match(page, patterns)
    return value if value is not None else default


def probe_percent_daily_value(page: str, nutrient: str) -> str:
    """Return the ``N%`` daily value that follows a nutrient's label, else ``0%``."""
    label = DAILY_VALUE_LABELS.get(nutrient)
    if label is None:
        return "0%"
    match = re.search(label + _PERCENT_CELL, page, _FLAGS)
    return f"{match.group(1)}%" if match else "0%"


def first_match(page: str, patterns: Sequence[re.Pattern[str]]) -> str | None:
    """Return the cleaned first group of the first pattern with a non-empty match."""
    for pattern in patterns:
        match = pattern.search(page)
        if match:
            value = _clean(match.group(1))
            if value:
                return value
    return None


def _clean(raw: str) -> str:
    text = BeautifulSoup(raw, "html.parser").get_text()
    return " ".join(text.split())
