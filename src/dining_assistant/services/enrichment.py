"""Splices scraped nutrition values into assistant responses."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from dining_assistant.domain.menus import MenuData, MenuItem
from dining_assistant.domain.nutrition import MacroProfile, NutritionFacts
from dining_assistant.services.cache import Cache

_logger = logging.getLogger(__name__)

_ITEM_NAME = r"[\w\s&+'-]+"
_LABELLED_NAME = re.compile(rf"\*\*({_ITEM_NAME}):\*\*|\*({_ITEM_NAME}):\*")

NutritionFetcher = Callable[[str], Awaitable[NutritionFacts]]


def extract_item_names(text: str) -> list[str]:
    """Return names written as ``**Name:**`` or ``*Name:*``, first occurrence order."""
    names: list[str] = []
    for match in _LABELLED_NAME.finditer(text):
        name = (match.group(1) or match.group(2)).strip()
        if name and name not in names:
            names.append(name)
    return names


def match_menu_item(name: str, items: list[MenuItem]) -> MenuItem | None:
    """Exact case-insensitive match first, then containment in either direction."""
    wanted = name.lower()
    for item in items:
        if item.name.lower() == wanted:
            return item
    for item in items:
        candidate = item.name.lower()
        if wanted in candidate or candidate in wanted:
            return item
    return None


def splice_nutrition(text: str, name: str, macros: MacroProfile) -> str:
    """Insert macros after each ``**Name:**`` or ``*Name:*`` lacking nutrition."""
    label = re.compile(rf"((\*{{1,2}}){re.escape(name)}:\2)([^\n]*)")

    def replace(match: re.Match[str]) -> str:
        rest = match.group(3)
        if "(Calories:" in rest:
            return match.group(0)
        return f"{match.group(1)} {macros.as_parenthetical()}{rest}"

    return label.sub(replace, text)


@dataclass
class ChatEnricher:
    """Adds real nutrition values for menu items mentioned in a response.

    Facts are memoised by item name for the lifetime of the enricher.
    """

    fetch_nutrition: NutritionFetcher
    cache: Cache

    async def enrich(self, text: str, menu: MenuData | None) -> str:
        """Return ``text`` with nutrition spliced in; failures leave items unchanged."""
        if menu is None or not menu.items:
            return text
        matches: list[tuple[str, MenuItem]] = []
        for name in extract_item_names(text):
            item = match_menu_item(name, menu.items)
            if item is not None and item.nutrition_link:
                matches.append((name, item))
        if not matches:
            return text

        results = await asyncio.gather(
            *(self._facts_for(item) for _, item in matches)
        )
        for (name, _), facts in zip(matches, results, strict=True):
            if facts is not None:
                text = splice_nutrition(text, name, MacroProfile.from_facts(facts))
        return text

    async def _facts_for(self, item: MenuItem) -> NutritionFacts | None:
        cached = self.cache.get(item.name)
        if isinstance(cached, NutritionFacts):
            return cached
        try:
            facts = await self.fetch_nutrition(item.nutrition_link or "")
        except Exception:
            _logger.exception("Nutrition fetch failed for %s", item.name)
            return None
        self.cache.set(item.name, facts)
        return facts
