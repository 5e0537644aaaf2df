"""Menu and nutrition lookups against the dining portal."""

import logging
from dataclasses import dataclass

from dining_assistant.adapters.menu_portal_client import MenuPortalClient
from dining_assistant.domain.halls import build_menu_url
from dining_assistant.domain.menus import MenuData
from dining_assistant.domain.nutrition import NutritionFacts
from dining_assistant.services.cache import Cache
from dining_assistant.services.menu_extraction import (
    NUTRITION_PORTAL_BASE,
    extract_menu_items,
)
from dining_assistant.services.nutrition_extraction import parse_nutrition_facts

_logger = logging.getLogger(__name__)


@dataclass
class MenuService:
    """Fetches and parses portal pages with caching.

    Fetch errors propagate to the caller; nothing is retried.
    """

    portal_client: MenuPortalClient
    cache: Cache
    nutrition_base_url: str = NUTRITION_PORTAL_BASE
    menu_ttl_seconds: int = 3600
    nutrition_ttl_seconds: int = 86400

    async def get_menu(self, dining_hall: str, date: str, meal_period: str) -> MenuData:
        """Return the menu for a hall, date (M/D/YYYY) and meal period."""
        url = build_menu_url(dining_hall, date, meal_period)
        cache_key = f"menu:{url}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, MenuData):
            return cached

        _logger.info("Fetching menu: hall=%s date=%s period=%s", dining_hall, date, meal_period)
        html = await self.portal_client.fetch_html(url)
        items = extract_menu_items(html, self.nutrition_base_url)
        _logger.info("Extracted %s menu items for %s", len(items), dining_hall)
        menu = MenuData.build(dining_hall, date, meal_period, items)
        self.cache.set(cache_key, menu, ttl_seconds=self.menu_ttl_seconds)
        return menu

    async def get_nutrition(self, nutrition_link: str) -> NutritionFacts:
        """Return nutrition facts from an item's label page."""
        cache_key = f"nutrition:{nutrition_link}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionFacts):
            return cached

        html = await self.portal_client.fetch_html(nutrition_link)
        facts = parse_nutrition_facts(html)
        self.cache.set(cache_key, facts, ttl_seconds=self.nutrition_ttl_seconds)
        return facts
