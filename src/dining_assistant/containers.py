"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from dining_assistant.adapters.menu_portal_client import HttpxMenuPortalClient
from dining_assistant.adapters.openai_text_client import OpenAITextClient
from dining_assistant.adapters.supabase_kv_store import SupabaseKeyValueStore
from dining_assistant.config import Settings
from dining_assistant.services.cache import InMemoryCache
from dining_assistant.services.chat import ChatService
from dining_assistant.services.enrichment import ChatEnricher
from dining_assistant.services.events import MEAL_EVENTS, MealEvents, log_meal_change
from dining_assistant.services.history import ChatSessionStore, MealHistoryStore
from dining_assistant.services.key_rotation import ApiKeyRotator
from dining_assistant.services.llm import LlmGateway
from dining_assistant.services.meal_analysis import MealAnalysisService
from dining_assistant.services.meal_plans import MealPlanService
from dining_assistant.services.menus import MenuService
from dining_assistant.services.storage import InMemoryKeyValueStore, KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    menu_service: MenuService
    chat_service: ChatService
    chat_enricher: ChatEnricher
    meal_plan_service: MealPlanService
    meal_analysis_service: MealAnalysisService
    chat_sessions: ChatSessionStore
    meal_history: MealHistoryStore
    meal_events: MealEvents
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Use Supabase when configured, otherwise keep blobs in memory."""
    if settings.uses_supabase():
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    _logger.warning("Supabase is not configured; history is kept in memory")
    return InMemoryKeyValueStore()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    portal_client = HttpxMenuPortalClient.create(
        timeout_seconds=resolved_settings.portal_timeout_seconds
    )
    menu_service = MenuService(
        portal_client=portal_client,
        cache=InMemoryCache(),
        nutrition_base_url=resolved_settings.nutrition_portal_base_url,
        menu_ttl_seconds=resolved_settings.menu_cache_ttl_seconds,
        nutrition_ttl_seconds=resolved_settings.nutrition_cache_ttl_seconds,
    )
    text_client = OpenAITextClient.create(base_url=resolved_settings.llm_base_url)
    llm = LlmGateway(
        client=text_client,
        rotator=ApiKeyRotator(resolved_settings.api_keys()),
        model=resolved_settings.llm_model,
    )
    chat_service = ChatService(
        llm=llm,
        truncation_threshold=resolved_settings.summary_truncation_threshold,
        items_per_category=resolved_settings.summary_items_per_category,
    )
    chat_enricher = ChatEnricher(
        fetch_nutrition=menu_service.get_nutrition, cache=InMemoryCache()
    )
    store = build_store(resolved_settings)
    meal_events = MealEvents()
    for event in MEAL_EVENTS:
        meal_events.subscribe(event, log_meal_change(event))

    async def close_resources() -> None:
        await portal_client.close()
        await text_client.close()

    return AppContainer(
        settings=resolved_settings,
        menu_service=menu_service,
        chat_service=chat_service,
        chat_enricher=chat_enricher,
        meal_plan_service=MealPlanService(llm=llm, menu_service=menu_service),
        meal_analysis_service=MealAnalysisService(llm=llm),
        chat_sessions=ChatSessionStore(store),
        meal_history=MealHistoryStore(store, events=meal_events),
        meal_events=meal_events,
        close_resources=close_resources,
    )
