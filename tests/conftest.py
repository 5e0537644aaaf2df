"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from dining_assistant.adapters.menu_portal_client import MenuPortalClient
from dining_assistant.config import Settings
from dining_assistant.containers import AppContainer
from dining_assistant.services.cache import InMemoryCache
from dining_assistant.services.chat import ChatService
from dining_assistant.services.enrichment import ChatEnricher
from dining_assistant.services.events import MealEvents
from dining_assistant.services.history import ChatSessionStore, MealHistoryStore
from dining_assistant.services.key_rotation import ApiKeyRotator
from dining_assistant.services.llm import LlmClient, LlmGateway
from dining_assistant.services.meal_analysis import MealAnalysisService
from dining_assistant.services.meal_plans import MealPlanService
from dining_assistant.services.menus import MenuService
from dining_assistant.services.storage import InMemoryKeyValueStore

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

MENU_HTML = """
<html><body>
<form>
  <fieldset>
    <div class="col-1"><input type="checkbox" /><label>House Granola</label></div>
    <div class="col-2"><label>1/2 CUP</label></div>
  </fieldset>
  <h3>-- BREAKFAST ENTREES --</h3>
  <fieldset>
    <div class="col-1"><input type="checkbox" /><label>Scrambled&nbsp;Eggs</label></div>
    <div class="col-2"><label>1 EACH</label></div>
    <div class="col-3"><a href="label.aspx?RecNumAndPort=061002*1">Nutrition</a></div>
  </fieldset>
  <fieldset>
    <div class="col-1"><input type="checkbox" /><label>Turkey Bacon</label></div>
    <div class="col-2"><label>2 SLICES</label></div>
    <div class="col-3"><a href="label.aspx?RecNumAndPort=061003*2">Nutrition</a></div>
  </fieldset>
  <fieldset>
    <div class="col-2"><label>no name here</label></div>
  </fieldset>
  <h3>  </h3>
  <h3>-- BAKERY --</h3>
  <fieldset>
    <div class="col-1"><input type="checkbox" /><label>Blueberry Muffin</label></div>
    <div class="col-2"><label>1 EACH</label></div>
    <div class="col-3"><a href="javascript:void(0)">Info</a></div>
  </fieldset>
</form>
</body></html>
"""

NUTRITION_HTML = """
<html><body>
<div id="content">
<h2>Scrambled Eggs</h2>
<p>Serving Size 1 EACH</p>
<p>Calories&nbsp;120</p>
<table>
<tr><td><b>Total Fat</b>&nbsp;8g</td><td align="center"><b>12</b>%</td></tr>
<tr><td>Sat. Fat&nbsp;3g</td><td align="center"><b>15</b>%</td></tr>
<tr><td>Trans Fat&nbsp;0g</td></tr>
<tr><td><b>Cholesterol&nbsp;</b>370mg</td><td align="center"><b>123</b>%</td></tr>
<tr><td><b>Sodium&nbsp;</b>340mg</td><td align="center"><b>15</b>%</td></tr>
<tr><td><b>Tot. Carb.</b>&nbsp;1g</td><td align="center"><b>0</b>%</td></tr>
<tr><td>Dietary Fiber&nbsp;0g</td><td align="center"><b>0</b>%</td></tr>
<tr><td>Sugars&nbsp;1g</td></tr>
<tr><td><b>Protein&nbsp;</b>12g</td></tr>
</table>
<p><b>INGREDIENTS:&nbsp;</b>EGGS, BUTTER, <i>SALT</i></p>
<p><b>ALLERGENS:&nbsp;</b>Eggs, Milk</p>
</div>
</body></html>
"""


@dataclass
class FakePortalClient(MenuPortalClient):
    """Fake portal returning canned menu and label pages."""

    pages: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None
    requested: list[str] = field(default_factory=list)

    async def fetch_html(self, url: str) -> str:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        if url in self.pages:
            return self.pages[url]
        if "label.aspx" in url:
            return NUTRITION_HTML
        return MENU_HTML


@dataclass
class FakeLlmClient(LlmClient):
    """Fake LLM that replays scripted replies and records every call."""

    replies: list[str | Exception] = field(default_factory=list)
    json_replies: list[dict[str, object] | Exception] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        messages: list[dict[str, str]],
        model: str,
        api_key: str,
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        self.calls.append(
            {"messages": messages, "api_key": api_key, "max_tokens": max_tokens}
        )
        reply = self.replies.pop(0) if self.replies else "Sounds good."
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema: dict[str, object],
        model: str,
        api_key: str,
        max_tokens: int,
    ) -> dict[str, object]:
        self.calls.append({"prompt": prompt, "api_key": api_key})
        reply = self.json_replies.pop(0) if self.json_replies else {}
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_gateway(client: LlmClient, keys: tuple[str, ...] = ("key-1",)) -> LlmGateway:
    return LlmGateway(client=client, rotator=ApiKeyRotator(keys), model="test-model")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        google_generative_ai_api_key="key-1",
        google_generative_ai_api_key_2="key-2",
    )


@pytest.fixture
def portal_client() -> FakePortalClient:
    return FakePortalClient()


@pytest.fixture
def llm_client() -> FakeLlmClient:
    return FakeLlmClient()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def container(
    settings: Settings,
    portal_client: FakePortalClient,
    llm_client: FakeLlmClient,
    kv_store: InMemoryKeyValueStore,
) -> AppContainer:
    menu_service = MenuService(portal_client=portal_client, cache=InMemoryCache())
    llm = LlmGateway(
        client=llm_client,
        rotator=ApiKeyRotator(settings.api_keys()),
        model=settings.llm_model,
    )
    events = MealEvents()

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        menu_service=menu_service,
        chat_service=ChatService(llm=llm),
        chat_enricher=ChatEnricher(
            fetch_nutrition=menu_service.get_nutrition, cache=InMemoryCache()
        ),
        meal_plan_service=MealPlanService(
            llm=llm, menu_service=menu_service, clock=lambda: FIXED_NOW
        ),
        meal_analysis_service=MealAnalysisService(llm=llm),
        chat_sessions=ChatSessionStore(kv_store, clock=lambda: FIXED_NOW),
        meal_history=MealHistoryStore(kv_store, events=events, clock=lambda: FIXED_NOW),
        meal_events=events,
        close_resources=close_resources,
    )
