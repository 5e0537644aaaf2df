"""FastAPI application factory."""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from dining_assistant.api.models import (
    AnalyzeMealRequest,
    CalculatorRequest,
    ChatRequest,
    DirectChatRequest,
    FormatRequest,
    ManualMealRequest,
    MenuMealRequest,
    MenuRequest,
    NutritionRequest,
    SessionRequest,
)
from dining_assistant.app_logging import configure_logging
from dining_assistant.containers import AppContainer
from dining_assistant.domain.halls import DINING_HALLS, UnknownDiningHallError
from dining_assistant.domain.history import ChatSession, MealHistoryEntry
from dining_assistant.domain.menus import MenuData, MenuItem
from dining_assistant.domain.plans import MealPlanRequest
from dining_assistant.services.calculator import CalculatorInputError, calculate
from dining_assistant.services.history import estimate_nutrition, session_name
from dining_assistant.services.meal_analysis import MealAnalysisError
from dining_assistant.services.meal_plans import CAMPUS_TZ
from dining_assistant.services.response_formatter import format_response
from dining_assistant.services.stats import daily_totals, filter_meals, summarize_meals

_TIME_RANGES = {"today", "week", "month", "all"}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = [
            f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _error(400, "; ".join(messages) or "Invalid request")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/halls")
    async def list_halls() -> dict[str, object]:
        """Return the dining hall registry."""
        return {
            "halls": [
                {
                    "name": hall.name,
                    "locationNum": hall.location_num,
                    "mealPeriods": list(hall.meal_periods),
                }
                for hall in DINING_HALLS.values()
            ]
        }

    @app.post("/api/menu", response_model=None)
    async def menu(payload: MenuRequest, request: Request) -> dict[str, object] | JSONResponse:
        """Scrape the menu for a hall, date and meal period."""
        state_container: AppContainer = request.app.state.container
        try:
            data = await state_container.menu_service.get_menu(
                payload.dining_hall, payload.date, payload.meal_period
            )
        except UnknownDiningHallError as exc:
            return _error(400, f"Unknown dining hall: {exc.args[0]}")
        except Exception as exc:
            logger.exception("Menu fetch failed for %s", payload.dining_hall)
            return _error(500, str(exc))
        return data.to_dict()

    @app.post("/api/nutrition", response_model=None)
    async def nutrition(
        payload: NutritionRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Scrape an item's nutrition label."""
        state_container: AppContainer = request.app.state.container
        try:
            facts = await state_container.menu_service.get_nutrition(
                payload.nutrition_link
            )
        except Exception as exc:
            logger.exception("Nutrition fetch failed for %s", payload.nutrition_link)
            return _error(500, str(exc))
        return facts.to_dict()

    @app.post("/api/analyze-meal", response_model=None)
    async def analyze_meal(
        payload: AnalyzeMealRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Estimate nutrition for a described meal."""
        state_container: AppContainer = request.app.state.container
        try:
            analysis = await state_container.meal_analysis_service.analyze(
                payload.meal_description
            )
        except MealAnalysisError:
            return _error(500, "Failed to analyze meal")
        return analysis.model_dump(by_alias=True)

    @app.post("/api/chat")
    async def chat(payload: ChatRequest, request: Request) -> Response:
        """Reply to a conversation as a single server-sent event."""
        state_container: AppContainer = request.app.state.container
        logger.info("Chat request received with %s messages", len(payload.messages))
        text = await state_container.chat_service.chat(
            [message.model_dump() for message in payload.messages],
            payload.menu_summary,
        )
        body = await _reply_body(state_container, text, payload.menu)
        return Response(
            content=f"data: {json.dumps(body)}\n\n",
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    @app.post("/api/chat/direct")
    async def chat_direct(
        payload: DirectChatRequest, request: Request
    ) -> dict[str, object]:
        """Answer a single question without conversation history."""
        state_container: AppContainer = request.app.state.container
        text = await state_container.chat_service.chat_direct(
            payload.message, payload.menu_summary
        )
        return await _reply_body(state_container, text, payload.menu)

    @app.post("/api/meal-plan")
    async def meal_plan(payload: MealPlanRequest, request: Request) -> dict[str, object]:
        """Generate a personalised meal plan."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.meal_plan_service.generate(payload)
        return {
            "success": result.success,
            "mealPlan": result.meal_plan,
            "nodes": [node.to_dict() for node in format_response(result.meal_plan)],
        }

    @app.post("/api/format")
    async def format_text(payload: FormatRequest) -> dict[str, object]:
        """Convert assistant text into display nodes."""
        return {"nodes": [node.to_dict() for node in format_response(payload.text)]}

    @app.post("/api/calculator", response_model=None)
    async def calculator(payload: CalculatorRequest) -> dict[str, object] | JSONResponse:
        """Compute BMR, TDEE, macro ranges and calorie goals."""
        try:
            result = calculate(
                payload.age,
                payload.gender,
                payload.height,
                payload.weight,
                payload.activity_level,
            )
        except CalculatorInputError as exc:
            return _error(400, str(exc))
        return result.to_dict()

    @app.get("/api/sessions")
    async def list_sessions(request: Request) -> dict[str, object]:
        """Return saved chat sessions, newest first."""
        state_container: AppContainer = request.app.state.container
        return {
            "sessions": [
                _dump(session) for session in state_container.chat_sessions.list_sessions()
            ]
        }

    @app.get("/api/sessions/{session_id}", response_model=None)
    async def get_session(
        session_id: str, request: Request
    ) -> dict[str, object] | JSONResponse:
        state_container: AppContainer = request.app.state.container
        session = state_container.chat_sessions.get(session_id)
        if session is None:
            return _error(404, "Session not found")
        return _dump(session)

    @app.put("/api/sessions/{session_id}")
    async def save_session(
        session_id: str, payload: SessionRequest, request: Request
    ) -> dict[str, object]:
        """Autosave a chat session, replacing any previous copy."""
        state_container: AppContainer = request.app.state.container
        session = ChatSession(
            id=session_id,
            name=payload.name or session_name(payload.dining_hall, payload.meal_period),
            dining_hall=payload.dining_hall,
            meal_period=payload.meal_period,
            date=payload.date,
            messages=payload.messages,
        )
        return _dump(state_container.chat_sessions.autosave(session))

    @app.delete("/api/sessions/{session_id}", response_model=None)
    async def delete_session(
        session_id: str, request: Request
    ) -> dict[str, str] | JSONResponse:
        state_container: AppContainer = request.app.state.container
        if not state_container.chat_sessions.delete(session_id):
            return _error(404, "Session not found")
        return {"status": "deleted"}

    @app.get("/api/sessions/{session_id}/export")
    async def export_session(session_id: str, request: Request) -> Response:
        """Download a session as a JSON file."""
        state_container: AppContainer = request.app.state.container
        exported = state_container.chat_sessions.export(session_id)
        if exported is None:
            return _error(404, "Session not found")
        filename, body = exported
        return Response(
            content=body,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.get("/api/meals")
    async def list_meals(request: Request) -> dict[str, object]:
        """Return logged meals, newest first."""
        state_container: AppContainer = request.app.state.container
        return {"meals": [_dump(meal) for meal in state_container.meal_history.list_meals()]}

    @app.get("/api/meals/dashboard", response_model=None)
    async def dashboard(
        request: Request, range: str = "week"  # noqa: A002
    ) -> dict[str, object] | JSONResponse:
        """Return nutrition totals and per-day macros for a time range."""
        if range not in _TIME_RANGES:
            return _error(400, f"Unknown range: {range}")
        state_container: AppContainer = request.app.state.container
        now = datetime.now(tz=CAMPUS_TZ)
        meals = state_container.meal_history.list_meals()
        return {
            "range": range,
            "summary": summarize_meals(meals, range, now).to_dict(),
            "daily": [
                day.to_dict() for day in daily_totals(filter_meals(meals, range, now), now)
            ],
        }

    @app.post("/api/meals")
    async def add_meal(payload: ManualMealRequest, request: Request) -> dict[str, object]:
        """Log a manually described meal with estimated nutrition."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.meal_history.add_manual(
            date=payload.date or datetime.now(tz=CAMPUS_TZ),
            meal_type=payload.meal_type,
            name=payload.name,
            description=payload.description,
            dining_hall=payload.dining_hall,
            rating=payload.rating or 0,
        )
        return _dump(entry)

    @app.post("/api/meals/from-menu")
    async def add_menu_meal(
        payload: MenuMealRequest, request: Request
    ) -> dict[str, object]:
        """Log a menu item, scraping its label when it has one."""
        state_container: AppContainer = request.app.state.container
        item = MenuItem.from_dict(payload.item)
        facts = None
        if item.nutrition_link:
            try:
                facts = await state_container.menu_service.get_nutrition(
                    item.nutrition_link
                )
            except Exception:
                logger.exception("Nutrition fetch failed for %s", item.name)
        entry = state_container.meal_history.add_from_menu(
            item,
            facts,
            dining_hall=payload.dining_hall,
            meal_period=payload.meal_period,
            date=payload.date or datetime.now(tz=CAMPUS_TZ),
        )
        return _dump(entry)

    @app.put("/api/meals/{entry_id}", response_model=None)
    async def update_meal(
        entry_id: str, payload: ManualMealRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Edit a logged meal; nutrition is re-estimated from the description."""
        state_container: AppContainer = request.app.state.container
        existing = state_container.meal_history.get(entry_id)
        if existing is None:
            return _error(404, "Meal not found")
        updated = MealHistoryEntry(
            id=entry_id,
            date=payload.date or existing.date,
            meal_type=payload.meal_type,
            name=payload.name,
            description=payload.description,
            dining_hall=payload.dining_hall,
            rating=payload.rating if payload.rating is not None else existing.rating,
            nutritional_info=estimate_nutrition(payload.meal_type, payload.description),
        )
        state_container.meal_history.update(updated)
        return _dump(updated)

    @app.delete("/api/meals/{entry_id}", response_model=None)
    async def delete_meal(
        entry_id: str, request: Request
    ) -> dict[str, str] | JSONResponse:
        state_container: AppContainer = request.app.state.container
        if not state_container.meal_history.delete(entry_id):
            return _error(404, "Meal not found")
        return {"status": "deleted"}

    return app


async def _reply_body(
    container: AppContainer, text: str, menu: dict[str, object] | None
) -> dict[str, object]:
    if menu is None:
        return {"text": text}
    enriched = await container.chat_enricher.enrich(text, MenuData.from_dict(menu))
    return {
        "text": enriched,
        "nodes": [node.to_dict() for node in format_response(enriched)],
    }


def _dump(model: ChatSession | MealHistoryEntry) -> dict[str, object]:
    return model.model_dump(by_alias=True, mode="json")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
