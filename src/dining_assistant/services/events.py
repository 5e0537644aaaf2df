"""Observer registry for meal history changes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)

MEAL_ADDED = "meal-added"
MEAL_UPDATED = "meal-updated"
MEAL_DELETED = "meal-deleted"
MEAL_EVENTS = (MEAL_ADDED, MEAL_UPDATED, MEAL_DELETED)

MealObserver = Callable[[object], None]


@dataclass
class MealEvents:
    """Delivers meal events to subscribed callbacks in registration order."""

    _observers: dict[str, list[MealObserver]] = field(default_factory=dict)

    def subscribe(self, event: str, callback: MealObserver) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._observers.setdefault(event, []).append(callback)

        def unsubscribe() -> None:
            observers = self._observers.get(event, [])
            if callback in observers:
                observers.remove(callback)

        return unsubscribe

    def publish(self, event: str, payload: object = None) -> None:
        """Notify every observer; a failing observer does not stop delivery."""
        _logger.info("Publishing %s event", event)
        for callback in list(self._observers.get(event, [])):
            try:
                callback(payload)
            except Exception:
                _logger.exception("Observer for %s failed", event)


def log_meal_change(event: str) -> MealObserver:
    """Return an observer that records ``event`` and the affected meal id."""

    def observe(payload: object) -> None:
        _logger.info("Meal history %s: %s", event, getattr(payload, "id", payload))

    return observe
