"""Domain models for scraped dining hall menus."""

from dataclasses import dataclass
from datetime import UTC, datetime

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class MenuItem:
    """A single item listed on a menu page."""

    name: str
    category: str
    portion: str
    nutrition_link: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Return the JSON representation used by the HTTP API."""
        return {
            "name": self.name,
            "category": self.category,
            "portion": self.portion,
            "nutritionLink": self.nutrition_link,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "MenuItem":
        """Build a menu item from its JSON representation."""
        link = payload.get("nutritionLink")
        return cls(
            name=str(payload.get("name", "")),
            category=str(payload.get("category") or UNCATEGORIZED),
            portion=str(payload.get("portion") or ""),
            nutrition_link=str(link) if link else None,
        )


@dataclass(frozen=True)
class MenuData:
    """Menu for one hall, date and meal period."""

    dining_hall: str
    date: str
    meal_period: str
    items: list[MenuItem]
    items_by_category: dict[str, list[MenuItem]]
    timestamp: str

    @classmethod
    def build(
        cls,
        dining_hall: str,
        date: str,
        meal_period: str,
        items: list[MenuItem],
        timestamp: datetime | None = None,
    ) -> "MenuData":
        """Create menu data, grouping items by category in first-seen order."""
        moment = timestamp or datetime.now(tz=UTC)
        return cls(
            dining_hall=dining_hall,
            date=date,
            meal_period=meal_period,
            items=list(items),
            items_by_category=group_by_category(items),
            timestamp=moment.isoformat(),
        )

    def to_dict(self) -> dict[str, object]:
        """Return the JSON representation used by the HTTP API."""
        return {
            "diningHall": self.dining_hall,
            "date": self.date,
            "mealPeriod": self.meal_period,
            "menuItems": [item.to_dict() for item in self.items],
            "menuByCategory": {
                category: [item.to_dict() for item in items]
                for category, items in self.items_by_category.items()
            },
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "MenuData":
        """Rebuild menu data from its JSON representation."""
        raw_items = payload.get("menuItems") or []
        items = [
            MenuItem.from_dict(raw)
            for raw in raw_items
            if isinstance(raw, dict)
        ]
        return cls(
            dining_hall=str(payload.get("diningHall", "")),
            date=str(payload.get("date", "")),
            meal_period=str(payload.get("mealPeriod", "")),
            items=items,
            items_by_category=group_by_category(items),
            timestamp=str(payload.get("timestamp") or datetime.now(tz=UTC).isoformat()),
        )


def group_by_category(items: list[MenuItem]) -> dict[str, list[MenuItem]]:
    """Group items by category, keeping categories in order of first appearance."""
    grouped: dict[str, list[MenuItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped
