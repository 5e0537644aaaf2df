"""Display nodes produced from formatted assistant responses."""

from dataclasses import asdict, dataclass
from typing import ClassVar


@dataclass(frozen=True)
class NutritionBadge:
    """A single nutrient value, e.g. ``protein: 12g``."""

    type: str
    value: str


@dataclass(frozen=True)
class _Node:
    kind: ClassVar[str] = "node"

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class OptionHeader(_Node):
    """Header for a numbered meal option."""

    kind: ClassVar[str] = "option"
    title: str


@dataclass(frozen=True)
class FoodItemLabel(_Node):
    """Bold ``Name:`` label introducing a food item."""

    kind: ClassVar[str] = "food-label"
    name: str


@dataclass(frozen=True)
class FoodItem(_Node):
    """Food item row with its nutrition badges, if any."""

    kind: ClassVar[str] = "food-item"
    name: str
    badges: tuple[NutritionBadge, ...] = ()


@dataclass(frozen=True)
class NutritionGroup(_Node):
    kind: ClassVar[str] = "nutrition-group"
    badges: tuple[NutritionBadge, ...] = ()


@dataclass(frozen=True)
class MealTotal(_Node):
    kind: ClassVar[str] = "meal-total"
    badges: tuple[NutritionBadge, ...] = ()


@dataclass(frozen=True)
class ProteinTotal(_Node):
    kind: ClassVar[str] = "protein-total"
    value: str


@dataclass(frozen=True)
class Bullet(_Node):
    kind: ClassVar[str] = "bullet"
    text: str


@dataclass(frozen=True)
class Text(_Node):
    kind: ClassVar[str] = "text"
    text: str


@dataclass(frozen=True)
class LineBreak(_Node):
    kind: ClassVar[str] = "line-break"


DisplayNode = (
    OptionHeader
    | FoodItemLabel
    | FoodItem
    | NutritionGroup
    | MealTotal
    | ProteinTotal
    | Bullet
    | Text
    | LineBreak
)
