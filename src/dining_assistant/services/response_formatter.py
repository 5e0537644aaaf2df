"""Formatting of assistant responses into display nodes.

Responses follow the prompt convention ``**Item** (Calories: X, Protein: Yg,
Carbs: Zg, Fat: Wg)``.  Formatting runs in three passes:

1. ``normalize_response`` collapses punctuation artifacts,
2. ``tag_response`` rewrites recognised patterns into custom tags,
3. ``render_tagged`` walks the tag stream and builds display nodes.

Every tag type is optional; text that matches nothing becomes plain text.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from dining_assistant.domain.display import (
    Bullet,
    DisplayNode,
    FoodItem,
    FoodItemLabel,
    LineBreak,
    MealTotal,
    NutritionBadge,
    NutritionGroup,
    OptionHeader,
    ProteinTotal,
    Text,
)

_NAME = r"[\w &+'-]+"
_NUM = r"(\d+\.?\d*)"

_NORMALIZERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\(\s*\("), "("),
    (re.compile(r"\)\s*\)"), ")"),
    (re.compile(r",\s*,"), ","),
    (re.compile(r"\(\s*,\s*"), "("),
    (re.compile(r"\s*,\s*\)"), ")"),
    (re.compile(r"\*{3,}"), "**"),
    (re.compile(r"(?<!\S)\*\*\s*\*\*(?!\S)"), ""),
)

_OPTION = re.compile(r"\*\*Option (\d+):(.*?)\*\*")
_BOLD_PROTEIN = re.compile(r"\*\*(\d+\.?\d*g of protein)\*\*")
_BOLD_TOTAL = re.compile(r"\*\*((?:Meal )?Total):\*\*", re.IGNORECASE)
_LABEL = re.compile(rf"\*\*({_NAME}):\*\*")
_ITEM_WITH_NUTRITION = re.compile(rf"\*\*({_NAME})\*\*\s*\((Calories:[^)]+)\)")
_BARE_ITEM = re.compile(rf"\*\*({_NAME})\*\*")
_TOTAL_PROTEIN = re.compile(
    r"Total Protein:?\s*(\d+\.?\d*g)(?:\s*of protein)?", re.IGNORECASE
)
_NUTRITION_GROUP = re.compile(
    rf"\(Calories:\s*{_NUM}(?:g|cal)?(?:,\s*|\s+)"
    rf"Protein:\s*{_NUM}g?(?:,\s*|\s+)"
    rf"Carbs:\s*{_NUM}g?(?:,\s*|\s+)"
    rf"Fat:\s*{_NUM}g?\)"
)
_MEAL_TOTAL = re.compile(
    rf"(?:Meal )?Total:\s*Calories:?\s*{_NUM}(?:g|cal)?"
    rf"(?:,?\s*Protein:?\s*{_NUM}g?)?"
    rf"(?:,?\s*Carbs?:?\s*{_NUM}g?)?"
    rf"(?:,?\s*Fat:?\s*{_NUM}g?)?",
    re.IGNORECASE,
)

_TAG_NAMES = (
    "nutrition-badge",
    "nutrition-group",
    "nutrition-info",
    "food-option",
    "food-item-with-nutrition",
    "food-item",
    "protein-total",
    "meal-total",
    "line-break",
)
_TOKEN = re.compile(rf"(</?(?:{'|'.join(_TAG_NAMES)})\b[^>]*>)")
_TAG = re.compile(r"<(/?)([a-z-]+)([^>]*)>")
_ATTR = re.compile(r'([a-z-]+)="([^"]*)"')
_BULLET_PREFIX = re.compile(r"^[-*]\s+(.*)$", re.DOTALL)
_BULLET_MARKERS = {"-", "*", "•"}
_GROUP_TAGS = {"nutrition-group", "meal-total"}


@dataclass
class _Frame:
    name: str
    attrs: dict[str, str]
    start: int
    text: str = ""


def format_response(text: str) -> list[DisplayNode]:
    """Run the full normalize, tag and render pipeline."""
    return render_tagged(tag_response(normalize_response(text)))


def normalize_response(text: str) -> str:
    """Collapse doubled parentheses, commas and asterisks."""
    for pattern, replacement in _NORMALIZERS:
        text = pattern.sub(replacement, text)
    return text


def tag_response(text: str) -> str:
    """Rewrite recognised patterns into custom tags.

    Order matters: item-with-nutrition must run before the bare bold fallback.
    """
    text = _OPTION.sub(r"<food-option>Option \1:\2</food-option>", text)
    text = _BOLD_PROTEIN.sub(r"<protein-total>\1</protein-total>", text)
    text = _BOLD_TOTAL.sub(r"\1:", text)
    text = _LABEL.sub(r"<food-item>\1:</food-item>", text)
    text = _ITEM_WITH_NUTRITION.sub(
        r"<food-item-with-nutrition>\1</food-item-with-nutrition>"
        r"<nutrition-info>\2</nutrition-info>",
        text,
    )
    text = _BARE_ITEM.sub(
        r"<food-item-with-nutrition>\1</food-item-with-nutrition>", text
    )
    text = _TOTAL_PROTEIN.sub(r"<protein-total>\1 of protein</protein-total>", text)
    text = _NUTRITION_GROUP.sub(_badges_replacer("nutrition-group"), text)
    text = _MEAL_TOTAL.sub(_badges_replacer("meal-total"), text)
    return text.replace("\n", "<line-break>")


def _badges_replacer(tag: str) -> Callable[[re.Match[str]], str]:
    def replace(match: re.Match[str]) -> str:
        calories, protein, carbs, fat = match.groups()
        badges = [
            ("calories", calories, ""),
            ("protein", protein, "g"),
            ("carbs", carbs, "g"),
            ("fat", fat, "g"),
        ]
        inner = "".join(
            f'<nutrition-badge type="{kind}" value="{value}{unit}"></nutrition-badge>'
            for kind, value, unit in badges
            if value
        )
        return f"<{tag}>{inner}</{tag}>"

    return replace


def render_tagged(tagged: str) -> list[DisplayNode]:  # noqa: PLR0912
    """Walk a tagged response and assemble display nodes.

    Each open tag keeps its own text and the node index it opened at, so a
    tag nested inside another never steals the outer tag's text and the outer
    node is placed ahead of the nodes produced inside it.
    """
    nodes: list[DisplayNode] = []
    stack: list[_Frame] = []
    badges: list[NutritionBadge] = []
    pending_food: str | None = None
    tokens = [token for token in _TOKEN.split(tagged) if token]

    for index, token in enumerate(tokens):
        match = _TAG.fullmatch(token) if token.startswith("<") else None
        if match is None or match.group(2) not in _TAG_NAMES:
            if stack:
                stack[-1].text += token
            else:
                nodes.extend(_text_nodes(token))
            continue

        closing, name, raw_attrs = match.groups()
        if name == "line-break":
            if not closing:
                nodes.append(LineBreak())
            continue
        if not closing:
            stack.append(_Frame(name, dict(_ATTR.findall(raw_attrs)), len(nodes)))
            if name in _GROUP_TAGS:
                badges = []
            continue
        if not stack or stack[-1].name != name:
            continue

        frame = stack.pop()
        content = frame.text.strip()
        node: DisplayNode | None = None
        if name == "nutrition-badge":
            badge = NutritionBadge(
                type=frame.attrs.get("type", ""), value=frame.attrs.get("value", "")
            )
            if stack and stack[-1].name in _GROUP_TAGS:
                badges.append(badge)
            else:
                node = NutritionGroup(badges=(badge,))
        elif name == "nutrition-group":
            node = NutritionGroup(badges=tuple(badges))
            badges = []
        elif name == "meal-total":
            node = MealTotal(badges=tuple(badges))
            badges = []
        elif name == "food-option":
            node = OptionHeader(title=content)
        elif name == "food-item":
            node = FoodItemLabel(name=content.rstrip(":").strip())
        elif name == "food-item-with-nutrition":
            next_token = tokens[index + 1] if index + 1 < len(tokens) else ""
            if next_token == "<nutrition-info>":
                pending_food = content
            elif content:
                node = FoodItem(name=content)
        elif name == "nutrition-info":
            node = FoodItem(name=pending_food or "", badges=parse_nutrition_info(content))
            pending_food = None
        elif name == "protein-total":
            node = ProteinTotal(value=content.removesuffix(" of protein"))
        if node is not None:
            nodes.insert(frame.start, node)

    for frame in stack:
        if frame.text.strip():
            nodes.extend(_text_nodes(frame.text))
    return nodes


def parse_nutrition_info(text: str) -> tuple[NutritionBadge, ...]:
    """Split ``Calories: 120, Protein: 12g`` into badges."""
    badges = []
    for part in re.split(r",\s*", text):
        label, sep, value = part.partition(":")
        if not sep or not label.strip():
            continue
        badges.append(NutritionBadge(type=label.strip().lower(), value=value.strip()))
    return tuple(badges)


def _text_nodes(segment: str) -> list[DisplayNode]:
    head, *bullets = segment.split("•")
    nodes: list[DisplayNode] = []
    stripped = head.strip()
    if stripped and stripped not in _BULLET_MARKERS:
        bullet = _BULLET_PREFIX.match(stripped)
        if bullet:
            nodes.append(Bullet(text=bullet.group(1).strip()))
        else:
            nodes.append(Text(text=stripped))
    for part in bullets:
        if part.strip():
            nodes.append(Bullet(text=part.strip()))
    return nodes


def nodes_to_text(nodes: Iterable[DisplayNode]) -> str:
    """Flatten display nodes back into the markdown response convention."""
    lines: list[str] = []
    current: list[str] = []
    for node in nodes:
        if isinstance(node, LineBreak):
            lines.append(" ".join(current))
            current = []
        else:
            current.append(_node_text(node))
    lines.append(" ".join(current))
    return "\n".join(lines)


def _node_text(node: DisplayNode) -> str:  # noqa: PLR0911
    if isinstance(node, OptionHeader):
        return f"**{node.title}**"
    if isinstance(node, FoodItemLabel):
        return f"**{node.name}:**"
    if isinstance(node, FoodItem):
        if not node.badges:
            return f"**{node.name}**"
        return f"**{node.name}** ({_badge_list(node.badges)})"
    if isinstance(node, NutritionGroup):
        return f"({_badge_list(node.badges)})"
    if isinstance(node, MealTotal):
        return f"Total: {_badge_list(node.badges)}"
    if isinstance(node, ProteinTotal):
        return f"Total Protein: {node.value}"
    if isinstance(node, Bullet):
        return f"• {node.text}"
    if isinstance(node, Text):
        return node.text
    return ""


def _badge_list(badges: Iterable[NutritionBadge]) -> str:
    return ", ".join(f"{badge.type.capitalize()}: {badge.value}" for badge in badges)
