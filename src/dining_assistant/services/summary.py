"""Plain-text menu summaries used as LLM context."""

from dining_assistant.domain.halls import display_period
from dining_assistant.domain.menus import MenuData

DEFAULT_TRUNCATION_THRESHOLD = 8000
DEFAULT_ITEMS_PER_CATEGORY = 5


def format_menu_summary(menu: MenuData) -> str:
    """Render item names grouped by category, without nutrition numbers."""
    lines = [f"Menu at {menu.dining_hall} ({display_period(menu.meal_period)}):", ""]
    for category, items in menu.items_by_category.items():
        lines.append(f"{category}:")
        lines.extend(f"- {item.name}" for item in items)
        lines.append("")
    return "\n".join(lines) + "\n"


def truncate_menu_summary(
    summary: str,
    threshold: int = DEFAULT_TRUNCATION_THRESHOLD,
    per_category_limit: int = DEFAULT_ITEMS_PER_CATEGORY,
) -> str:
    """Cap item lines per category once a summary grows past the threshold.

    Category headers and blank separators are always kept.
    """
    if len(summary) <= threshold:
        return summary
    kept: list[str] = []
    items_in_category = 0
    for line in summary.split("\n"):
        if _is_category_line(line):
            kept.append(line)
            items_in_category = 0
        elif line.startswith("-"):
            if items_in_category < per_category_limit:
                kept.append(line)
                items_in_category += 1
        elif not line.strip():
            kept.append(line)
    return "\n".join(kept)


def split_menu_summary(summary: str) -> list[tuple[str, list[str]]]:
    """Recover ordered ``(category, item names)`` pairs from a summary."""
    sections: list[tuple[str, list[str]]] = []
    for index, line in enumerate(summary.split("\n")):
        if index == 0 and line.startswith("Menu at "):
            continue
        if _is_category_line(line):
            sections.append((line[:-1], []))
        elif line.startswith("- ") and sections:
            sections[-1][1].append(line[2:])
    return sections


def _is_category_line(line: str) -> bool:
    return line.endswith(":") and not line.startswith("-")
