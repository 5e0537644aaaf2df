"""Extraction of menu items from FoodPro menu pages.

The portal renders each category as an ``<h3>`` header followed by one
``<fieldset>`` per item.  Inside a fieldset the item name, portion and
nutrition link live in ``col-1``, ``col-2`` and ``col-3`` columns.  Every
probe below returns ``None`` on a miss so that layout drift degrades to
defaults instead of failing the whole page.
"""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from dining_assistant.domain.menus import UNCATEGORIZED, MenuItem

NUTRITION_PORTAL_BASE = "https://menuportal23.dining.rutgers.edu/foodpronet/"

_HEADER_DECORATION = re.compile(r"^--\s*|\s*--$")
_WHITESPACE = re.compile(r"\s+")


def extract_menu_items(
    html: str, nutrition_base_url: str = NUTRITION_PORTAL_BASE
) -> list[MenuItem]:
    """Parse a menu page into items tagged with their nearest preceding category."""
    soup = BeautifulSoup(html, "html.parser")
    items: list[MenuItem] = []
    current_category = UNCATEGORIZED
    for element in soup.find_all(["h3", "fieldset"]):
        if element.name == "h3":
            header = probe_category_header(element)
            if header:
                current_category = header
            continue
        name = probe_item_name(element)
        if not name:
            continue
        link = probe_nutrition_link(element)
        items.append(
            MenuItem(
                name=name,
                category=current_category,
                portion=probe_portion(element) or "",
                nutrition_link=(
                    urljoin(nutrition_base_url, link) if link is not None else None
                ),
            )
        )
    return items


def probe_category_header(element: Tag) -> str | None:
    """Return header text without ``--`` decoration, or None when empty."""
    text = _clean_text(element.get_text())
    text = _HEADER_DECORATION.sub("", text).strip()
    return text or None


def probe_item_name(block: Tag) -> str | None:
    """Return the item name from the ``col-1`` label."""
    return _column_label(block, "col-1")


def probe_portion(block: Tag) -> str | None:
    """Return the serving portion from the ``col-2`` label."""
    return _column_label(block, "col-2")


def probe_nutrition_link(block: Tag) -> str | None:
    """Return the relative ``label.aspx`` link from the ``col-3`` column."""
    column = block.select_one('div[class^="col-3"]')
    if column is None:
        return None
    for anchor in column.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if href.lower().startswith("label.aspx"):
            return href
    return None


def _column_label(block: Tag, column_class: str) -> str | None:
    label = block.select_one(f'div[class^="{column_class}"] label')
    if label is None:
        return None
    text = _clean_text(label.get_text())
    return text or None


def _clean_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text.replace("\xa0", " ")).strip()
