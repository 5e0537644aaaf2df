"""Tests for menu page extraction."""

from bs4 import BeautifulSoup

from dining_assistant.domain.menus import UNCATEGORIZED, MenuData
from dining_assistant.services.menu_extraction import (
    extract_menu_items,
    probe_category_header,
    probe_nutrition_link,
)
from tests.conftest import MENU_HTML


def test_extracts_items_with_nearest_preceding_category() -> None:
    items = extract_menu_items(MENU_HTML)

    assert [(item.name, item.category) for item in items] == [
        ("House Granola", UNCATEGORIZED),
        ("Scrambled Eggs", "BREAKFAST ENTREES"),
        ("Turkey Bacon", "BREAKFAST ENTREES"),
        ("Blueberry Muffin", "BAKERY"),
    ]


def test_extracts_portion_and_resolves_nutrition_link() -> None:
    items = {item.name: item for item in extract_menu_items(MENU_HTML)}

    eggs = items["Scrambled Eggs"]
    assert eggs.portion == "1 EACH"
    assert eggs.nutrition_link == (
        "https://menuportal23.dining.rutgers.edu/foodpronet/"
        "label.aspx?RecNumAndPort=061002*1"
    )
    assert items["Blueberry Muffin"].nutrition_link is None
    assert items["House Granola"].nutrition_link is None


def test_item_count_never_exceeds_fieldsets() -> None:
    fieldsets = MENU_HTML.count("<fieldset>")

    assert len(extract_menu_items(MENU_HTML)) <= fieldsets


def test_malformed_html_yields_no_items() -> None:
    assert extract_menu_items("") == []
    assert extract_menu_items("<fieldset><div class='col-1'>") == []
    assert extract_menu_items("<h3>-- ONLY A HEADER --</h3>") == []


def test_category_header_strips_decoration() -> None:
    header = BeautifulSoup("<h3>  -- SOUPS --  </h3>", "html.parser").h3

    assert probe_category_header(header) == "SOUPS"


def test_nutrition_link_ignores_other_anchors() -> None:
    block = BeautifulSoup(
        '<fieldset><div class="col-3"><a href="other.aspx">x</a>'
        '<a href="label.aspx?id=5">y</a></div></fieldset>',
        "html.parser",
    ).fieldset

    assert probe_nutrition_link(block) == "label.aspx?id=5"


def test_menu_data_groups_by_first_appearance() -> None:
    menu = MenuData.build(
        "Busch Dining Hall", "10/18/2026", "Breakfast", extract_menu_items(MENU_HTML)
    )

    assert list(menu.items_by_category) == [UNCATEGORIZED, "BREAKFAST ENTREES", "BAKERY"]
    grouped = [item for items in menu.items_by_category.values() for item in items]
    assert sorted(item.name for item in grouped) == sorted(item.name for item in menu.items)

    payload = menu.to_dict()
    assert payload["diningHall"] == "Busch Dining Hall"
    assert payload["menuItems"][1]["nutritionLink"].endswith("061002*1")
    assert MenuData.from_dict(payload).items == menu.items
