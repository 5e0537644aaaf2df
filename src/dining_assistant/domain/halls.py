"""Dining hall registry and menu URL construction."""

from dataclasses import dataclass

_PORTAL_HOST = "https://menuportal23.dining.rutgers.edu"
_SCHOOL_NAME = "Rutgers+University+Dining"


class UnknownDiningHallError(KeyError):
    """Raised when a dining hall name is not in the registry."""


@dataclass(frozen=True)
class DiningHallConfig:
    """Static configuration for a dining hall menu feed."""

    name: str
    base_url: str
    location_num: str
    location_name: str
    meal_periods: tuple[str, ...]


DINING_HALLS: dict[str, DiningHallConfig] = {
    hall.name: hall
    for hall in (
        DiningHallConfig(
            name="Busch Dining Hall",
            base_url=f"{_PORTAL_HOST}/foodpronet/pickmenu.aspx",
            location_num="04",
            location_name="Busch+Dining+Hall",
            meal_periods=("Breakfast", "Lunch", "Dinner", "Knight+Room"),
        ),
        DiningHallConfig(
            name="Livingston Dining Commons",
            base_url=f"{_PORTAL_HOST}/foodpronet/pickmenu.aspx",
            location_num="03",
            location_name="Livingston+Dining+Commons",
            meal_periods=("Breakfast", "Lunch", "Dinner", "Knight+Room"),
        ),
        DiningHallConfig(
            name="The Atrium",
            base_url=f"{_PORTAL_HOST}/FoodPronet/pickmenu.aspx",
            location_num="13",
            location_name="The+Atrium",
            meal_periods=("Breakfast", "Lunch", "Dinner", "Late+Night"),
        ),
        DiningHallConfig(
            name="Neilson Dining Hall",
            base_url=f"{_PORTAL_HOST}/FoodPronet/pickmenu.aspx",
            location_num="05",
            location_name="Neilson+Dining+Hall",
            meal_periods=("Breakfast", "Lunch", "Dinner", "Knight+Room"),
        ),
    )
}


def get_hall(name: str) -> DiningHallConfig:
    """Return the registry entry for a hall or raise UnknownDiningHallError."""
    try:
        return DINING_HALLS[name]
    except KeyError:
        raise UnknownDiningHallError(name) from None


def build_menu_url(dining_hall: str, date: str, meal_period: str) -> str:
    """Compose the portal query URL for a hall, date and meal period.

    The date (M/D/YYYY) and meal period are embedded verbatim; the location
    name is already stored in its encoded form.
    """
    hall = get_hall(dining_hall)
    return (
        f"{hall.base_url}?locationNum={hall.location_num}"
        f"&locationName={hall.location_name}"
        f"&dtdate={date}"
        f"&activeMeal={meal_period}"
        f"&sName={_SCHOOL_NAME}"
    )


def display_period(meal_period: str) -> str:
    """Return a meal period label suitable for display."""
    return meal_period.replace("+", " ", 1)
