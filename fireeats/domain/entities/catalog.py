"""Fixed restaurant catalogue values (cities, categories, price labels)."""

CITIES: tuple[str, ...] = (
    "Albuquerque", "Arlington", "Atlanta", "Austin", "Baltimore", "Boston",
    "Charlotte", "Chicago", "Cleveland", "Colorado Springs", "Columbus",
    "Dallas", "Denver", "Detroit", "El Paso", "Fort Worth", "Fresno",
    "Houston", "Indianapolis", "Jacksonville", "Kansas City", "Las Vegas",
    "Long Beach", "Los Angeles", "Louisville", "Memphis", "Mesa", "Miami",
    "Milwaukee", "Nashville", "New York", "Oakland", "Oklahoma", "Omaha",
    "Philadelphia", "Phoenix", "Portland", "Raleigh", "Sacramento",
    "San Antonio", "San Diego", "San Francisco", "San Jose", "Tucson",
    "Tulsa", "Virginia Beach", "Washington",
)

CATEGORIES: tuple[str, ...] = (
    "Brunch", "Burgers", "Coffee", "Deli", "Dim Sum", "Indian", "Italian",
    "Mediterranean", "Mexican", "Pizza", "Ramen", "Sushi",
)

_PRICE_LABELS: dict[int, str] = {1: "$", 2: "$$", 3: "$$$"}


def price_string(price: int) -> str:
    """Return '$'..'$$$' for tiers 1-3, '' for anything else."""
    return _PRICE_LABELS.get(price, "")


def price_from_string(label: str) -> int | None:
    """Inverse of price_string; None for an unknown label."""
    for tier, text in _PRICE_LABELS.items():
        if text == label:
            return tier
    return None
