"""Rating rules."""

from collections.abc import Iterable

MIN_RATING = 1
MAX_RATING = 5


def average_rating(ratings: Iterable[int]) -> float | None:
    """Mean rating rounded to one decimal, or ``None`` when nobody has rated."""
    values = list(ratings)
    if not values:
        return None
    return round(sum(values) / len(values), 1)
