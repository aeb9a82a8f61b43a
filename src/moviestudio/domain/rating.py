"""Five-star rendering of a 0-10 vote average."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_HALF_STAR_THRESHOLD = 0.25
MAX_STARS = 5


@dataclass(frozen=True)
class StarRating:
    full: int
    half: int
    empty: int
    out_of_five: float | None

    @property
    def description(self) -> str:
        if self.out_of_five is None:
            return "No rating"
        return f"Rating: {self.out_of_five:.1f} out of 5 stars"


def star_rating(
    vote_average: float | None,
    *,
    half_star_threshold: float = DEFAULT_HALF_STAR_THRESHOLD,
) -> StarRating:
    """Convert a 0-10 score into full/half/empty stars (always 5 in total)."""
    if vote_average is None or vote_average < 0:
        return StarRating(full=0, half=0, empty=MAX_STARS, out_of_five=None)

    out_of_five = min(max(vote_average / 2.0, 0.0), float(MAX_STARS))
    full = math.floor(out_of_five)
    half = 1 if (out_of_five - full) >= half_star_threshold else 0
    empty = max(MAX_STARS - full - half, 0)
    return StarRating(full=full, half=half, empty=empty, out_of_five=out_of_five)
