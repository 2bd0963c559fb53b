"""Search modes and their BM25 parameters."""

from dataclasses import dataclass
from enum import Enum


class SearchMode(str, Enum):
    BROAD = "broad"
    BALANCED = "balanced"
    PRECISE = "precise"

    @classmethod
    def parse(cls, value: "str | SearchMode | None") -> "SearchMode":
        """Coerce a raw value to a SearchMode (None means BALANCED).

        Raises:
            ValueError: If the value names no mode
        """
        if isinstance(value, SearchMode):
            return value
        if value is None:
            return cls.BALANCED
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid search mode '{value}', expected one of: {valid}") from e


@dataclass(frozen=True)
class BM25Params:
    """BM25 tuning pair.

    k1: term-frequency saturation (lower = repeated terms matter less)
    b: length normalization strength (lower = document length matters less)
    """

    k1: float
    b: float


BM25_PARAMS: dict[SearchMode, BM25Params] = {
    SearchMode.BROAD: BM25Params(k1=1.0, b=0.5),
    SearchMode.BALANCED: BM25Params(k1=1.2, b=0.75),
    SearchMode.PRECISE: BM25Params(k1=1.5, b=0.9),
}

# Fraction of the top score below which a result counts as noise.
# Only applied when a caller opts in.
MIN_SCORE_RATIO: dict[SearchMode, float] = {
    SearchMode.BROAD: 0.3,
    SearchMode.BALANCED: 0.7,
    SearchMode.PRECISE: 1.0,
}

# Ratios are scaled by this before use: broad keeps results >= 21% of the
# top score, balanced >= 49%, precise >= 70%.
SCORE_RATIO_SCALE = 0.7


def min_score_threshold(top_score: float, mode: SearchMode) -> float:
    """Absolute score threshold relative to the best match in a result set."""
    return top_score * MIN_SCORE_RATIO[mode] * SCORE_RATIO_SCALE
