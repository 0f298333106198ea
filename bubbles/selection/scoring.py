"""
Selection weight scoring.

Pure functions: no registry state is read or written here, and the only
randomness is the per-candidate draw passed in by the caller. That keeps
the weight formula testable on its own.

    weight = recency * Wr + popularity * Wp + type_balance * Wt + draw * Wd

clamped to >= 0.
"""

import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from bubbles.catalog.content_item import ContentItem
from bubbles.config import WeightedSelectionConfig

# log(related_count + 1) / log(POPULARITY_LOG_BASE); ~1.0 at 19 related songs, uncapped above
POPULARITY_LOG_BASE: float = 20.0
# Each of the three content types ideally fills a third of the screen
IDEAL_TYPE_RATIO: float = 1.0 / 3.0


@dataclass(frozen=True)
class ScoringContext:
    """Snapshot of everything the weight formula depends on besides the item."""
    now: float
    rotation_cooldown_ms: float
    displayed_type_counts: Mapping[str, int]

    @property
    def displayed_total(self) -> int:
        return sum(self.displayed_type_counts.values())


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-component scores of one candidate (for diagnostics)."""
    content_id: str
    recency_score: float
    popularity_score: float
    type_balance_score: float
    random_score: float
    total_weight: float


def recency_score(last_displayed: Optional[float], now: float, rotation_cooldown_ms: float) -> float:
    """
    1.0 if never displayed, else the elapsed fraction of the cooldown (capped at 1.0).

    A zero cooldown means nothing is ever "recent", so the score is 1.0.
    """
    if last_displayed is None:
        return 1.0
    if rotation_cooldown_ms <= 0:
        return 1.0
    elapsed = max(0.0, now - last_displayed)
    return min(1.0, elapsed / rotation_cooldown_ms)


def popularity_score(related_count: int) -> float:
    return math.log(related_count + 1) / math.log(POPULARITY_LOG_BASE)


def type_balance_score(content_type: str, displayed_type_counts: Mapping[str, int]) -> float:
    """Higher when the type is under-represented among displayed bubbles."""
    total = sum(displayed_type_counts.values())
    if total == 0:
        return 1.0
    observed_ratio = displayed_type_counts.get(content_type, 0) / total
    return max(0.0, 1.0 - abs(observed_ratio - IDEAL_TYPE_RATIO))


def score_breakdown(
    item: ContentItem,
    context: ScoringContext,
    weights: WeightedSelectionConfig,
    random_draw: float,
) -> ScoreBreakdown:
    recency = recency_score(item.last_displayed, context.now, context.rotation_cooldown_ms)
    popularity = popularity_score(item.related_count)
    balance = type_balance_score(item.type, context.displayed_type_counts)

    total = (
        recency * weights.recency_weight
        + popularity * weights.popularity_weight
        + balance * weights.type_balance_weight
        + random_draw * weights.random_weight
    )

    return ScoreBreakdown(
        content_id=item.id,
        recency_score=recency,
        popularity_score=popularity,
        type_balance_score=balance,
        random_score=random_draw,
        total_weight=max(0.0, total),
    )


def content_weight(
    item: ContentItem,
    context: ScoringContext,
    weights: WeightedSelectionConfig,
    random_draw: float,
) -> float:
    """Selection weight of one candidate, clamped to >= 0."""
    return score_breakdown(item, context, weights, random_draw).total_weight


def compute_weights(
    items: Sequence[ContentItem],
    context: ScoringContext,
    weights: WeightedSelectionConfig,
    random_draws: Sequence[float],
) -> np.ndarray:
    """
    Vectorised content_weight over a candidate list.

    Args:
        items: Candidates
        context: Scoring snapshot
        weights: Coefficients
        random_draws: One fresh draw in [0, 1) per candidate

    Returns:
        float64 array of non-negative weights, aligned with items
    """
    if len(items) != len(random_draws):
        raise ValueError(f"Expected {len(items)} random draws, got {len(random_draws)}")
    if not items:
        return np.zeros(0, dtype=np.float64)

    recency = np.array(
        [recency_score(item.last_displayed, context.now, context.rotation_cooldown_ms) for item in items],
        dtype=np.float64,
    )
    related = np.array([item.related_count for item in items], dtype=np.float64)
    popularity = np.log(related + 1.0) / math.log(POPULARITY_LOG_BASE)

    # Type balance only depends on the type, so score each type once
    balance_by_type = {}
    for item in items:
        if item.type not in balance_by_type:
            balance_by_type[item.type] = type_balance_score(item.type, context.displayed_type_counts)
    balance = np.array([balance_by_type[item.type] for item in items], dtype=np.float64)

    draws = np.asarray(random_draws, dtype=np.float64)

    total = (
        recency * weights.recency_weight
        + popularity * weights.popularity_weight
        + balance * weights.type_balance_weight
        + draws * weights.random_weight
    )
    return np.clip(total, 0.0, None)


def weighted_index(weights: np.ndarray, r: float) -> int:
    """
    Walk the weights subtracting each from r until the remainder is <= 0.

    Equivalent to finding the first cumulative sum >= r. Floating-point
    slack that walks off the end falls back to the last candidate.

    Args:
        weights: Non-negative weights with a positive sum
        r: Draw in [0, sum(weights))
    """
    cumulative = np.cumsum(weights)
    index = int(np.searchsorted(cumulative, r, side="left"))
    return min(index, len(weights) - 1)
