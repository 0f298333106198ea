"""
Content selector.

Picks the next item from the available candidates, either uniformly at
random or by weighted random choice favouring rarely shown, popular and
under-represented-category items (see scoring.py).

The empty-candidate case is not handled here: the registry hands that
to the rotation controller before calling select().
"""

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from bubbles.catalog.content_item import ContentItem
from bubbles.config import WeightedSelectionConfig
from bubbles.selection.scoring import (
    ScoreBreakdown,
    ScoringContext,
    compute_weights,
    score_breakdown,
    weighted_index,
)

logger = logging.getLogger(__name__)


class ContentSelector:
    """
    Uniform / weighted random selection over available items.

    The random source is injectable; it only needs a random() method
    returning floats in [0, 1). Every call draws fresh per-candidate
    random components, nothing is cached between calls.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random()
        # Weights computed by the most recent weighted selection (diagnostics)
        self.last_weights: Dict[str, float] = {}
        # (candidates, context, weights, draws) of that selection, replayed by last_breakdown()
        self._last_inputs: Optional[Tuple[Sequence[ContentItem], ScoringContext, WeightedSelectionConfig, List[float]]] = None

    def select(
        self,
        candidates: Sequence[ContentItem],
        context: ScoringContext,
        weights: WeightedSelectionConfig,
        weighted: bool = True,
    ) -> Optional[ContentItem]:
        """
        Select one candidate.

        Args:
            candidates: Available items (must not be mutated during the call)
            context: Scoring snapshot
            weights: Weight coefficients
            weighted: False for a uniform random pick

        Returns:
            The selected item, or None if there are no candidates
        """
        if not candidates:
            return None

        if not weighted:
            return self._uniform(candidates)

        draws = [self._rng.random() for _ in candidates]
        candidate_weights = compute_weights(candidates, context, weights, draws)
        self._last_inputs = (tuple(candidates), context, weights, draws)
        self.last_weights = {
            item.id: float(weight) for item, weight in zip(candidates, candidate_weights)
        }

        total_weight = float(candidate_weights.sum())
        if total_weight <= 0:
            logger.debug(f"[SELECTOR] All {len(candidates)} weights are zero, falling back to uniform pick")
            return self._uniform(candidates)

        r = self._rng.random() * total_weight
        index = weighted_index(candidate_weights, r)
        selected = candidates[index]

        logger.debug(
            f"[SELECTOR] Selected: {selected.id} ({selected.type}) "
            f"weight={candidate_weights[index]:.3f} of total={total_weight:.3f} "
            f"across {len(candidates)} candidates"
        )
        return selected

    def last_breakdown(self) -> List[ScoreBreakdown]:
        """
        Per-component scores behind the most recent weighted selection.

        Replays the stored draws, so the totals agree with last_weights.
        Empty before the first weighted selection or after clear().
        """
        if self._last_inputs is None:
            return []
        candidates, context, weights, draws = self._last_inputs
        return [
            score_breakdown(item, context, weights, draw)
            for item, draw in zip(candidates, draws)
        ]

    def clear(self) -> None:
        self.last_weights = {}
        self._last_inputs = None

    def score_candidates(
        self,
        candidates: Sequence[ContentItem],
        context: ScoringContext,
        weights: WeightedSelectionConfig,
    ) -> List[ScoreBreakdown]:
        """Per-component scores for each candidate, using fresh random draws."""
        return [
            score_breakdown(item, context, weights, self._rng.random())
            for item in candidates
        ]

    def _uniform(self, candidates: Sequence[ContentItem]) -> ContentItem:
        index = int(self._rng.random() * len(candidates))
        return candidates[min(index, len(candidates) - 1)]
