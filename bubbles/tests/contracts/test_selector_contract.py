"""
Contract tests for ContentSelector.

Random draws are scripted so every selection is deterministic:
weighted selection consumes one draw per candidate plus one for the walk,
uniform selection consumes exactly one draw.
"""

import random

import pytest

from bubbles.config import WeightedSelectionConfig
from bubbles.selection.scoring import ScoringContext
from bubbles.selection.selector import ContentSelector
from bubbles.tests.contracts.test_doubles import ScriptedRandom, create_content_item, create_song_items

POPULARITY_ONLY = WeightedSelectionConfig(0.0, 1.0, 0.0, 0.0)
ALL_ZERO = WeightedSelectionConfig(0.0, 0.0, 0.0, 0.0)


def empty_context():
    return ScoringContext(now=1000.0, rotation_cooldown_ms=0.0, displayed_type_counts={})


class TestEmptyCandidates:
    """Tests for the no-candidate case."""

    def test_returns_none(self):
        """No candidates give None without drawing randomness."""
        rng = ScriptedRandom()
        selector = ContentSelector(rng)
        assert selector.select([], empty_context(), WeightedSelectionConfig()) is None
        assert selector.select([], empty_context(), WeightedSelectionConfig(), weighted=False) is None
        assert rng.calls == 0, "No randomness consumed without candidates"


class TestUniformSelection:
    """Tests for uniform selection (weighted=False)."""

    def test_uses_one_draw(self):
        """Uniform selection consumes exactly one draw."""
        rng = ScriptedRandom([0.0])
        selected = ContentSelector(rng).select(
            create_song_items("A", "B", "C"), empty_context(), WeightedSelectionConfig(), weighted=False
        )
        assert selected.id == "A"
        assert rng.calls == 1

    def test_high_draw_picks_last(self):
        """A draw near 1 picks the last candidate."""
        rng = ScriptedRandom([0.99])
        selected = ContentSelector(rng).select(
            create_song_items("A", "B", "C"), empty_context(), WeightedSelectionConfig(), weighted=False
        )
        assert selected.id == "C"

    def test_every_candidate_reachable(self):
        """Uniform selection can reach every candidate."""
        selector = ContentSelector(random.Random(7))
        candidates = create_song_items("A", "B", "C", "D")
        seen = {
            selector.select(candidates, empty_context(), WeightedSelectionConfig(), weighted=False).id
            for _ in range(200)
        }
        assert seen == {"A", "B", "C", "D"}


class TestWeightedSelection:
    """Tests for weighted random selection."""

    def test_walk_lands_on_only_positive_weight(self):
        """The weighted walk lands on the only positive weight."""
        candidates = [
            create_content_item("a", related_count=0),
            create_content_item("b", related_count=19),
            create_content_item("c", related_count=0),
        ]
        rng = ScriptedRandom([0.2, 0.2, 0.2, 0.5])
        selected = ContentSelector(rng).select(candidates, empty_context(), POPULARITY_ONLY)

        assert selected.id == "b"
        assert rng.calls == 4, "One draw per candidate plus one for the walk"

    def test_heavier_candidate_wins_more_often(self):
        """Heavier candidates win more often."""
        candidates = [
            create_content_item("light", related_count=1),
            create_content_item("heavy", related_count=100),
        ]
        selector = ContentSelector(random.Random(42))
        picks = [selector.select(candidates, empty_context(), POPULARITY_ONLY).id for _ in range(500)]
        assert picks.count("heavy") > picks.count("light")

    def test_all_zero_weights_fall_back_to_uniform(self):
        """Zero total weight falls back to a uniform pick."""
        rng = ScriptedRandom([0.1, 0.1, 0.1, 0.7])
        selected = ContentSelector(rng).select(create_song_items("A", "B", "C"), empty_context(), ALL_ZERO)

        assert selected is not None, "Zero total weight must not prevent selection"
        assert selected.id == "C"

    def test_fresh_draws_every_call(self):
        """Every weighted selection draws fresh random components."""
        rng = ScriptedRandom()
        selector = ContentSelector(rng)
        candidates = create_song_items("A", "B")

        selector.select(candidates, empty_context(), WeightedSelectionConfig())
        selector.select(candidates, empty_context(), WeightedSelectionConfig())
        assert rng.calls == 6

    def test_last_weights_recorded(self):
        """The last weighted selection's weights are kept for diagnostics."""
        selector = ContentSelector(ScriptedRandom())
        selector.select(create_song_items("A", "B"), empty_context(), WeightedSelectionConfig())
        assert set(selector.last_weights) == {"A", "B"}
        assert all(weight >= 0 for weight in selector.last_weights.values())


class TestScoreCandidates:
    """Tests for score_candidates() diagnostics."""

    def test_breakdown_per_candidate(self):
        """score_candidates() returns one breakdown per candidate."""
        rng = ScriptedRandom([0.25, 0.75])
        breakdowns = ContentSelector(rng).score_candidates(
            create_song_items("A", "B"), empty_context(), WeightedSelectionConfig()
        )
        assert [b.content_id for b in breakdowns] == ["A", "B"]
        assert [b.random_score for b in breakdowns] == [0.25, 0.75]


class TestLastBreakdown:
    """Tests for last_breakdown() and clear()."""

    def test_empty_before_any_weighted_selection(self):
        """No breakdown exists before the first weighted selection."""
        selector = ContentSelector(ScriptedRandom())
        selector.select(create_song_items("A"), empty_context(), WeightedSelectionConfig(), weighted=False)
        assert selector.last_breakdown() == []

    def test_replays_the_draws_of_the_last_selection(self):
        """Breakdown uses the same draws as the selection, so totals match last_weights."""
        rng = ScriptedRandom([0.4, 0.8, 0.5])
        selector = ContentSelector(rng)
        selector.select(create_song_items("A", "B"), empty_context(), WeightedSelectionConfig())

        breakdown = selector.last_breakdown()
        assert [b.random_score for b in breakdown] == [0.4, 0.8]
        assert [b.total_weight for b in breakdown] == \
            pytest.approx([selector.last_weights["A"], selector.last_weights["B"]])
        assert rng.calls == 3, "Reading the breakdown draws nothing"

    def test_clear_drops_diagnostics(self):
        """clear() empties both last_weights and the breakdown."""
        selector = ContentSelector(ScriptedRandom())
        selector.select(create_song_items("A", "B"), empty_context(), WeightedSelectionConfig())
        selector.clear()
        assert selector.last_weights == {}
        assert selector.last_breakdown() == []
