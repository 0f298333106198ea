"""
Shared pytest fixtures for registry contract tests.

Contract tests use test doubles (manual clock, scripted randomness) to
avoid wall-clock and random-seed dependencies. No environment variables
or real files are used unless a test sets them explicitly.
"""

import os
import random

import pytest

from bubbles.clock.registry_clock import ManualClock
from bubbles.tests.contracts.test_doubles import (
    ScriptedRandom,
    create_mixed_items,
    create_registry,
    create_song_items,
)


@pytest.fixture
def manual_clock():
    """Clock starting at t=1000ms so 'never displayed' is never confused with t=0."""
    return ManualClock(start_ms=1000.0)


@pytest.fixture
def scripted_random():
    return ScriptedRandom()


@pytest.fixture
def seeded_random():
    return random.Random(1234)


@pytest.fixture
def abc_registry(manual_clock, scripted_random):
    """Catalog {A, B, C} of songs, capacity 2, no cooldown, uniform selection."""
    return create_registry(
        create_song_items("A", "B", "C"),
        clock=manual_clock,
        rng=scripted_random,
        max_displayed_items=2,
        rotation_cooldown_ms=0,
        enable_weighted_selection=False,
    )


@pytest.fixture
def mixed_registry(manual_clock, seeded_random):
    """Mixed songs/persons/tags, capacity 4, 10s cooldown, weighted selection."""
    return create_registry(
        create_mixed_items(),
        clock=manual_clock,
        rng=seeded_random,
        max_displayed_items=4,
        rotation_cooldown_ms=10000,
    )


@pytest.fixture(autouse=True)
def isolate_registry_env(monkeypatch, tmp_path):
    """Keep BUBBLES_* variables and any local bubbles.env out of every test."""
    for name in list(os.environ):
        if name.startswith("BUBBLES_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("BUBBLES_ENV_FILE", str(tmp_path / "missing.env"))
