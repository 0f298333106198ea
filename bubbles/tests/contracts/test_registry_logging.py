"""
Contract tests for registry logging.

Tests verify the log lines operators rely on:
- Pool initialization summary (INFO)
- Forced rotation (INFO, tagged [ROTATION])
- Reported type mismatch (WARNING)
- Rejections stay at DEBUG and never raise
"""

import logging

from bubbles.tests.contracts.test_doubles import create_mixed_items, create_registry, create_song_items


def messages(caplog, level):
    return [r.getMessage() for r in caplog.records if r.levelno == level]


class TestInitializationLogging:
    """Tests for the initialization summary."""

    def test_initialize_logs_type_counts(self, caplog):
        """initialize() MUST log per-type counts at INFO."""
        with caplog.at_level(logging.INFO, logger="bubbles.registry.bubble_registry"):
            create_registry(create_mixed_items())

        info = messages(caplog, logging.INFO)
        assert any(
            "[REGISTRY] Content pool initialized: songs=2, persons=2, tags=2, total=6" in m for m in info
        ), f"Expected initialization summary, got {info}"

    def test_reset_logged(self, caplog):
        """reset() MUST log at INFO."""
        registry = create_registry(create_song_items("A"))
        with caplog.at_level(logging.INFO, logger="bubbles.registry.bubble_registry"):
            registry.reset()
        assert "[REGISTRY] Reset completed" in messages(caplog, logging.INFO)


class TestRotationLogging:
    """Tests for forced rotation logging."""

    def test_forced_rotation_logged_at_info(self, caplog, manual_clock):
        """Forced rotation MUST log one [ROTATION] line at INFO."""
        registry = create_registry(create_song_items("A"), clock=manual_clock, max_displayed_items=1)
        registry.register_bubble("A", "bubble-a", "song")
        manual_clock.advance(2500)

        with caplog.at_level(logging.INFO, logger="bubbles.selection.rotation"):
            registry.get_next_unique_content()

        info = messages(caplog, logging.INFO)
        assert len(info) == 1, f"Exactly one forced-rotation line expected, got {info}"
        assert info[0].startswith("[ROTATION] Forced rotation due to empty pool: reclaimed A")
        assert "bubble=bubble-a" in info[0]
        assert "displayed for 2500ms" in info[0]
        assert "rotation_cycle=1" in info[0]

    def test_rotation_disabled_does_not_log_info(self, caplog, manual_clock):
        """An exhausted pool with rotation disabled logs nothing at INFO."""
        registry = create_registry(
            create_song_items("A"),
            clock=manual_clock,
            max_displayed_items=1,
            enable_rotation_strategy=False,
        )
        registry.register_bubble("A", "bubble-a", "song")

        with caplog.at_level(logging.INFO, logger="bubbles.selection.rotation"):
            assert registry.get_next_unique_content() is None
        assert messages(caplog, logging.INFO) == []


class TestRegistrationLogging:
    """Tests for registration logging."""

    def test_type_mismatch_warns(self, caplog):
        """A reported type mismatch MUST log a WARNING."""
        registry = create_registry(create_song_items("A"))
        with caplog.at_level(logging.WARNING, logger="bubbles.registry.bubble_registry"):
            assert registry.register_bubble("A", "b1", "person") is True

        warnings = messages(caplog, logging.WARNING)
        assert len(warnings) == 1
        assert "reported type 'person' for A" in warnings[0]

    def test_rejections_log_at_debug_only(self, caplog):
        """Rejected registrations and unknown unregisters log only at DEBUG."""
        registry = create_registry(create_song_items("A"), max_displayed_items=1)
        registry.register_bubble("A", "b1", "song")

        with caplog.at_level(logging.DEBUG, logger="bubbles.registry.bubble_registry"):
            assert registry.register_bubble("A", "b2", "song") is False
            assert registry.register_bubble("missing", "b3", "song") is False
            registry.unregister_bubble("unknown-bubble")

        assert all(r.levelno == logging.DEBUG for r in caplog.records)
        debug = messages(caplog, logging.DEBUG)
        assert any("Rejected A: already displayed" in m for m in debug)
        assert any("not tracked" in m for m in debug)
