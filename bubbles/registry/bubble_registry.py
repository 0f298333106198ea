"""
Bubble Registry

Single entry point the presentation layer uses to decide which content
a new bubble may show. Guarantees that no two simultaneously visible
bubbles represent the same content, bounds the number of visible
bubbles, and keeps the spawning loop from starving when every slot is
taken.

Expected outcomes (duplicate registration, full display set, exhausted
pool, unknown bubble) are reported through bool / None returns, never
exceptions: the driving animation loop must not stall mid-frame.
"""

import logging
import random
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from bubbles.catalog.catalog_adapter import ConsolidatedPerson, Person, Song, Tag, build_content_items
from bubbles.catalog.content_item import CONTENT_TYPES, ContentItem, ContentType, DisplayedEntry
from bubbles.clock.registry_clock import resolve_clock
from bubbles.config import RegistryConfig, WeightedUpdate
from bubbles.pool.content_pool import STATE_COOLING, ContentPool
from bubbles.selection.rotation import RotationController
from bubbles.selection.scoring import ScoreBreakdown, ScoringContext
from bubbles.selection.selector import ContentSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryStats:
    """
    Immutable statistics snapshot.

    per_type_counts counts available items per content type.
    """
    total_content: int
    available_content: int
    displayed_content: int
    cooling_content: int
    per_type_counts: Dict[str, int]
    rotation_cycle: int
    average_display_duration_ms: float = 0.0
    selection_efficiency: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BubbleRegistry:
    """
    Registry facade over the content pool, selector and rotation controller.

    One instance per visualization session, passed to whatever spawns and
    retires bubbles. Every public operation runs under one re-entrant lock,
    so moving the spawning loop onto another thread cannot let two
    registrations of the same content both succeed.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        clock=None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize registry.

        Args:
            config: Registry configuration (defaults to RegistryConfig())
            clock: Object with now_ms() returning monotonic milliseconds
            rng: Random source for selection (random.Random compatible)
        """
        self._config = config if config is not None else RegistryConfig()
        self._clock = resolve_clock(clock)
        self._lock = threading.RLock()

        self._pool = ContentPool()
        self._selector = ContentSelector(rng)
        self._rotation = RotationController(self._pool)

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(
        self,
        songs: Iterable[Song],
        persons: Iterable[Person] = (),
        tags: Iterable[Tag] = (),
        consolidated_persons: Optional[Sequence[ConsolidatedPerson]] = None,
    ) -> None:
        """
        Initialize the content pool from music database records.

        A non-empty consolidated_persons list replaces the raw persons, so
        same-named contributors become a single bubble.

        Re-initializing resets the session: displayed entries, cooldowns,
        history and rotation_cycle are all dropped.
        """
        items = build_content_items(songs, persons, tags, consolidated_persons)
        self.initialize_content_pool(items)

    def initialize_content_pool(self, items: Iterable[ContentItem]) -> None:
        """Initialize the content pool directly from ContentItems (session reset)."""
        with self._lock:
            self._pool.initialize(items)
            self._rotation.reset()
            self._selector.clear()

            counts = {t: self._pool.count_by_type(t)["available"] for t in CONTENT_TYPES}
            logger.info(
                f"[REGISTRY] Content pool initialized: songs={counts['song']}, "
                f"persons={counts['person']}, tags={counts['tag']}, total={self._pool.total_count}"
            )

    # ------------------------------------------------------------------
    # Bubble lifecycle
    # ------------------------------------------------------------------

    def register_bubble(self, content_id: str, bubble_id: str, content_type: ContentType) -> bool:
        """
        Register a newly materialized bubble.

        Returns False (state unchanged) when the content is already
        displayed, the display set is full, the bubble id is already in
        use, or the content is unknown or still cooling down.

        Args:
            content_id: Content the bubble shows
            bubble_id: Opaque handle of the bubble
            content_type: Content type reported by the presentation layer

        Returns:
            True if the bubble was registered
        """
        with self._lock:
            now = self._clock.now_ms()
            self._rotation.promote(now, self._config.rotation_cooldown_ms)

            if self._pool.is_displayed(content_id):
                logger.debug(f"[REGISTRY] Rejected {content_id}: already displayed")
                return False

            if self._pool.displayed_count >= self._config.max_displayed_items:
                logger.debug(
                    f"[REGISTRY] Rejected {content_id}: display set full "
                    f"({self._pool.displayed_count}/{self._config.max_displayed_items})"
                )
                return False

            if self._pool.find_by_bubble(bubble_id) is not None:
                logger.debug(f"[REGISTRY] Rejected {content_id}: bubble {bubble_id} already active")
                return False

            item = self._pool.get_item(content_id)
            if item is None:
                logger.debug(f"[REGISTRY] Rejected {content_id}: not in catalog")
                return False

            if self._pool.state_of(content_id) == STATE_COOLING:
                logger.debug(f"[REGISTRY] Rejected {content_id}: cooling down")
                return False

            if content_type != item.type:
                logger.warning(
                    f"[REGISTRY] Bubble {bubble_id} reported type {content_type!r} for {content_id}, "
                    f"catalog says {item.type!r}; using catalog type"
                )

            self._pool.mark_displayed(content_id, bubble_id, item.type, now)
            logger.debug(
                f"[REGISTRY] Registered {content_id} as bubble {bubble_id} "
                f"({self._pool.displayed_count}/{self._config.max_displayed_items} displayed)"
            )
            return True

    def unregister_bubble(self, bubble_id: str) -> None:
        """
        Release the content owned by a disappearing bubble.

        Unknown bubble ids (including bubbles reclaimed by forced rotation)
        are ignored.
        """
        with self._lock:
            entry = self._pool.find_by_bubble(bubble_id)
            if entry is None:
                logger.debug(f"[REGISTRY] Unregister ignored: bubble {bubble_id} not tracked")
                return

            now = self._clock.now_ms()
            new_state = self._pool.mark_hidden(entry.content_id, now, self._config.rotation_cooldown_ms)
            logger.debug(f"[REGISTRY] Unregistered bubble {bubble_id} ({entry.content_id} -> {new_state})")

    def is_content_displayed(self, content_id: str) -> bool:
        with self._lock:
            return self._pool.is_displayed(content_id)

    def get_next_unique_content(self) -> Optional[ContentItem]:
        """
        Choose the content for the next bubble.

        Promotes expired cooling items, then selects from available. With
        nothing available, forced rotation reclaims the oldest displayed
        item; None is returned only when rotation is disabled (or the
        catalog is empty).

        The returned item is not registered; call register_bubble() once
        the bubble exists.
        """
        with self._lock:
            now = self._clock.now_ms()
            self._rotation.promote(now, self._config.rotation_cooldown_ms)

            if self._pool.available_count == 0:
                return self._rotation.handle_empty_pool(now, self._config.enable_rotation_strategy)

            return self._selector.select(
                self._pool.available_items(),
                self._scoring_context(now),
                self._config.weighted,
                weighted=self._config.enable_weighted_selection,
            )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get_content(self, content_id: str) -> Optional[ContentItem]:
        with self._lock:
            return self._pool.get_item(content_id)

    def get_available_content(self) -> List[ContentItem]:
        with self._lock:
            self._rotation.promote(self._clock.now_ms(), self._config.rotation_cooldown_ms)
            return self._pool.available_items()

    def get_displayed_content(self) -> List[DisplayedEntry]:
        with self._lock:
            return self._pool.displayed_entries()

    def get_cooling_content(self) -> List[ContentItem]:
        with self._lock:
            self._rotation.promote(self._clock.now_ms(), self._config.rotation_cooldown_ms)
            return [self._pool.get_item(content_id) for content_id in self._pool.cooling_ids()]

    def get_content_history(self, content_id: str) -> List[float]:
        with self._lock:
            return self._pool.history(content_id)

    def get_content_count_by_type(self, content_type: ContentType) -> Dict[str, int]:
        """Available / displayed / cooling counts for one content type."""
        with self._lock:
            self._rotation.promote(self._clock.now_ms(), self._config.rotation_cooldown_ms)
            return self._pool.count_by_type(content_type)

    def get_stats(self) -> RegistryStats:
        with self._lock:
            self._rotation.promote(self._clock.now_ms(), self._config.rotation_cooldown_ms)

            total = self._pool.total_count
            efficiency = self._pool.ever_displayed_count() / total if total else 0.0

            return RegistryStats(
                total_content=total,
                available_content=self._pool.available_count,
                displayed_content=self._pool.displayed_count,
                cooling_content=self._pool.cooling_count,
                per_type_counts={t: self._pool.count_by_type(t)["available"] for t in CONTENT_TYPES},
                rotation_cycle=self._rotation.rotation_cycle,
                average_display_duration_ms=self._pool.average_display_duration(),
                selection_efficiency=efficiency,
            )

    def explain_weights(self) -> List[ScoreBreakdown]:
        """Score breakdown of every available item as of now (diagnostics)."""
        with self._lock:
            now = self._clock.now_ms()
            self._rotation.promote(now, self._config.rotation_cooldown_ms)
            return self._selector.score_candidates(
                self._pool.available_items(),
                self._scoring_context(now),
                self._config.weighted,
            )

    def get_debug_info(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "displayed_content": [asdict(e) for e in self._pool.displayed_entries()],
                "available_content": self._pool.available_ids(),
                "cooling_content": self._pool.cooling_ids(),
                "rotation_cycle": self._rotation.rotation_cycle,
                "last_forced_content_id": self._rotation.last_forced_content_id,
                "last_selection_weights": dict(self._selector.last_weights),
                "last_selection_breakdown": [asdict(b) for b in self._selector.last_breakdown()],
                "config": asdict(self._config),
            }

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    @property
    def config(self) -> RegistryConfig:
        return self._config

    def update_config(self, weighted: Optional[WeightedUpdate] = None, **changes: Any) -> RegistryConfig:
        """
        Apply a partial configuration update.

        Args:
            weighted: Replacement or partial mapping of weight coefficients
            **changes: RegistryConfig fields to replace

        Returns:
            The new configuration

        Raises:
            ValueError: If the update is invalid (previous config stays in effect)
        """
        with self._lock:
            self._config = self._config.with_updates(weighted=weighted, **changes)
            logger.info(f"[REGISTRY] Config updated: {self._config}")
            return self._config

    def reset(self) -> None:
        """Clear every partition, the catalog and history; zero rotation_cycle."""
        with self._lock:
            self._pool.reset()
            self._rotation.reset()
            self._selector.clear()
            logger.info("[REGISTRY] Reset completed")

    def _scoring_context(self, now: float) -> ScoringContext:
        return ScoringContext(
            now=now,
            rotation_cooldown_ms=self._config.rotation_cooldown_ms,
            displayed_type_counts=self._pool.displayed_type_counts(),
        )
