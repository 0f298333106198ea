"""
Content Pool for the bubble registry.

Authoritative partition of every catalog id into exactly one of:

- available: selectable
- displayed: owned by exactly one visible bubble
- cooling:   recently hidden, temporarily not selectable

The pool also owns the per-item volatile metadata (last displayed time,
display count, display history) and a permanent read-only catalog index
used to rehydrate descriptors. It performs no locking and no capacity
checks; the registry facade does both.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from bubbles.catalog.content_item import CONTENT_TYPES, ContentItem, ContentType, DisplayedEntry

logger = logging.getLogger(__name__)

STATE_AVAILABLE = "available"
STATE_DISPLAYED = "displayed"
STATE_COOLING = "cooling"


class ContentPool:
    """
    Partitioned content pool.

    All "now" arguments are monotonic milliseconds supplied by the caller,
    so the pool itself never reads a clock.
    """

    def __init__(self):
        self._catalog: Dict[str, ContentItem] = {}  # permanent read-only index
        # Dicts used as insertion-ordered sets
        self._available: Dict[str, None] = {}
        self._displayed: Dict[str, DisplayedEntry] = {}
        self._cooling: Dict[str, None] = {}

        self._last_displayed: Dict[str, float] = {}
        self._display_counts: Dict[str, int] = {}
        self._history: Dict[str, List[float]] = {}
        # Running totals over finished displays (hidden or force-released)
        self._display_duration_total: float = 0.0
        self._display_duration_count: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, items: Iterable[ContentItem]) -> None:
        """
        Clear all state and place every item into available.

        Re-initialization is a session reset: prior tracking is dropped.
        Volatile fields on the incoming items are ignored.
        """
        self.reset()
        for item in items:
            base = replace(item, last_displayed=None, display_count=0)
            if base.id in self._catalog:
                # Later entry wins; keep the id in a single partition
                del self._available[base.id]
            self._catalog[base.id] = base
            self._available[base.id] = None

        logger.debug(f"[POOL] Initialized with {len(self._catalog)} items")

    def reset(self) -> None:
        self._catalog.clear()
        self._available.clear()
        self._displayed.clear()
        self._cooling.clear()
        self._last_displayed.clear()
        self._display_counts.clear()
        self._history.clear()
        self._display_duration_total = 0.0
        self._display_duration_count = 0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def mark_displayed(self, content_id: str, bubble_id: str, content_type: ContentType, now: float) -> DisplayedEntry:
        """
        Move an item available -> displayed.

        Sets last_displayed, increments display_count and appends to history.

        Raises:
            KeyError: If the item is not currently available
        """
        if content_id not in self._available:
            raise KeyError(f"Content {content_id!r} is not available (state={self.state_of(content_id)})")

        del self._available[content_id]
        entry = DisplayedEntry(content_id=content_id, bubble_id=bubble_id, type=content_type, timestamp=now)
        self._displayed[content_id] = entry

        self._last_displayed[content_id] = now
        self._display_counts[content_id] = self._display_counts.get(content_id, 0) + 1
        self._history.setdefault(content_id, []).append(now)

        return entry

    def mark_hidden(self, content_id: str, now: float, cooldown_ms: float) -> Optional[str]:
        """
        Remove an item from displayed.

        The item goes to cooling while now - last_displayed < cooldown_ms,
        otherwise straight back to available.

        Returns:
            The new state, or None if the item was not displayed
        """
        entry = self._displayed.pop(content_id, None)
        if entry is None:
            return None

        self._record_display_duration(now - entry.timestamp)

        last_displayed = self._last_displayed.get(content_id, entry.timestamp)
        if now - last_displayed < cooldown_ms:
            self._cooling[content_id] = None
            return STATE_COOLING

        self._available[content_id] = None
        return STATE_AVAILABLE

    def force_release(self, content_id: str, now: float) -> Optional[DisplayedEntry]:
        """
        Move an item displayed -> available, bypassing the cooldown.

        Returns:
            The removed DisplayedEntry, or None if the item was not displayed
        """
        entry = self._displayed.pop(content_id, None)
        if entry is None:
            return None

        self._record_display_duration(now - entry.timestamp)
        self._available[content_id] = None
        return entry

    def promote_expired_cooling(self, now: float, cooldown_ms: float) -> List[str]:
        """
        Move every cooling item whose cooldown elapsed back to available.

        Evaluated lazily on query; there is no background timer.

        Returns:
            Promoted content ids, in cooling order
        """
        if not self._cooling:
            return []

        promoted = [
            content_id
            for content_id in self._cooling
            if now - self._last_displayed.get(content_id, now) >= cooldown_ms
        ]
        for content_id in promoted:
            del self._cooling[content_id]
            self._available[content_id] = None

        if promoted:
            logger.debug(f"[POOL] Promoted {len(promoted)} cooling item(s) to available")
        return promoted

    def _record_display_duration(self, duration_ms: float) -> None:
        self._display_duration_total += max(0.0, duration_ms)
        self._display_duration_count += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def state_of(self, content_id: str) -> Optional[str]:
        if content_id in self._available:
            return STATE_AVAILABLE
        if content_id in self._displayed:
            return STATE_DISPLAYED
        if content_id in self._cooling:
            return STATE_COOLING
        return None

    def contains(self, content_id: str) -> bool:
        return content_id in self._catalog

    def is_displayed(self, content_id: str) -> bool:
        return content_id in self._displayed

    def get_item(self, content_id: str) -> Optional[ContentItem]:
        """Rehydrate a descriptor from the catalog index plus volatile fields."""
        base = self._catalog.get(content_id)
        if base is None:
            return None
        return replace(
            base,
            last_displayed=self._last_displayed.get(content_id),
            display_count=self._display_counts.get(content_id, 0),
        )

    def available_items(self) -> List[ContentItem]:
        return [self.get_item(content_id) for content_id in self._available]

    def available_ids(self) -> List[str]:
        return list(self._available)

    def cooling_ids(self) -> List[str]:
        return list(self._cooling)

    def displayed_entries(self) -> List[DisplayedEntry]:
        return list(self._displayed.values())

    def find_by_bubble(self, bubble_id: str) -> Optional[DisplayedEntry]:
        for entry in self._displayed.values():
            if entry.bubble_id == bubble_id:
                return entry
        return None

    def oldest_displayed(self) -> Optional[DisplayedEntry]:
        """Displayed entry with the smallest timestamp; ties go to iteration order."""
        oldest: Optional[DisplayedEntry] = None
        for entry in self._displayed.values():
            if oldest is None or entry.timestamp < oldest.timestamp:
                oldest = entry
        return oldest

    def history(self, content_id: str) -> List[float]:
        return list(self._history.get(content_id, []))

    def finished_display_count(self) -> int:
        return self._display_duration_count

    def average_display_duration(self) -> float:
        """Mean on-screen time (ms) of finished displays, 0.0 before any finished."""
        if self._display_duration_count == 0:
            return 0.0
        return self._display_duration_total / self._display_duration_count

    def ever_displayed_count(self) -> int:
        return len(self._history)

    def displayed_type_counts(self) -> Dict[str, int]:
        counts = {content_type: 0 for content_type in CONTENT_TYPES}
        for entry in self._displayed.values():
            counts[entry.type] = counts.get(entry.type, 0) + 1
        return counts

    def count_by_type(self, content_type: str) -> Dict[str, int]:
        """Available / displayed / cooling counts for one content type."""
        return {
            STATE_AVAILABLE: sum(1 for cid in self._available if self._catalog[cid].type == content_type),
            STATE_DISPLAYED: sum(1 for e in self._displayed.values() if e.type == content_type),
            STATE_COOLING: sum(1 for cid in self._cooling if self._catalog[cid].type == content_type),
        }

    @property
    def total_count(self) -> int:
        return len(self._catalog)

    @property
    def available_count(self) -> int:
        return len(self._available)

    @property
    def displayed_count(self) -> int:
        return len(self._displayed)

    @property
    def cooling_count(self) -> int:
        return len(self._cooling)
