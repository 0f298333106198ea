"""
Rotation Controller for the bubble registry.

Handles the two time-driven transitions of the content pool:

- Cooldown promotion: cooling items become available again once
  rotation_cooldown_ms has elapsed since their last display. Checked
  lazily whenever content is requested; no timers.
- Forced rotation: when nothing is available, the longest-displayed
  item is reclaimed (cooldown bypassed) so the spawning loop always
  makes progress.
"""

import logging
from typing import List, Optional

from bubbles.catalog.content_item import ContentItem
from bubbles.pool.content_pool import ContentPool

logger = logging.getLogger(__name__)


class RotationController:
    """
    Manages forced rotation and cooldown promotion for a ContentPool.

    rotation_cycle counts forced rotations since the last reset.
    """

    def __init__(self, pool: ContentPool):
        """
        Initialize rotation controller.

        Args:
            pool: The content pool whose partitions this controller moves items between
        """
        self._pool = pool
        self.rotation_cycle: int = 0
        self.last_forced_content_id: Optional[str] = None

    def promote(self, now: float, cooldown_ms: float) -> List[str]:
        """
        Promote cooling items whose cooldown elapsed.

        Returns:
            Promoted content ids
        """
        return self._pool.promote_expired_cooling(now, cooldown_ms)

    def handle_empty_pool(self, now: float, enabled: bool = True) -> Optional[ContentItem]:
        """
        Reclaim the oldest displayed item when nothing is available.

        The reclaimed item goes straight to available (its bubble is
        no longer tracked; a later unregister for it is a no-op).

        Args:
            now: Current monotonic ms
            enabled: Whether the rotation strategy is enabled

        Returns:
            The reclaimed item rehydrated from the catalog, or None when
            rotation is disabled or nothing is displayed
        """
        if not enabled:
            logger.debug("[ROTATION] Pool exhausted and rotation disabled; nothing to spawn")
            return None

        oldest = self._pool.oldest_displayed()
        if oldest is None:
            logger.debug("[ROTATION] Pool exhausted and nothing displayed; catalog is empty")
            return None

        self._pool.force_release(oldest.content_id, now)
        self.rotation_cycle += 1
        self.last_forced_content_id = oldest.content_id

        logger.info(
            f"[ROTATION] Forced rotation due to empty pool: reclaimed {oldest.content_id} "
            f"(bubble={oldest.bubble_id}, displayed for {now - oldest.timestamp:.0f}ms, "
            f"rotation_cycle={self.rotation_cycle})"
        )

        return self._pool.get_item(oldest.content_id)

    def reset(self) -> None:
        self.rotation_cycle = 0
        self.last_forced_content_id = None
