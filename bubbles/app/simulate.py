"""
Frame-loop simulation for the bubble registry.

Stands in for the presentation layer: every simulated frame it retires
bubbles whose lifetime ended and spawns new ones while there is spare
capacity, exactly the way the real spawning loop drives the registry.
Useful for eyeballing selection balance and rotation behaviour from the
logs.

Run with: python -m bubbles [--frames N] [--seed S] ...
"""

import argparse
import logging
import random
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from bubbles.catalog.catalog_adapter import Song, Tag
from bubbles.catalog.person_consolidator import consolidate_persons
from bubbles.clock.registry_clock import ManualClock
from bubbles.config import RegistryConfig
from bubbles.registry.bubble_registry import BubbleRegistry, RegistryStats

logger = logging.getLogger(__name__)

DEMO_PEOPLE = [
    "Aki Mori", "Ben Carter", "Chie Ono", "Dana Reyes", "Eiji Sato",
    "Fumi Kato", "Gil Moreau", "Hana Ito", "Ivo Novak", "Jun Abe",
]
DEMO_TAGS = ["ballad", "anime", "live", "cover", "duet", "summer", "winter", "debut"]


@dataclass
class SimulationResult:
    frames: int
    spawned: int
    retired: int
    rejected: int
    exhausted_frames: int
    stats: RegistryStats


def build_demo_catalog(song_count: int, rng: random.Random) -> Tuple[List[Song], List[Tag]]:
    """Generate a synthetic catalog with overlapping credits and tags."""
    songs: List[Song] = []
    for index in range(song_count):
        songs.append(
            Song(
                id=f"song-{index:03d}",
                title=f"Demo Song {index + 1}",
                lyricists=rng.sample(DEMO_PEOPLE, rng.randint(1, 2)),
                composers=rng.sample(DEMO_PEOPLE, rng.randint(1, 2)),
                arrangers=rng.sample(DEMO_PEOPLE, rng.randint(0, 1)),
            )
        )

    tags: List[Tag] = []
    for index, name in enumerate(DEMO_TAGS):
        linked = [song.id for song in songs if rng.random() < 0.3]
        tags.append(Tag(id=f"tag-{index:02d}", name=name, songs=linked))

    return songs, tags


def run_simulation(
    registry: BubbleRegistry,
    clock: ManualClock,
    frames: int,
    frame_ms: float = 1000.0 / 60.0,
    lifetime_ms: float = 8000.0,
    spawn_per_frame: int = 1,
) -> SimulationResult:
    """
    Drive the registry through a spawn/retire frame loop.

    Args:
        registry: Initialized registry
        clock: The clock the registry reads; advanced once per frame
        frames: Number of frames to simulate
        frame_ms: Simulated frame duration
        lifetime_ms: How long each bubble stays on screen
        spawn_per_frame: Maximum bubbles spawned per frame

    Returns:
        SimulationResult with counters and final stats
    """
    active: Dict[str, float] = {}  # bubble_id -> expires_at
    spawned = retired = rejected = exhausted_frames = 0

    for _ in range(frames):
        now = clock.advance(frame_ms)

        for bubble_id in [b for b, expires_at in active.items() if expires_at <= now]:
            del active[bubble_id]
            registry.unregister_bubble(bubble_id)
            retired += 1

        for _ in range(spawn_per_frame):
            if registry.get_stats().displayed_content >= registry.config.max_displayed_items:
                break

            item = registry.get_next_unique_content()
            if item is None:
                exhausted_frames += 1
                break

            bubble_id = uuid.uuid4().hex
            if registry.register_bubble(item.id, bubble_id, item.type):
                active[bubble_id] = now + lifetime_ms
                spawned += 1
            else:
                rejected += 1
                break

    stats = registry.get_stats()
    logger.info(
        f"[SIMULATION] {frames} frames: spawned={spawned}, retired={retired}, rejected={rejected}, "
        f"exhausted_frames={exhausted_frames}, displayed={stats.displayed_content}, "
        f"cooling={stats.cooling_content}, rotation_cycle={stats.rotation_cycle}, "
        f"efficiency={stats.selection_efficiency:.2f}"
    )

    return SimulationResult(
        frames=frames,
        spawned=spawned,
        retired=retired,
        rejected=rejected,
        exhausted_frames=exhausted_frames,
        stats=stats,
    )


def main(args: Optional[List[str]] = None) -> SimulationResult:
    """
    Simulation entry point.

    Configuration comes from the environment (see bubbles.config); the
    command line controls the simulated workload.
    """
    parser = argparse.ArgumentParser(description="Simulate the bubble spawning loop against the registry")
    parser.add_argument("--frames", type=int, default=3600, help="Frames to simulate (default: 3600)")
    parser.add_argument("--frame-ms", type=float, default=1000.0 / 60.0, help="Frame duration in ms")
    parser.add_argument("--lifetime-ms", type=float, default=8000.0, help="Bubble lifetime in ms")
    parser.add_argument("--songs", type=int, default=40, help="Synthetic catalog size")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for catalog and selection")
    parsed = parser.parse_args(args)

    config = RegistryConfig.load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    rng = random.Random(parsed.seed)
    songs, tags = build_demo_catalog(parsed.songs, rng)

    clock = ManualClock()
    registry = BubbleRegistry(config=config, clock=clock, rng=rng)
    registry.initialize(songs, tags=tags, consolidated_persons=consolidate_persons(songs))

    return run_simulation(
        registry,
        clock,
        frames=parsed.frames,
        frame_ms=parsed.frame_ms,
        lifetime_ms=parsed.lifetime_ms,
    )


if __name__ == "__main__":
    main()
