"""
Content Item Model for the bubble registry.

Defines the descriptors the registry hands to the presentation layer
(ContentItem) and the bookkeeping record for a visible bubble
(DisplayedEntry).
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

ContentType = Literal["song", "person", "tag"]

CONTENT_TYPE_SONG = "song"
CONTENT_TYPE_PERSON = "person"
CONTENT_TYPE_TAG = "tag"

CONTENT_TYPES: Tuple[str, ...] = (
    CONTENT_TYPE_SONG,
    CONTENT_TYPE_PERSON,
    CONTENT_TYPE_TAG,
)

PersonRoleType = Literal["lyricist", "composer", "arranger"]


@dataclass(frozen=True)
class PersonRole:
    """One credit role held by a person, with the number of songs in that role."""
    type: PersonRoleType
    song_count: int


@dataclass(frozen=True)
class ContentItem:
    """
    A selectable catalog unit (song, consolidated person, or tag).

    Instances are immutable snapshots. The registry keeps the catalog
    version (display_count=0, never displayed) in a permanent index and
    rehydrates the volatile fields on every read, so a descriptor can
    never be used to mutate registry state.

    Attributes:
        id: Stable unique content id
        type: Content category
        name: Display name
        related_count: Popularity input (number of related songs / credits)
        roles: Credit roles for multi-role persons (empty otherwise)
        last_displayed: Monotonic ms timestamp of the last registration, or None
        display_count: Number of times this item has been registered
    """
    id: str
    type: ContentType
    name: str
    related_count: int = 0
    roles: Tuple[PersonRole, ...] = field(default_factory=tuple)
    last_displayed: Optional[float] = None
    display_count: int = 0

    def __post_init__(self):
        if self.type not in CONTENT_TYPES:
            raise ValueError(f"Invalid content type: {self.type!r} (must be one of {CONTENT_TYPES})")
        if self.related_count < 0:
            raise ValueError(f"related_count must be >= 0, got {self.related_count}")


@dataclass(frozen=True)
class DisplayedEntry:
    """Bookkeeping for one visible bubble; exactly one per displayed content id."""
    content_id: str
    bubble_id: str
    type: ContentType
    timestamp: float  # monotonic ms at registration
