"""
Content Catalog Adapter for the bubble registry.

Turns the music database records (songs, persons, tags) into the flat
list of ContentItems the content pool is initialized with.

Person entries come from consolidated persons when any are supplied
(one bubble per distinct name, across lyricist/composer/arranger
credits); otherwise the raw person records are used as-is.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Sequence

from bubbles.catalog.content_item import (
    CONTENT_TYPE_PERSON,
    CONTENT_TYPE_SONG,
    CONTENT_TYPE_TAG,
    ContentItem,
    PersonRole,
)

logger = logging.getLogger(__name__)


@dataclass
class Song:
    """A song record from the music database."""
    id: str
    title: str
    lyricists: List[str] = field(default_factory=list)
    composers: List[str] = field(default_factory=list)
    arrangers: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @property
    def credit_count(self) -> int:
        """Number of credits across all roles (duplicates across roles count twice)."""
        return len(self.lyricists) + len(self.composers) + len(self.arrangers)


@dataclass
class Person:
    """A raw (single-role) person record."""
    id: str
    name: str
    type: Literal["lyricist", "composer", "arranger"]
    songs: List[str] = field(default_factory=list)  # song ids


@dataclass
class Tag:
    """A tag record linking a label to songs."""
    id: str
    name: str
    songs: List[str] = field(default_factory=list)  # song ids


@dataclass
class ConsolidatedPerson:
    """A person merged across every role they are credited with."""
    name: str
    roles: List[PersonRole] = field(default_factory=list)
    total_related_count: int = 0
    songs: List[str] = field(default_factory=list)  # distinct song ids

    @property
    def is_multi_role(self) -> bool:
        return len(self.roles) > 1


def song_to_content(song: Song) -> ContentItem:
    return ContentItem(
        id=song.id,
        type=CONTENT_TYPE_SONG,
        name=song.title,
        related_count=song.credit_count,
    )


def person_to_content(person: Person) -> ContentItem:
    return ContentItem(
        id=person.id,
        type=CONTENT_TYPE_PERSON,
        name=person.name,
        related_count=len(person.songs),
    )


def consolidated_person_to_content(person: ConsolidatedPerson) -> ContentItem:
    # Consolidated persons are keyed by name: that is what makes them one bubble
    return ContentItem(
        id=person.name,
        type=CONTENT_TYPE_PERSON,
        name=person.name,
        related_count=person.total_related_count,
        roles=tuple(person.roles),
    )


def tag_to_content(tag: Tag) -> ContentItem:
    return ContentItem(
        id=tag.id,
        type=CONTENT_TYPE_TAG,
        name=tag.name,
        related_count=len(tag.songs),
    )


def build_content_items(
    songs: Iterable[Song],
    persons: Iterable[Person] = (),
    tags: Iterable[Tag] = (),
    consolidated_persons: Optional[Sequence[ConsolidatedPerson]] = None,
) -> List[ContentItem]:
    """
    Build the content catalog from music database records.

    Args:
        songs: Song records
        persons: Raw person records (ignored when consolidated_persons is non-empty)
        tags: Tag records
        consolidated_persons: Optional consolidated persons; take priority over persons

    Returns:
        List of ContentItems in catalog order (songs, persons, tags).
        When two records share an id the later one replaces the earlier one.
    """
    catalog: Dict[str, ContentItem] = {}

    def add(item: ContentItem) -> None:
        previous = catalog.get(item.id)
        if previous is not None:
            logger.warning(
                f"[CATALOG] Duplicate content id {item.id!r}: "
                f"{previous.type} {previous.name!r} replaced by {item.type} {item.name!r}"
            )
            # Re-insert so the replacement takes the later catalog position
            del catalog[item.id]
        catalog[item.id] = item

    song_count = 0
    for song in songs:
        add(song_to_content(song))
        song_count += 1

    person_count = 0
    if consolidated_persons:
        for consolidated in consolidated_persons:
            add(consolidated_person_to_content(consolidated))
            person_count += 1
    else:
        for person in persons:
            add(person_to_content(person))
            person_count += 1

    tag_count = 0
    for tag in tags:
        add(tag_to_content(tag))
        tag_count += 1

    logger.debug(
        f"[CATALOG] Built catalog: songs={song_count}, persons={person_count} "
        f"(consolidated={bool(consolidated_persons)}), tags={tag_count}, total={len(catalog)}"
    )

    return list(catalog.values())
