"""
Person consolidation for the content catalog.

The same person is often credited as lyricist, composer and arranger
across the catalog. Consolidation merges those credits by name so the
visualization shows one person bubble, carrying every role.
"""

import logging
from typing import Dict, Iterable, List, Set

from bubbles.catalog.catalog_adapter import ConsolidatedPerson, Song
from bubbles.catalog.content_item import PersonRole

logger = logging.getLogger(__name__)

ROLE_ORDER = ("lyricist", "composer", "arranger")


def _build_role_map(songs: Iterable[Song]) -> Dict[str, Dict[str, Set[str]]]:
    """Map person name -> role -> set of song ids, in first-credit order."""
    role_map: Dict[str, Dict[str, Set[str]]] = {}

    for song in songs:
        credits = (
            ("lyricist", song.lyricists),
            ("composer", song.composers),
            ("arranger", song.arrangers),
        )
        for role, names in credits:
            for name in names:
                if name not in role_map:
                    role_map[name] = {r: set() for r in ROLE_ORDER}
                role_map[name][role].add(song.id)

    return role_map


def _extract_roles(role_data: Dict[str, Set[str]]) -> List[PersonRole]:
    return [
        PersonRole(type=role, song_count=len(role_data[role]))
        for role in ROLE_ORDER
        if role_data[role]
    ]


def consolidate_persons(songs: Iterable[Song]) -> List[ConsolidatedPerson]:
    """
    Merge song credits into one ConsolidatedPerson per distinct name.

    total_related_count counts distinct songs, so a person who wrote both
    lyrics and music for a song counts it once.

    Args:
        songs: Song records to scan

    Returns:
        Consolidated persons in order of first appearance
    """
    role_map = _build_role_map(songs)
    persons: List[ConsolidatedPerson] = []

    for name, role_data in role_map.items():
        all_songs: Set[str] = set()
        for song_ids in role_data.values():
            all_songs.update(song_ids)

        persons.append(
            ConsolidatedPerson(
                name=name,
                roles=_extract_roles(role_data),
                total_related_count=len(all_songs),
                songs=sorted(all_songs),
            )
        )

    multi_role = sum(1 for p in persons if p.is_multi_role)
    logger.debug(f"[CATALOG] Consolidated {len(persons)} persons ({multi_role} multi-role)")
    return persons


def get_person_roles(person_name: str, songs: Iterable[Song]) -> List[PersonRole]:
    """Return the roles a person holds across songs (empty if never credited)."""
    role_data = _build_role_map(songs).get(person_name)
    if role_data is None:
        return []
    return _extract_roles(role_data)


def has_role(person: ConsolidatedPerson, role: str) -> bool:
    return any(r.type == role for r in person.roles)
