"""
Catalog module for the bubble registry.

This package contains the content descriptors and the adapter that
turns music database records into the registry's content catalog.
"""

from bubbles.catalog.content_item import (
    CONTENT_TYPES,
    ContentItem,
    ContentType,
    DisplayedEntry,
    PersonRole,
)
from bubbles.catalog.catalog_adapter import (
    ConsolidatedPerson,
    Person,
    Song,
    Tag,
    build_content_items,
)
from bubbles.catalog.person_consolidator import consolidate_persons

__all__ = [
    "CONTENT_TYPES",
    "ContentItem",
    "ContentType",
    "DisplayedEntry",
    "PersonRole",
    "ConsolidatedPerson",
    "Person",
    "Song",
    "Tag",
    "build_content_items",
    "consolidate_persons",
]
