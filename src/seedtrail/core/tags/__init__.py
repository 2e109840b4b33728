# src/seedtrail/core/tags/__init__.py
"""Tag store: persisted record of pending changes, one tag per logical entity."""

from seedtrail.core.tags.database import SchemaCompatibilityError, TagDB
from seedtrail.core.tags.repositories import TagRepository
from seedtrail.core.tags.schema import metadata, record_tags_table
from seedtrail.core.tags.store import TagStore

__all__ = [
    "SchemaCompatibilityError",
    "TagDB",
    "TagRepository",
    "TagStore",
    "metadata",
    "record_tags_table",
]
