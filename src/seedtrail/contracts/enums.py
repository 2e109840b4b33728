"""Status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class TagKind(StrEnum):
    """Net effect recorded for one logical entity during a session.

    Stored in the database (record_tags.tag_kind).

    TOUCHED is reserved for custom tags (non-entity resources such as
    data files) and is never produced by a lifecycle event.
    """

    CREATED = "created"
    UPDATED = "updated"
    DESTROYED = "destroyed"
    TOUCHED = "touched"


class EventKind(StrEnum):
    """Lifecycle event reported by the record store after persistence."""

    CREATED = "created"
    UPDATED = "updated"
    DESTROYED = "destroyed"

    @property
    def tag_kind(self) -> TagKind:
        return TagKind(self.value)
