# src/seedtrail/core/tracker.py
"""TagTracker: merges lifecycle events into at most one tag per entity.

Transition table (existing tag x incoming event):

    existing    | created                 | updated              | destroyed
    ------------+-------------------------+----------------------+------------------------------
    none        | new created (this sess) | new updated          | new destroyed
    created     | BadTracking             | kind -> updated      | delete (cancels out)
    updated     | BadTracking             | kind -> updated      | delete if created this session,
                |                         |                      | else kind -> destroyed
    destroyed   | kind -> updated, new id | BadTracking          | BadTracking

The lookup and the resulting write run in one tag-store transaction, but
two concurrent events for the same entity can still both see "no tag".
Callers must serialize events per logical entity.

Known limitation: a cancelled create/update (followed by destroy in the
same session) leaves no trace. Side effects the entity caused outside its
tracked attributes are not recorded and are lost with the tag.
"""

from __future__ import annotations

from typing import Any

from seedtrail.contracts.entities import EntityType
from seedtrail.contracts.enums import EventKind, TagKind
from seedtrail.contracts.errors import (
    BadTrackingError,
    InvalidCandidateKeyError,
    TooManyTagsError,
)
from seedtrail.contracts.store import RecordStore
from seedtrail.contracts.tags import StructuredKey, Tag
from seedtrail.core.canonical import encode_candidate_key
from seedtrail.core.logging import get_logger
from seedtrail.core.registry import Registry
from seedtrail.core.tags import TagDB, TagStore

logger = get_logger(__name__)


class TagTracker:
    """Applies lifecycle events to the tag store."""

    def __init__(self, registry: Registry, db: TagDB, store: RecordStore) -> None:
        self._registry = registry
        self._db = db
        self._store = store

    def candidate_key_snapshot(self, entity: Any, entity_type: EntityType, event: EventKind) -> StructuredKey:
        """Capture the candidate key to store for an event.

        Updates fire after mutation, so they snapshot the pre-change values:
        the identity as last recorded. Creates and destroys snapshot the
        current values.

        Raises:
            InvalidCandidateKeyError: If the entity lacks a candidate key attribute
        """
        attributes = self._registry.candidate_key_for(entity_type)
        missing = [attr for attr in attributes if not self._store.has_attribute(entity, attr)]
        if missing:
            raise InvalidCandidateKeyError(entity_type.name, missing)

        read = self._store.read_previous if event is EventKind.UPDATED else self._store.read
        return StructuredKey({attr: read(entity, attr) for attr in attributes})

    def apply_event(self, entity: Any, event: EventKind | str) -> Tag | None:
        """Merge one lifecycle event into the entity's tag.

        Returns:
            The tag outstanding after the event, or None when tracking is
            disabled or the event cancelled the tag.

        Raises:
            UnknownEntityTypeError: If the entity's type is not registered
            InvalidCandidateKeyError: If the entity lacks a candidate key attribute
            TooManyTagsError: If more than one tag already matches the entity
            BadTrackingError: If the event is illegal for the existing tag
        """
        if not self._registry.enabled:
            return None
        event = EventKind(event)

        entity_type = self._registry.require(self._store.type_name(entity))
        candidate_key = self.candidate_key_snapshot(entity, entity_type, event)
        row_id = self._store.row_id(entity)

        with self._db.transaction() as tags:
            return self._transition(tags, entity_type, row_id, candidate_key, event)

    def _transition(
        self,
        tags: TagStore,
        entity_type: EntityType,
        row_id: str,
        candidate_key: StructuredKey,
        event: EventKind,
    ) -> Tag | None:
        matches = tags.find_open(entity_type.name, row_id) + tags.find_destroyed(entity_type.name, candidate_key)
        if len(matches) > 1:
            raise TooManyTagsError(entity_type.name, row_id, len(matches))

        log = logger.bind(entity_type=entity_type.name, row_id=row_id, event=event.value)

        if not matches:
            tag = tags.create(
                entity_type.name,
                event.tag_kind,
                row_id=row_id,
                candidate_key=candidate_key,
                created_this_session=event is EventKind.CREATED,
            )
            log.debug("tag_created", tag_id=tag.tag_id, kind=tag.kind.value)
            return tag

        existing = matches[0]
        log = log.bind(tag_id=existing.tag_id, prior=existing.kind.value)

        match existing.kind, event:
            case TagKind.CREATED, EventKind.UPDATED:
                tag = tags.update(existing, kind=TagKind.UPDATED)
            case TagKind.CREATED, EventKind.DESTROYED:
                tags.delete(existing)
                log.debug("tag_cancelled")
                return None
            case TagKind.UPDATED, EventKind.UPDATED:
                tag = tags.update(existing, kind=TagKind.UPDATED)
            case TagKind.UPDATED, EventKind.DESTROYED:
                if existing.created_this_session:
                    tags.delete(existing)
                    log.debug("tag_cancelled")
                    return None
                tag = tags.update(existing, kind=TagKind.DESTROYED)
            case TagKind.DESTROYED, EventKind.CREATED:
                # Re-created under the same candidate key: non-key attributes may
                # differ from the destroyed row, so replay it as an update.
                tag = tags.update(existing, kind=TagKind.UPDATED, row_id=row_id)
            case _:
                raise BadTrackingError(existing.kind.value, event.value, encode_candidate_key(candidate_key))

        log.debug("tag_updated", kind=tag.kind.value)
        return tag
