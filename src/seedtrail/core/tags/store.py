# src/seedtrail/core/tags/store.py
"""TagStore: tag queries and mutations bound to one connection.

Obtained from TagDB.transaction(). Everything done through one TagStore
commits or rolls back together, which is what makes a tag transition
(lookup, then create/mutate/delete) and a generation pass (read tags,
write files, delete tags) atomic with respect to the tag store.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Connection, and_, delete, func, select, update

from seedtrail.contracts.enums import TagKind
from seedtrail.contracts.tags import (
    ByCandidateKey,
    ByRowId,
    CandidateKey,
    Identity,
    RawKey,
    StructuredKey,
    Tag,
)
from seedtrail.core.canonical import encode_candidate_key
from seedtrail.core.tags.repositories import TagRepository
from seedtrail.core.tags.schema import record_tags_table

_OPEN_KINDS = (TagKind.CREATED, TagKind.UPDATED)

# Sentinel distinguishing "leave row_id alone" from "set row_id to None"
_UNCHANGED: Any = object()


def now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


def _encode(candidate_key: CandidateKey | Mapping[str, Any] | str) -> str:
    if isinstance(candidate_key, RawKey):
        return candidate_key.text
    if isinstance(candidate_key, str):
        return candidate_key
    return encode_candidate_key(candidate_key)


class TagStore:
    """Tag reads and writes sharing one transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn
        self._repository = TagRepository()

    def _fetch(self, *conditions: Any) -> list[Tag]:
        query = select(record_tags_table).order_by(record_tags_table.c.tag_id)
        if conditions:
            query = query.where(and_(*conditions))
        return [self._repository.load(row) for row in self._conn.execute(query)]

    # === Lookups ===

    def get(self, tag_id: int) -> Tag | None:
        tags = self._fetch(record_tags_table.c.tag_id == tag_id)
        return tags[0] if tags else None

    def find_open(self, entity_type: str, row_id: str, kinds: Iterable[TagKind] = _OPEN_KINDS) -> list[Tag]:
        """Created/updated tags for a live entity."""
        return self._fetch(
            record_tags_table.c.entity_type == entity_type,
            record_tags_table.c.row_id == row_id,
            record_tags_table.c.tag_kind.in_([TagKind(k).value for k in kinds]),
        )

    def find_destroyed(self, entity_type: str, candidate_key: StructuredKey | Mapping[str, Any]) -> list[Tag]:
        """Destroyed tags whose stored candidate key equals `candidate_key`."""
        return self._fetch(
            record_tags_table.c.entity_type == entity_type,
            record_tags_table.c.tag_kind == TagKind.DESTROYED.value,
            record_tags_table.c.candidate_key == encode_candidate_key(candidate_key),
        )

    def find_destroyed_by_row_id(self, entity_type: str, row_id: Any) -> Tag | None:
        """Most recent destroyed tag recorded for a (now gone) row id."""
        tags = self._fetch(
            record_tags_table.c.entity_type == entity_type,
            record_tags_table.c.tag_kind == TagKind.DESTROYED.value,
            record_tags_table.c.row_id == str(row_id),
        )
        return tags[-1] if tags else None

    def find(self, identity: Identity) -> list[Tag]:
        """Outstanding tags matching an identity."""
        match identity:
            case ByRowId(entity_type=entity_type, row_id=row_id):
                return self.find_open(entity_type, row_id)
            case ByCandidateKey(entity_type=entity_type, candidate_key=candidate_key):
                return self.find_destroyed(entity_type, candidate_key)
            case _:
                raise TypeError(f"Unsupported identity: {identity!r}")

    def for_types(self, entity_types: Iterable[str], kinds: Iterable[TagKind] | None = None) -> list[Tag]:
        """All tags of the given types, oldest first, optionally filtered by kind."""
        conditions: list[Any] = [record_tags_table.c.entity_type.in_(list(entity_types))]
        if kinds is not None:
            conditions.append(record_tags_table.c.tag_kind.in_([TagKind(k).value for k in kinds]))
        return self._fetch(*conditions)

    def count(self) -> int:
        return self._conn.execute(select(func.count()).select_from(record_tags_table)).scalar_one()

    # === Mutations ===

    def create(
        self,
        entity_type: str,
        kind: TagKind,
        *,
        row_id: str | None,
        candidate_key: CandidateKey | Mapping[str, Any] | str,
        created_this_session: bool,
    ) -> Tag:
        timestamp = now()
        result = self._conn.execute(
            record_tags_table.insert().values(
                entity_type=entity_type,
                row_id=row_id,
                tag_kind=TagKind(kind).value,
                candidate_key=_encode(candidate_key),
                created_this_session=created_this_session,
                created_at=timestamp,
                updated_at=timestamp,
            )
        )
        tag_id = result.inserted_primary_key[0]
        tag = self.get(tag_id)
        if tag is None:
            raise RuntimeError(f"Tag {tag_id} vanished immediately after insert")
        return tag

    def update(self, tag: Tag, *, kind: TagKind, row_id: str | None = _UNCHANGED) -> Tag:
        """Change a tag's kind (and optionally its row id), refreshing updated_at."""
        values: dict[str, Any] = {"tag_kind": TagKind(kind).value, "updated_at": now()}
        if row_id is not _UNCHANGED:
            values["row_id"] = row_id
        self._conn.execute(update(record_tags_table).where(record_tags_table.c.tag_id == tag.tag_id).values(**values))
        refreshed = self.get(tag.tag_id)
        if refreshed is None:
            raise RuntimeError(f"Tag {tag.tag_id} vanished during update")
        return refreshed

    def delete(self, tag: Tag) -> None:
        self._conn.execute(delete(record_tags_table).where(record_tags_table.c.tag_id == tag.tag_id))

    def delete_for_types(self, entity_types: Iterable[str]) -> int:
        """Delete every tag belonging to the given types. Returns rows deleted."""
        result = self._conn.execute(delete(record_tags_table).where(record_tags_table.c.entity_type.in_(list(entity_types))))
        return result.rowcount

    def find_or_create_custom(self, record_type: str, kind: TagKind, candidate_key: str) -> Tag:
        """Find or create a tag for a non-entity resource."""
        existing = self._fetch(
            record_tags_table.c.entity_type == record_type,
            record_tags_table.c.tag_kind == TagKind(kind).value,
            record_tags_table.c.candidate_key == candidate_key,
        )
        if existing:
            return existing[0]
        return self.create(record_type, kind, row_id=None, candidate_key=candidate_key, created_this_session=False)
