# src/seedtrail/core/resolver.py
"""CandidateKeyResolver: portable, recursive descriptions of entity identity.

Raw row ids are not stable across databases, so every foreign reference to
a trackable type is replaced by the target's own description:

    InventoryItem(player_id=7, item_id=3)
      -> player=find_by(session, Player, reference='p1'), item_id=3

(item_id stays literal because Item is not registered.)

When the referenced row no longer exists (destroyed earlier in the
session), its destroyed tag still knows the candidate key it had, keyed by
the row id it had. No live row and no destroyed tag means the reference is
broken and ReferenceNotFoundError aborts the description.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from seedtrail.contracts.descriptions import KeyDescription, KeyField, LiteralField, ReferenceField
from seedtrail.contracts.entities import BelongsTo, EntityType
from seedtrail.contracts.errors import (
    CyclicDependencyError,
    InvalidCandidateKeyError,
    ReferenceNotFoundError,
)
from seedtrail.contracts.store import RecordStore
from seedtrail.contracts.tags import ByCandidateKey, ByRowId, RawKey, StructuredKey, Tag
from seedtrail.core.registry import Registry
from seedtrail.core.tags import TagStore


def _present(value: Any) -> bool:
    return value is not None and value != ""


class CandidateKeyResolver:
    """Describes live entities, identities and tags without surrogate ids.

    Bound to one TagStore so destroyed-tag lookups see the same transaction
    as the caller (the emitter's generation pass).
    """

    def __init__(self, registry: Registry, store: RecordStore, tags: TagStore) -> None:
        self._registry = registry
        self._store = store
        self._tags = tags
        self._resolving: list[tuple[str, str]] = []

    def describe(self, subject: Any) -> KeyDescription:
        """Describe a live entity, an Identity, or a Tag."""
        match subject:
            case Tag():
                return self.describe(subject.identity)
            case ByRowId(entity_type=name, row_id=row_id):
                return self._describe_reference(self._registry.require(name), row_id, context=None)
            case ByCandidateKey(entity_type=name, candidate_key=candidate_key):
                entity_type = self._registry.require(name)
                return self.describe_attributes(entity_type, self._stored_values(entity_type, candidate_key))
            case _:
                return self.describe_entity(subject)

    def describe_entity(self, entity: Any) -> KeyDescription:
        """Describe a live entity by its current candidate key values.

        Raises:
            InvalidCandidateKeyError: If the entity lacks a candidate key attribute
        """
        entity_type = self._registry.require(self._store.type_name(entity))
        attributes = self._registry.candidate_key_for(entity_type)
        missing = [attr for attr in attributes if not self._store.has_attribute(entity, attr)]
        if missing:
            raise InvalidCandidateKeyError(entity_type.name, missing)
        values = {attr: self._store.read(entity, attr) for attr in attributes}
        return self.describe_attributes(entity_type, values, entity=entity)

    def describe_stored_key(self, tag: Tag) -> KeyDescription:
        """Describe the candidate key recorded on a tag.

        Raises:
            InvalidCandidateKeyError: If the tag holds an unstructured (raw) key
        """
        entity_type = self._registry.require(tag.entity_type)
        if isinstance(tag.candidate_key, RawKey):
            raise InvalidCandidateKeyError(entity_type.name, self._registry.candidate_key_for(entity_type))
        return self.describe_attributes(entity_type, self._stored_values(entity_type, tag.candidate_key))

    def describe_attributes(
        self,
        entity_type: EntityType,
        values: Mapping[str, Any],
        *,
        entity: Any = None,
    ) -> KeyDescription:
        """Describe an attribute mapping, resolving foreign references.

        Args:
            entity_type: Type the attributes belong to
            values: Attribute -> value, rendered in mapping order
            entity: Live entity the values were read from, if any. Used to
                read a polymorphic discriminator missing from `values`.
        """
        fields: list[KeyField] = []
        for attribute, value in values.items():
            ref = entity_type.reference_for(attribute)
            if ref is not None and _present(value):
                target = self._registry.get(self._target_type(entity_type, ref, values, entity))
                if target is not None:
                    nested = self._describe_reference(target, value, context=f"{entity_type.name}({dict(values)})")
                    if ref.name is not None and not ref.polymorphic:
                        fields.append(ReferenceField(ref.name, nested, via_relationship=True))
                    else:
                        fields.append(ReferenceField(ref.foreign_key, nested, via_relationship=False))
                    continue
            fields.append(LiteralField(attribute, value))
        return KeyDescription(entity_type.name, tuple(fields), entity_type.import_path)

    def _stored_values(self, entity_type: EntityType, candidate_key: StructuredKey) -> dict[str, Any]:
        """Candidate key values decoded from the tag store, converted back to attribute types."""
        return {attr: self._store.coerce(entity_type, attr, value) for attr, value in candidate_key.values.items()}

    def _target_type(self, entity_type: EntityType, ref: BelongsTo, values: Mapping[str, Any], entity: Any) -> str:
        if not ref.polymorphic:
            # Non-polymorphic references always carry a target (BelongsTo.__post_init__)
            return str(ref.target)
        type_attribute = str(ref.type_attribute)
        if type_attribute in values:
            return str(values[type_attribute])
        if entity is not None:
            return str(self._store.read(entity, type_attribute))
        raise InvalidCandidateKeyError(entity_type.name, [type_attribute])

    def _describe_reference(self, target: EntityType, row_id: Any, *, context: str | None) -> KeyDescription:
        marker = (target.name, str(row_id))
        if marker in self._resolving:
            cycle = [f"{name}({rid})" for name, rid in self._resolving[self._resolving.index(marker) :]]
            raise CyclicDependencyError([*cycle, f"{target.name}({row_id})"], what="Record references")

        self._resolving.append(marker)
        try:
            live = self._store.find(target, row_id)
            if live is not None:
                return self.describe_entity(live)

            # Likely destroyed earlier in the session; its tag remembers the key
            tag = self._tags.find_destroyed_by_row_id(target.name, row_id)
            if tag is None or isinstance(tag.candidate_key, RawKey):
                raise ReferenceNotFoundError(target.name, row_id, context=context)
            return self.describe_attributes(target, self._stored_values(target, tag.candidate_key))
        finally:
            self._resolving.pop()
