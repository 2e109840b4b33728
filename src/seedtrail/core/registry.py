# src/seedtrail/core/registry.py
"""Registry: the explicit tracking state shared by tracker, resolver and emitter.

Constructed once at startup and passed by reference. Holds the tracking
toggle, every registered EntityType, and the dependency graph built from
them. Registration is the trackable capability marker: only registered
types are tracked, described recursively, and sequenced.

The enabled flag has no atomicity guarantee; it is meant for
single-threaded or externally synchronized use.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from seedtrail.contracts.entities import EntityType
from seedtrail.contracts.errors import UnknownEntityTypeError
from seedtrail.core.dag import DependencyGraph


class Registry:
    """Registered entity types, their dependency graph and the tracking toggle."""

    def __init__(self, *, default_candidate_key: str = "reference", enabled: bool = False) -> None:
        self._default_candidate_key = default_candidate_key
        self._enabled = enabled
        self._types: dict[str, EntityType] = {}
        self._graph = DependencyGraph()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    @property
    def default_candidate_key(self) -> str:
        return self._default_candidate_key

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    def register(self, entity_type: EntityType) -> EntityType:
        """Register a trackable type. Re-registering a name replaces it.

        References reflected from a model point at the name that model is
        registered under, whichever side is registered first.
        """
        entity_type = self._with_registered_targets(entity_type)
        self._types[entity_type.name] = entity_type
        self._graph.register(entity_type)

        if entity_type.model is not None:
            for name, other in list(self._types.items()):
                renamed = self._with_registered_targets(other)
                if renamed is not other:
                    self._types[name] = renamed
                    self._graph.register(renamed)
        return self._types[entity_type.name]

    def register_all(self, entity_types: Iterable[EntityType]) -> None:
        for entity_type in entity_types:
            self.register(entity_type)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def get(self, name: str) -> EntityType | None:
        return self._types.get(name)

    def require(self, name: str) -> EntityType:
        """Return a registered type.

        Raises:
            UnknownEntityTypeError: If the name was never registered
        """
        entity_type = self._types.get(name)
        if entity_type is None:
            raise UnknownEntityTypeError(name)
        return entity_type

    def is_trackable(self, name: str) -> bool:
        return name in self._types

    @property
    def entity_types(self) -> list[EntityType]:
        """Registered types in registration order."""
        return list(self._types.values())

    def candidate_key_for(self, entity_type: EntityType) -> tuple[str, ...]:
        """Candidate key attributes, falling back to the default key."""
        if entity_type.candidate_key:
            return entity_type.candidate_key
        return (self._default_candidate_key,)

    def seed_order(self) -> list[EntityType]:
        """Registered types ordered so dependencies precede dependents."""
        return [self._types[name] for name in self._graph.seed_order()]

    def resolve_types(self, types: Iterable[EntityType | str]) -> list[EntityType]:
        """Normalize a mix of names and EntityTypes into registered EntityTypes."""
        return [self.require(t) if isinstance(t, str) else self.require(t.name) for t in types]

    def _with_registered_targets(self, entity_type: EntityType) -> EntityType:
        names = {t.model: t.name for t in self._types.values() if t.model is not None}
        if entity_type.model is not None:
            names[entity_type.model] = entity_type.name

        references = tuple(
            replace(ref, target=names[ref.target_model])
            if ref.target_model is not None and ref.target_model in names and ref.target != names[ref.target_model]
            else ref
            for ref in entity_type.references
        )
        if references == entity_type.references:
            return entity_type
        return replace(entity_type, references=references)
