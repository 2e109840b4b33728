"""Operation lists handed to the seed templating step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from seedtrail.contracts.descriptions import KeyDescription
from seedtrail.contracts.enums import TagKind


@dataclass(frozen=True, slots=True)
class UpsertOperation:
    """Find-or-create an entity, then set its non-identifier attributes.

    Attributes:
        tag_kind: Kind of the tag the operation was generated from
        lookup: Current candidate key of the live entity
        fallback: Candidate key stored on the tag when it was first recorded;
            used to find-or-initialize when lookup matches nothing
        attributes: Every non-primary-key attribute with its current value
    """

    tag_kind: TagKind
    lookup: KeyDescription
    fallback: KeyDescription
    attributes: KeyDescription

    action: ClassVar[str] = "upsert"

    @property
    def model_name(self) -> str:
        return self.lookup.model_name

    def import_paths(self) -> set[str]:
        return self.lookup.import_paths() | self.fallback.import_paths() | self.attributes.import_paths()


@dataclass(frozen=True, slots=True)
class DestroyOperation:
    """Find an entity by candidate key and destroy it if present."""

    lookup: KeyDescription

    action: ClassVar[str] = "destroy"

    @property
    def model_name(self) -> str:
        return self.lookup.model_name

    def import_paths(self) -> set[str]:
        return self.lookup.import_paths()


type SeedOperation = UpsertOperation | DestroyOperation
