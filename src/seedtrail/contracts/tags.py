"""Tag records and the identity/candidate-key variants they carry.

Candidate keys are stored as structured text. A stored value that does not
decode as structured text (legacy plain identifiers, file paths recorded by
custom tags) is kept verbatim as a RawKey. The variant is decided once, when
the row is loaded, and never re-interpreted afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from seedtrail.contracts.enums import TagKind


@dataclass(frozen=True, slots=True)
class StructuredKey:
    """Ordered attribute -> value mapping identifying an entity portably."""

    values: Mapping[str, Any]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __getitem__(self, attribute: str) -> Any:
        return self.values[attribute]

    def __str__(self) -> str:
        return ", ".join(f"{k}={v!r}" for k, v in self.values.items())


@dataclass(frozen=True, slots=True)
class RawKey:
    """Opaque candidate key stored as plain text."""

    text: str

    def __str__(self) -> str:
        return self.text


type CandidateKey = StructuredKey | RawKey


@dataclass(frozen=True, slots=True)
class ByRowId:
    """Identity of a live entity: its type and current row id."""

    entity_type: str
    row_id: str


@dataclass(frozen=True, slots=True)
class ByCandidateKey:
    """Identity of an entity known only by its candidate key (destroyed)."""

    entity_type: str
    candidate_key: StructuredKey


type Identity = ByRowId | ByCandidateKey


@dataclass(frozen=True, slots=True)
class Tag:
    """Net pending change for one logical entity within a session.

    Destroyed tags keep the row id the entity had when it was destroyed so
    references to it can still be resolved, but their identity is their
    candidate key.
    """

    tag_id: int
    entity_type: str
    kind: TagKind
    row_id: str | None
    candidate_key: CandidateKey
    created_this_session: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def identity(self) -> Identity:
        if self.kind is TagKind.DESTROYED and isinstance(self.candidate_key, StructuredKey):
            return ByCandidateKey(self.entity_type, self.candidate_key)
        if self.row_id is None:
            raise ValueError(f"Tag {self.tag_id} ({self.kind}) has neither a row id nor a structured candidate key")
        return ByRowId(self.entity_type, self.row_id)
