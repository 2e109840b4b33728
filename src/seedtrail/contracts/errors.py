"""Exception hierarchy for tracking, resolution and sequencing failures.

Every condition here is fatal and reflects a logic or integrity error the
caller must fix (a missing candidate key, a corrupted tag store, a cyclic
model graph). Nothing is retried.

The one non-fatal condition, a stored candidate key that is not valid
structured text, is not an exception at all: it decodes into a RawKey.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class SeedTrailError(Exception):
    """Base class for all seedtrail errors."""

    pass


class UnknownEntityTypeError(SeedTrailError, KeyError):
    """Raised when an event or lookup names a type that was never registered."""

    def __init__(self, entity_type: str) -> None:
        self.entity_type = entity_type
        super().__init__(f"Entity type '{entity_type}' is not registered for tracking")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class InvalidCandidateKeyError(SeedTrailError):
    """Raised when an entity lacks one of its type's candidate key attributes."""

    def __init__(self, entity_type: str, missing: Sequence[str]) -> None:
        self.entity_type = entity_type
        self.missing = tuple(missing)
        super().__init__(f"Invalid candidate key for '{entity_type}': missing attribute(s) {', '.join(self.missing)}")


class TooManyTagsError(SeedTrailError):
    """Raised when more than one outstanding tag matches a single entity.

    The tag store guarantees at most one tag per logical entity. Seeing more
    than one means the store was corrupted (or written concurrently for the
    same entity) and cannot be repaired locally.
    """

    def __init__(self, entity_type: str, row_id: str | None, found: int) -> None:
        self.entity_type = entity_type
        self.row_id = row_id
        self.found = found
        super().__init__(f"Found {found} tags for {entity_type}(row_id={row_id}); at most one may be outstanding")


class BadTrackingError(SeedTrailError):
    """Raised when an event is illegal for the entity's existing tag.

    Attributes:
        prior: Kind of the tag already outstanding
        attempted: Kind of the event being applied
        candidate_key: Candidate key snapshot taken for the event
    """

    def __init__(self, prior: str, attempted: str, candidate_key: Any) -> None:
        self.prior = prior
        self.attempted = attempted
        self.candidate_key = candidate_key
        super().__init__(f"found an existing '{prior}' tag for record while tagging '{attempted}' - {candidate_key}")


class ReferenceNotFoundError(SeedTrailError):
    """Raised when a foreign reference is neither live nor known through a destroyed tag."""

    def __init__(self, entity_type: str, row_id: Any, *, context: str | None = None) -> None:
        self.entity_type = entity_type
        self.row_id = row_id
        self.context = context
        message = f"Cannot resolve reference to {entity_type}(row_id={row_id})"
        if context is not None:
            message = f"{message} while processing {context}"
        super().__init__(message)


class CyclicDependencyError(SeedTrailError, ValueError):
    """Raised when entity references form a cycle.

    Attributes:
        cycle: Entity type names along the cycle, first repeated at the end
    """

    def __init__(self, cycle: Sequence[str], *, what: str = "Entity type dependencies") -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"{what} contain a cycle: {' -> '.join(self.cycle)}")
