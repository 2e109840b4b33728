"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/orm.
Settings classes are NOT re-exported here - import them from
seedtrail.core.config.

Import patterns:
    from seedtrail.contracts import EntityType, Tag, TagKind
    from seedtrail.core.config import SeedTrailSettings
"""

from seedtrail.contracts.descriptions import (
    LITERAL_IMPORTS,
    KeyDescription,
    KeyField,
    LiteralField,
    ReferenceField,
    render_literal,
)
from seedtrail.contracts.entities import BelongsTo, EntityType
from seedtrail.contracts.enums import EventKind, TagKind
from seedtrail.contracts.errors import (
    BadTrackingError,
    CyclicDependencyError,
    InvalidCandidateKeyError,
    ReferenceNotFoundError,
    SeedTrailError,
    TooManyTagsError,
    UnknownEntityTypeError,
)
from seedtrail.contracts.operations import DestroyOperation, SeedOperation, UpsertOperation
from seedtrail.contracts.store import RecordStore
from seedtrail.contracts.tags import (
    ByCandidateKey,
    ByRowId,
    CandidateKey,
    Identity,
    RawKey,
    StructuredKey,
    Tag,
)

__all__ = [
    "LITERAL_IMPORTS",
    "BadTrackingError",
    "BelongsTo",
    "ByCandidateKey",
    "ByRowId",
    "CandidateKey",
    "CyclicDependencyError",
    "DestroyOperation",
    "EntityType",
    "EventKind",
    "Identity",
    "InvalidCandidateKeyError",
    "KeyDescription",
    "KeyField",
    "LiteralField",
    "RawKey",
    "RecordStore",
    "ReferenceField",
    "ReferenceNotFoundError",
    "SeedOperation",
    "SeedTrailError",
    "StructuredKey",
    "Tag",
    "TagKind",
    "TooManyTagsError",
    "UnknownEntityTypeError",
    "UpsertOperation",
    "render_literal",
]
