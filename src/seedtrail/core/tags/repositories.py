"""Repository layer for tag records.

Handles the seam between SQLAlchemy rows (strings) and domain objects
(strict enum types, decoded candidate keys). Candidate keys are decoded
exactly once here. A tag_kind outside TagKind means the store holds data
we did not write - that is a crash, not a fallback.
"""

from typing import Any

from sqlalchemy.engine import Row as SARow

from seedtrail.contracts.enums import TagKind
from seedtrail.contracts.tags import Tag
from seedtrail.core.canonical import decode_candidate_key


class TagRepository:
    """Repository for Tag records."""

    def load(self, row: SARow[Any]) -> Tag:
        """Load Tag from database row.

        Converts tag_kind to TagKind and decodes the candidate key variant.
        """
        return Tag(
            tag_id=row.tag_id,
            entity_type=row.entity_type,
            kind=TagKind(row.tag_kind),  # Convert HERE
            row_id=row.row_id,
            candidate_key=decode_candidate_key(row.candidate_key),
            created_this_session=bool(row.created_this_session),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
