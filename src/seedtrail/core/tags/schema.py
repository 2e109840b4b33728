# src/seedtrail/core/tags/schema.py
"""SQLAlchemy table definitions for the tag store.

Uses SQLAlchemy Core (not ORM) for explicit control over queries and so the
tag store never participates in the tracked application's ORM flushes.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    text,
)

# Shared metadata for all tables
metadata = MetaData()

ENTITY_TYPE_COLUMN_LENGTH = 128
ROW_ID_COLUMN_LENGTH = 64

record_tags_table = Table(
    "record_tags",
    metadata,
    Column("tag_id", Integer, primary_key=True, autoincrement=True),
    Column("entity_type", String(ENTITY_TYPE_COLUMN_LENGTH), nullable=False),
    # Kept on destroyed tags so references to the destroyed row can be resolved
    Column("row_id", String(ROW_ID_COLUMN_LENGTH)),
    Column("tag_kind", String(16), nullable=False),  # created, updated, destroyed, touched
    # JSON object in candidate key order, or a raw string for custom/legacy tags
    Column("candidate_key", Text, nullable=False),
    Column("created_this_session", Boolean, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    # At most one open tag per live entity. Destroyed tags are identified by
    # candidate key and may share a (reused) row id with a later live entity.
    Index(
        "ix_record_tags_open_entity",
        "entity_type",
        "row_id",
        unique=True,
        sqlite_where=text("tag_kind != 'destroyed'"),
        postgresql_where=text("tag_kind != 'destroyed'"),
    ),
    Index("ix_record_tags_type_kind", "entity_type", "tag_kind"),
)
