# src/seedtrail/orm/reflection.py
"""Reflect SQLAlchemy declarative models into EntityType descriptors.

Model-level declarations:

    class InventoryItem(Base):
        __candidate_key__ = ("player_id", "item_id")

    class Comment(Base):
        __candidate_key__ = ("commentable_type", "commentable_id", "reference")
        __polymorphic_references__ = (
            BelongsTo("commentable_id", polymorphic=True, type_attribute="commentable_type"),
        )

Many-to-one relationships become non-polymorphic references targeting the
related class's name. The registry renames the target when that class is
registered under a custom name.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import Mapper, RelationshipDirection

from seedtrail.contracts.entities import BelongsTo, EntityType


def _attribute_for_column(mapper: Mapper[Any], column: Any) -> str:
    return mapper.get_property_by_column(column).key


def primary_key_attribute(mapper: Mapper[Any]) -> str:
    """Attribute name of a single-column primary key.

    Raises:
        ValueError: If the model has a composite primary key
    """
    columns = mapper.primary_key
    if len(columns) != 1:
        raise ValueError(f"{mapper.class_.__name__} has a composite primary key; only single-column keys are tracked")
    return _attribute_for_column(mapper, columns[0])


def entity_type_for_model(model: type[Any], *, name: str | None = None) -> EntityType:
    """Build the EntityType for a mapped class.

    Args:
        model: SQLAlchemy mapped class
        name: Registered type name; defaults to the class name

    Raises:
        ValueError: On composite primary or foreign keys
    """
    mapper = inspect(model)

    references: list[BelongsTo] = []
    for relationship in mapper.relationships:
        if relationship.direction is not RelationshipDirection.MANYTOONE:
            continue
        local_columns = list(relationship.local_columns)
        if len(local_columns) != 1:
            raise ValueError(f"{model.__name__}.{relationship.key} uses a composite foreign key")
        references.append(
            BelongsTo(
                foreign_key=_attribute_for_column(mapper, local_columns[0]),
                target=relationship.mapper.class_.__name__,
                name=relationship.key,
                target_model=relationship.mapper.class_,
            )
        )
    references.extend(getattr(model, "__polymorphic_references__", ()))

    candidate_key = getattr(model, "__candidate_key__", None)
    if isinstance(candidate_key, str):
        candidate_key = (candidate_key,)
    elif candidate_key is not None:
        candidate_key = tuple(candidate_key)

    return EntityType(
        name=name or model.__name__,
        primary_key=primary_key_attribute(mapper),
        references=tuple(references),
        candidate_key=candidate_key,
        import_path=f"{model.__module__}:{model.__qualname__}",
        model=model,
    )
