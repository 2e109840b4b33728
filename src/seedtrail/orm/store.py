# src/seedtrail/orm/store.py
"""RecordStore implementation over a SQLAlchemy ORM session."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import Session
from sqlalchemy.types import TypeEngine

from seedtrail.contracts.entities import EntityType
from seedtrail.core.registry import Registry


class SQLAlchemyRecordStore:
    """Reads live entities and attributes through an ORM session.

    Type names come from the registry when the entity's class (or a base
    class) was registered under a custom name, otherwise the class name.
    """

    def __init__(self, session: Session, registry: Registry | None = None) -> None:
        self._session = session
        self._registry = registry

    @property
    def session(self) -> Session:
        return self._session

    def type_name(self, entity: Any) -> str:
        if self._registry is not None:
            names = {et.model: et.name for et in self._registry.entity_types if et.model is not None}
            for klass in type(entity).__mro__:
                if klass in names:
                    return names[klass]
        return type(entity).__name__

    def row_id(self, entity: Any) -> str:
        values = inspect(type(entity)).primary_key_from_instance(entity)
        return str(values[0])

    def has_attribute(self, entity: Any, attribute: str) -> bool:
        return attribute in inspect(type(entity)).column_attrs

    def read(self, entity: Any, attribute: str) -> Any:
        return getattr(entity, attribute)

    def read_previous(self, entity: Any, attribute: str) -> Any:
        # Only complete when the attribute has active_history (install_tracking sets it)
        history = inspect(entity).attrs[attribute].history
        if history.deleted:
            return history.deleted[0]
        return getattr(entity, attribute)

    def find(self, entity_type: EntityType, row_id: Any) -> Any | None:
        if row_id is None:
            return None
        model = self._model(entity_type)
        return self._session.get(model, _coerce_primary_key(model, row_id))

    def attribute_names(self, entity_type: EntityType) -> list[str]:
        return [prop.key for prop in inspect(self._model(entity_type)).column_attrs]

    def coerce(self, entity_type: EntityType, attribute: str, value: Any) -> Any:
        column_attrs = inspect(self._model(entity_type)).column_attrs
        if value is None or attribute not in column_attrs:
            return value
        return _coerce_value(column_attrs[attribute].columns[0].type, value)

    @staticmethod
    def _model(entity_type: EntityType) -> type[Any]:
        if entity_type.model is None:
            raise ValueError(f"Entity type '{entity_type.name}' was registered without a model")
        return entity_type.model  # type: ignore[no-any-return]


def _coerce_primary_key(model: type[Any], row_id: Any) -> Any:
    """Tags store row ids as text; convert back to the column's Python type."""
    if not isinstance(row_id, str):
        return row_id
    return _coerce_value(inspect(model).primary_key[0].type, row_id)


def _coerce_value(column_type: TypeEngine[Any], value: Any) -> Any:
    """Convert a JSON-decoded value to the Python type a column expects."""
    try:
        python_type = column_type.python_type
    except NotImplementedError:
        return value
    if isinstance(value, python_type):
        return value
    if issubclass(python_type, Enum):
        return python_type(value)
    if not isinstance(value, str):
        # JSON numbers: an int read back for a Float or Numeric column
        return python_type(value) if python_type in (float, Decimal) else value
    if python_type is bytes:
        return bytes.fromhex(value)
    if issubclass(python_type, datetime | date | time):
        return python_type.fromisoformat(value)
    return python_type(value)
