# tests/fixtures/store.py
"""Dictionary-backed RecordStore for tracker, resolver and emitter tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any

from seedtrail.contracts import EntityType


@dataclass
class Record:
    """A live row: type name, surrogate id and attribute values."""

    type_name: str
    id: int
    values: dict[str, Any]
    previous: dict[str, Any] = field(default_factory=dict)


class InMemoryRecordStore:
    """Minimal RecordStore. Ids come from one counter shared by all types."""

    def __init__(self) -> None:
        self._rows: dict[tuple[str, str], Record] = {}
        self._columns: dict[str, list[str]] = {}
        self._ids = count(1)

    def add(self, type_name: str, **values: Any) -> Record:
        record = Record(type_name, next(self._ids), dict(values))
        self._rows[(type_name, str(record.id))] = record
        columns = self._columns.setdefault(type_name, [])
        columns.extend(k for k in values if k not in columns)
        return record

    def change(self, record: Record, **values: Any) -> Record:
        """Mutate a record, keeping pre-change values as `previous`."""
        record.previous = {k: record.values.get(k) for k in values}
        record.values.update(values)
        return record

    def remove(self, record: Record) -> None:
        del self._rows[(record.type_name, str(record.id))]

    # RecordStore protocol

    def type_name(self, entity: Record) -> str:
        return entity.type_name

    def row_id(self, entity: Record) -> str:
        return str(entity.id)

    def has_attribute(self, entity: Record, attribute: str) -> bool:
        return attribute == "id" or attribute in entity.values

    def read(self, entity: Record, attribute: str) -> Any:
        if attribute == "id":
            return entity.id
        return entity.values[attribute]

    def read_previous(self, entity: Record, attribute: str) -> Any:
        if attribute in entity.previous:
            return entity.previous[attribute]
        return self.read(entity, attribute)

    def find(self, entity_type: EntityType, row_id: Any) -> Record | None:
        return self._rows.get((entity_type.name, str(row_id)))

    def attribute_names(self, entity_type: EntityType) -> list[str]:
        return ["id", *self._columns.get(entity_type.name, [])]

    def coerce(self, entity_type: EntityType, attribute: str, value: Any) -> Any:
        return value
