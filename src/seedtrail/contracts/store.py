"""RecordStore protocol for the tracked application's persistence layer.

The tracker, resolver and emitter never touch the application's database
directly. They go through this protocol, implemented for SQLAlchemy ORM
sessions by seedtrail.orm.SQLAlchemyRecordStore.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from seedtrail.contracts.entities import EntityType


@runtime_checkable
class RecordStore(Protocol):
    """Read access to live entities and their attributes."""

    def type_name(self, entity: Any) -> str:
        """Return the registered type name of a live entity."""
        ...

    def row_id(self, entity: Any) -> str:
        """Return the entity's current surrogate row id as text."""
        ...

    def has_attribute(self, entity: Any, attribute: str) -> bool:
        """Check whether the entity's type defines a persisted attribute."""
        ...

    def read(self, entity: Any, attribute: str) -> Any:
        """Read an attribute's current value."""
        ...

    def read_previous(self, entity: Any, attribute: str) -> Any:
        """Read an attribute's value as it was before the pending change.

        Returns the current value when the attribute did not change.
        """
        ...

    def find(self, entity_type: "EntityType", row_id: Any) -> Any | None:
        """Load a live entity by row id, or None if it no longer exists."""
        ...

    def attribute_names(self, entity_type: "EntityType") -> list[str]:
        """Return all persisted attribute names of a type, in declaration order."""
        ...

    def coerce(self, entity_type: "EntityType", attribute: str, value: Any) -> Any:
        """Convert a decoded candidate key value back to the attribute's type.

        Stored candidate keys are JSON text, so dates, decimals and UUIDs
        come back as strings.
        """
        ...
