"""Portable, surrogate-id-free descriptions of entity identity.

A KeyDescription is what the resolver produces for an entity: its candidate
key attribute values, where every foreign reference to another trackable
type has been replaced by that target's own description. Rendering turns
the tree into Python source for generated seed scripts, e.g.

    player=find_by(session, Player, reference='p1'), item_id=3
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

# Names generated scripts must import for literals produced below
LITERAL_IMPORTS: tuple[str, ...] = (
    "from datetime import date, datetime",
    "from decimal import Decimal",
)


def render_literal(value: Any) -> str:
    """Render a primitive value as a Python literal expression."""
    if value is None:
        return "None"
    if isinstance(value, Enum):
        return render_literal(value.value)
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return repr(value)
    # datetime is a date subclass - check it first
    if isinstance(value, datetime):
        return f"datetime.fromisoformat({value.isoformat()!r})"
    if isinstance(value, date):
        return f"date.fromisoformat({value.isoformat()!r})"
    if isinstance(value, Decimal):
        return f"Decimal({str(value)!r})"
    return repr(value)


@dataclass(frozen=True, slots=True)
class LiteralField:
    """A candidate key attribute rendered as a literal value."""

    attribute: str
    value: Any

    def render(self) -> str:
        return f"{self.attribute}={render_literal(self.value)}"


@dataclass(frozen=True, slots=True)
class ReferenceField:
    """A foreign reference replaced by the target's own description.

    When via_relationship is True, attribute is the relationship name and the
    target record is assigned directly; otherwise attribute is the foreign key
    and the target's row id in the replay database is assigned.
    """

    attribute: str
    target: KeyDescription
    via_relationship: bool = True

    def render(self) -> str:
        lookup = self.target.render_lookup()
        if self.via_relationship:
            return f"{self.attribute}={lookup}"
        return f"{self.attribute}=row_id_of({lookup})"


type KeyField = LiteralField | ReferenceField


@dataclass(frozen=True, slots=True)
class KeyDescription:
    """Recursive description of an entity's identity."""

    entity_type: str
    fields: tuple[KeyField, ...]
    import_path: str | None = None

    @property
    def model_name(self) -> str:
        if self.import_path is None:
            return self.entity_type
        return self.import_path.rpartition(":")[2]

    def render(self) -> str:
        """Render the fields as keyword arguments."""
        return ", ".join(f.render() for f in self.fields)

    def render_lookup(self) -> str:
        """Render a find_by() call locating the described entity."""
        arguments = self.render()
        if not arguments:
            return f"find_by(session, {self.model_name})"
        return f"find_by(session, {self.model_name}, {arguments})"

    def literal_values(self) -> dict[str, Any]:
        """Attribute -> literal value for the fields that are not references."""
        return {f.attribute: f.value for f in self.fields if isinstance(f, LiteralField)}

    def walk(self) -> Iterator[KeyDescription]:
        """Yield this description and every nested target description."""
        yield self
        for f in self.fields:
            if isinstance(f, ReferenceField):
                yield from f.target.walk()

    def import_paths(self) -> set[str]:
        return {d.import_path for d in self.walk() if d.import_path is not None}
