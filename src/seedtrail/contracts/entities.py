"""Trackable entity type descriptors.

An EntityType is the registration-time description of one model: its
primary key, its belongs-to references and (optionally) its candidate key.
It carries no behaviour; the registry, resolver and tracker interpret it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class BelongsTo:
    """A belongs-to reference from one entity type to another.

    Attributes:
        foreign_key: Attribute on the owning entity holding the target's row id
        target: Target entity type name. None for polymorphic references,
            whose target is read at runtime from type_attribute.
        name: Relationship attribute name, when the record store exposes one.
            Generated scripts assign through it instead of the raw foreign key.
        polymorphic: True when the target type is decided per row
        type_attribute: Discriminator attribute naming the target type
        target_model: Model class the target was reflected from. The registry
            renames target to whatever name that model is registered under.
    """

    foreign_key: str
    target: str | None = None
    name: str | None = None
    polymorphic: bool = False
    type_attribute: str | None = None
    target_model: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.polymorphic:
            if self.type_attribute is None:
                raise ValueError(f"Polymorphic reference '{self.foreign_key}' requires a type_attribute")
        elif self.target is None:
            raise ValueError(f"Reference '{self.foreign_key}' requires a target type")


@dataclass(frozen=True, slots=True)
class EntityType:
    """Registration-time description of a trackable entity type.

    Attributes:
        name: Unique type name (stored in record_tags.entity_type)
        primary_key: Surrogate identifier attribute
        references: Belongs-to references, in declaration order
        candidate_key: Explicit candidate key attributes, or None to use
            the registry's default candidate key
        import_path: "module:qualname" used by generated scripts to import
            the model; None renders the bare type name
        model: Opaque handle the record store uses to load rows of this type
    """

    name: str
    primary_key: str = "id"
    references: tuple[BelongsTo, ...] = ()
    candidate_key: tuple[str, ...] | None = None
    import_path: str | None = None
    model: Any = field(default=None, compare=False, repr=False)

    @property
    def is_polymorphic(self) -> bool:
        """True when any reference's target is decided at runtime."""
        return any(ref.polymorphic for ref in self.references)

    def dependencies(self) -> list[str]:
        """Target types this type depends on (non-polymorphic, non-self)."""
        targets: list[str] = []
        for ref in self.references:
            if ref.polymorphic or ref.target is None or ref.target == self.name:
                continue
            if ref.target not in targets:
                targets.append(ref.target)
        return targets

    def reference_for(self, attribute: str) -> BelongsTo | None:
        """Return the reference whose foreign key is `attribute`, if any."""
        for ref in self.references:
            if ref.foreign_key == attribute:
                return ref
        return None
