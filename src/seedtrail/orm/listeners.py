# src/seedtrail/orm/listeners.py
"""Mapper event hooks that feed ORM persistence events into the tracker.

after_insert, after_update and after_delete fire inside the application's
flush, immediately after the row was written. The tag store commits on its
own connection, so a tag written for a flush that is later rolled back
stays recorded.

before_delete loads candidate key attributes that expired at the last
commit, since after_delete runs when the row can no longer be read.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlalchemy import event, inspect
from sqlalchemy.orm import Mapper, object_session

from seedtrail.contracts.entities import EntityType
from seedtrail.contracts.enums import EventKind
from seedtrail.core.registry import Registry


class EventSink(Protocol):
    """Anything that accepts lifecycle events (SeedTrail, TagTracker)."""

    def apply_event(self, entity: Any, event: EventKind | str) -> Any: ...


@dataclass
class TrackingInstallation:
    """Handle for listeners registered by install_tracking()."""

    listeners: list[tuple[Any, str, Callable[..., Any]]] = field(default_factory=list)

    def listen(self, target: Any, identifier: str, fn: Callable[..., Any], **kwargs: Any) -> None:
        event.listen(target, identifier, fn, **kwargs)
        self.listeners.append((target, identifier, fn))

    def remove(self) -> None:
        while self.listeners:
            target, identifier, fn = self.listeners.pop()
            if event.contains(target, identifier, fn):
                event.remove(target, identifier, fn)


def install_tracking(
    sink: EventSink,
    registry: Registry,
    entity_types: Iterable[EntityType] | None = None,
) -> TrackingInstallation:
    """Register mapper events for each registered model.

    Args:
        sink: Receives apply_event(entity, kind) calls
        registry: Supplies candidate keys (for active_history) and models
        entity_types: Types to hook; defaults to every registered type with a model

    Returns:
        Handle to pass to uninstall_tracking()
    """
    installation = TrackingInstallation()

    def after_insert(mapper: Mapper[Any], connection: Any, target: Any) -> None:
        sink.apply_event(target, EventKind.CREATED)

    def after_update(mapper: Mapper[Any], connection: Any, target: Any) -> None:
        session = object_session(target)
        # after_update also fires for relationship-only changes with no UPDATE issued
        if session is not None and not session.is_modified(target, include_collections=False):
            return
        sink.apply_event(target, EventKind.UPDATED)

    def after_delete(mapper: Mapper[Any], connection: Any, target: Any) -> None:
        sink.apply_event(target, EventKind.DESTROYED)

    def keep_previous(target: Any, value: Any, oldvalue: Any, initiator: Any) -> Any:
        return value

    def load_before_delete(attributes: tuple[str, ...]) -> Callable[..., None]:
        def before_delete(mapper: Mapper[Any], connection: Any, target: Any) -> None:
            # Expired attributes cannot be loaded once the row is gone
            for attribute in attributes:
                getattr(target, attribute, None)

        return before_delete

    types = list(entity_types) if entity_types is not None else registry.entity_types
    for entity_type in types:
        model = entity_type.model
        if model is None:
            continue
        installation.listen(model, "after_insert", after_insert)
        installation.listen(model, "after_update", after_update)
        installation.listen(model, "after_delete", after_delete)
        candidate_key = registry.candidate_key_for(entity_type)
        installation.listen(model, "before_delete", load_before_delete(candidate_key))
        column_attrs = inspect(model).column_attrs
        for attribute in candidate_key:
            if attribute not in column_attrs:
                continue  # reported as InvalidCandidateKeyError when an event fires
            installation.listen(
                getattr(model, attribute),
                "set",
                keep_previous,
                retval=True,
                active_history=True,
            )

    return installation


def uninstall_tracking(installation: TrackingInstallation) -> None:
    """Remove every listener registered by install_tracking()."""
    installation.remove()
