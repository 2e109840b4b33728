# src/seedtrail/engine.py
"""SeedTrail: the public entry point wiring registry, tracker and emitter.

Typical use with SQLAlchemy:

    trail = SeedTrail.from_settings(settings, session=session)
    trail.register(Player)
    trail.register(InventoryItem)
    installation = install_tracking(trail, trail.registry)

    with trail.tracking():
        ...  # create / update / delete records, commit

    paths = trail.generate_seeds()
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from seedtrail.contracts.entities import EntityType
from seedtrail.contracts.enums import EventKind, TagKind
from seedtrail.contracts.store import RecordStore
from seedtrail.contracts.tags import Tag
from seedtrail.core.config import SeedTrailSettings, import_object, resolve_after_generate
from seedtrail.core.emitter import SeedEmitter, SeedFileGenerator
from seedtrail.core.logging import get_logger
from seedtrail.core.registry import Registry
from seedtrail.core.tags import TagDB
from seedtrail.core.tracker import TagTracker

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = get_logger(__name__)

CUSTOM_TAG_TYPE = "custom_tag"
CUSTOM_TAG_KEY = "n/a"


class SeedTrail:
    """Facade over one Registry, one tag store and one record store."""

    def __init__(
        self,
        *,
        registry: Registry,
        tag_db: TagDB,
        store: RecordStore,
        generator: SeedFileGenerator,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry
        self._tag_db = tag_db
        self._store = store
        self._tracker = TagTracker(registry, tag_db, store)
        self._emitter = SeedEmitter(registry, tag_db, store, generator, clock=clock)

    @classmethod
    def from_settings(
        cls,
        settings: SeedTrailSettings,
        *,
        session: Session | None = None,
        store: RecordStore | None = None,
        tag_db: TagDB | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> Self:
        """Build a SeedTrail from validated settings.

        Models listed in settings.trackable are imported and registered.
        Exactly one of session (wrapped in SQLAlchemyRecordStore) or store
        must be supplied.

        Raises:
            ValueError: If neither or both of session and store are given
            ImportError: If a trackable model or the after_generate hook cannot be imported
        """
        if (session is None) == (store is None):
            raise ValueError("Provide exactly one of session or store")

        registry = Registry(
            default_candidate_key=settings.default_candidate_key,
            enabled=settings.enabled,
        )
        if store is None:
            from seedtrail.orm import SQLAlchemyRecordStore

            store = SQLAlchemyRecordStore(session, registry)  # type: ignore[arg-type]

        if tag_db is None:
            tag_db = TagDB(settings.tag_store.url, echo=settings.tag_store.echo)

        generator = SeedFileGenerator(
            settings.seed_path,
            template_file=settings.seed_template_file,
            after_generate=resolve_after_generate(settings),
        )
        trail = cls(registry=registry, tag_db=tag_db, store=store, generator=generator, clock=clock)
        for path in settings.trackable:
            trail.register(import_object(path))
        return trail

    # === Registration ===

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def tag_db(self) -> TagDB:
        return self._tag_db

    @property
    def store(self) -> RecordStore:
        return self._store

    def register(self, entity_type: EntityType | type[Any], *, name: str | None = None) -> EntityType:
        """Register a trackable type, reflecting it first if given a mapped class."""
        if not isinstance(entity_type, EntityType):
            from seedtrail.orm import entity_type_for_model

            entity_type = entity_type_for_model(entity_type, name=name)
        return self._registry.register(entity_type)

    # === Tracking toggle ===

    @property
    def enabled(self) -> bool:
        return self._registry.enabled

    def enable(self) -> None:
        self._registry.enable()

    def disable(self) -> None:
        self._registry.disable()

    @contextmanager
    def tracking(self) -> Iterator[Self]:
        """Enable tracking for the block, restoring the previous state after."""
        previous = self._registry.enabled
        self._registry.enable()
        try:
            yield self
        finally:
            if not previous:
                self._registry.disable()

    # === Events and queries ===

    def apply_event(self, entity: Any, event: EventKind | str) -> Tag | None:
        return self._tracker.apply_event(entity, event)

    def find_tags_for_types(self, *types: EntityType | str) -> list[Tag]:
        """Outstanding tags of the given types (registered or custom), oldest first."""
        names = [t if isinstance(t, str) else t.name for t in types]
        with self._tag_db.transaction() as tags:
            return tags.for_types(names)

    def find_tags_for_type(self, entity_type: EntityType | str) -> list[Tag]:
        return self.find_tags_for_types(entity_type)

    def record_custom_tag(
        self,
        record_type: str = CUSTOM_TAG_TYPE,
        candidate_key: str = CUSTOM_TAG_KEY,
        kind: TagKind = TagKind.TOUCHED,
    ) -> Tag:
        """Mark a resource that is not a tracked entity (settings, files, ...).

        Custom tags hold an opaque candidate key and are never emitted;
        find them with find_tags_for_type(record_type).
        """
        with self._tag_db.transaction() as tags:
            tag = tags.find_or_create_custom(record_type, kind, candidate_key)
        logger.debug("custom_tag_recorded", record_type=record_type, tag_id=tag.tag_id)
        return tag

    # === Generation ===

    def generate_seeds(self) -> list[Path]:
        """Generate seeds for every registered type and consume their tags."""
        return self._emitter.generate_seed_for_types()

    def generate_seed_for_type(self, entity_type: EntityType | str) -> list[Path]:
        """Generate seeds for one type and consume its tags."""
        return self._emitter.generate_seed_for_types([entity_type])

    def generate_seed_for_types(self, types: Iterable[EntityType | str]) -> list[Path]:
        return self._emitter.generate_seed_for_types(types)

    def close(self) -> None:
        self._tag_db.close()
