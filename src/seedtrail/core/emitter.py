# src/seedtrail/core/emitter.py
"""Seed script generation.

SeedEmitter turns outstanding tags into operation lists: upserts for
created/updated tags in sequencer order, destroys in reverse order. Each
type's operations go to one file via SeedFileGenerator, which renders a
Jinja2 template and writes it under the seed path.

A generation pass is one tag-store transaction. Tags of the processed
types are deleted only after every file was written; any failure rolls
the deletion back and removes the files written so far.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import jinja2

from seedtrail.contracts.descriptions import LITERAL_IMPORTS
from seedtrail.contracts.entities import EntityType
from seedtrail.contracts.enums import TagKind
from seedtrail.contracts.errors import ReferenceNotFoundError, SeedTrailError
from seedtrail.contracts.operations import DestroyOperation, SeedOperation, UpsertOperation
from seedtrail.contracts.store import RecordStore
from seedtrail.core.logging import get_logger
from seedtrail.core.registry import Registry
from seedtrail.core.resolver import CandidateKeyResolver
from seedtrail.core.tags import TagDB, TagStore

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
DEFAULT_TEMPLATE = "default.py.j2"

type AfterGenerateHook = Callable[[str, str], Any]


class SeedTemplateError(SeedTrailError):
    """Seed template could not be loaded or rendered."""


def plural_snake(name: str) -> str:
    """'InventoryItem' -> 'inventory_items', 'Category' -> 'categories'."""
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name).lower()
    if re.search(r"[^aeiou]y$", snake):
        return snake[:-1] + "ies"
    if snake.endswith(("s", "x", "z", "ch", "sh")):
        return snake + "es"
    return snake + "s"


def _model_import(import_path: str) -> str:
    module, _, qualname = import_path.partition(":")
    return f"from {module} import {qualname.split('.')[0]}"


class SeedFileGenerator:
    """Renders operation lists into timestamped seed scripts.

    Files are named "{timestamp}_{name}.py" so lexical order of the seed
    directory is replay order.
    """

    def __init__(
        self,
        seed_path: Path | str,
        *,
        template_file: Path | str | None = None,
        after_generate: AfterGenerateHook | None = None,
    ) -> None:
        """Initialize generator.

        Args:
            seed_path: Directory seed files are written to (created on demand)
            template_file: Jinja2 template replacing the packaged default
            after_generate: Called with (timestamp, name) after each file is written
        """
        self._seed_path = Path(seed_path)
        self._after_generate = after_generate

        if template_file is None:
            loader: jinja2.BaseLoader = jinja2.PackageLoader("seedtrail", "templates")
            template_name = DEFAULT_TEMPLATE
        else:
            template_path = Path(template_file)
            loader = jinja2.FileSystemLoader(template_path.parent)
            template_name = template_path.name

        self._env = jinja2.Environment(
            loader=loader,
            autoescape=False,  # Generating Python source, not HTML
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        try:
            self._template = self._env.get_template(template_name)
        except jinja2.TemplateError as e:
            raise SeedTemplateError(f"Cannot load seed template '{template_name}': {e}") from e

    @property
    def seed_path(self) -> Path:
        return self._seed_path

    def render(self, name: str, timestamp: str, operations: Sequence[SeedOperation]) -> str:
        import_paths: set[str] = set()
        for operation in operations:
            import_paths |= operation.import_paths()
        try:
            return self._template.render(
                name=name,
                timestamp=timestamp,
                operations=list(operations),
                literal_imports=LITERAL_IMPORTS,
                model_imports=sorted({_model_import(path) for path in import_paths}),
            )
        except jinja2.TemplateError as e:
            raise SeedTemplateError(f"Cannot render seed '{name}': {e}") from e

    def write(self, name: str, timestamp: datetime, operations: Sequence[SeedOperation]) -> Path:
        """Render and persist one seed file.

        Returns:
            Path of the written file
        """
        stamp = timestamp.strftime(TIMESTAMP_FORMAT)
        content = self.render(name, stamp, operations)

        self._seed_path.mkdir(parents=True, exist_ok=True)
        path = self._seed_path / f"{stamp}_{name}.py"
        path.write_text(content, encoding="utf-8")

        if self._after_generate is not None:
            self._after_generate(stamp, name)
        return path


class SeedEmitter:
    """Builds operation lists from tags and hands them to the file generator."""

    def __init__(
        self,
        registry: Registry,
        db: TagDB,
        store: RecordStore,
        generator: SeedFileGenerator,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry
        self._db = db
        self._store = store
        self._generator = generator
        self._clock = clock if clock is not None else lambda: datetime.now(UTC)

    def generate_seed_for_types(self, types: Iterable[EntityType | str] | None = None) -> list[Path]:
        """Run one generation pass and consume the processed tags.

        Args:
            types: Types to process; None processes every registered type.
                Processing order is always the sequencer order.

        Returns:
            Paths of the written files, in replay order

        Raises:
            CyclicDependencyError: Before any file is written
            ReferenceNotFoundError: If a tag's entity or a reference is unresolvable
        """
        seed_order = self._registry.seed_order()
        if types is None:
            order = seed_order
        else:
            selected = {t.name for t in self._registry.resolve_types(types)}
            order = [t for t in seed_order if t.name in selected]

        start = self._clock()
        written: list[Path] = []
        try:
            with self._db.transaction() as tags:
                resolver = CandidateKeyResolver(self._registry, self._store, tags)

                for offset, entity_type in enumerate(order):
                    upserts = self._update_operations(resolver, tags, entity_type)
                    if upserts:
                        name = f"seed_{plural_snake(entity_type.name)}_updates"
                        written.append(self._write(name, start + timedelta(seconds=offset), upserts, entity_type))

                for offset, entity_type in enumerate(reversed(order), start=len(order)):
                    destroys = self._destroy_operations(resolver, tags, entity_type)
                    if destroys:
                        name = f"seed_{plural_snake(entity_type.name)}_destroys"
                        written.append(self._write(name, start + timedelta(seconds=offset), destroys, entity_type))

                consumed = tags.delete_for_types([t.name for t in order])
        except Exception as e:
            for path in written:
                path.unlink(missing_ok=True)
            logger.error(
                "seed_generation_failed",
                error=str(e),
                error_type=type(e).__name__,
                files_removed=len(written),
            )
            raise

        logger.info("tags_consumed", count=consumed, entity_types=[t.name for t in order], files=len(written))
        return written

    def _write(self, name: str, timestamp: datetime, operations: Sequence[SeedOperation], entity_type: EntityType) -> Path:
        path = self._generator.write(name, timestamp, operations)
        logger.info("seed_written", path=str(path), entity_type=entity_type.name, operations=len(operations))
        return path

    def _update_operations(
        self,
        resolver: CandidateKeyResolver,
        tags: TagStore,
        entity_type: EntityType,
    ) -> list[UpsertOperation]:
        operations: list[UpsertOperation] = []
        for tag in tags.for_types([entity_type.name], kinds=(TagKind.CREATED, TagKind.UPDATED)):
            live = self._store.find(entity_type, tag.row_id)
            if live is None:
                raise ReferenceNotFoundError(
                    entity_type.name,
                    tag.row_id,
                    context=f"outstanding '{tag.kind.value}' tag {tag.tag_id}",
                )
            values = {
                attribute: self._store.read(live, attribute)
                for attribute in self._store.attribute_names(entity_type)
                if attribute != entity_type.primary_key
            }
            operations.append(
                UpsertOperation(
                    tag_kind=tag.kind,
                    lookup=resolver.describe_entity(live),
                    fallback=resolver.describe_stored_key(tag),
                    attributes=resolver.describe_attributes(entity_type, values, entity=live),
                )
            )
        return operations

    def _destroy_operations(
        self,
        resolver: CandidateKeyResolver,
        tags: TagStore,
        entity_type: EntityType,
    ) -> list[DestroyOperation]:
        return [
            DestroyOperation(lookup=resolver.describe_stored_key(tag))
            for tag in tags.for_types([entity_type.name], kinds=(TagKind.DESTROYED,))
        ]
