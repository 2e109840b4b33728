# tests/core/test_emitter.py
"""Tests for seed generation: operation lists, file naming and tag consumption."""

from pathlib import Path

import pytest

from seedtrail.contracts import EventKind, TagKind
from tests.conftest import FIXED_NOW, fixed_clock


def _all_tags(tag_db):
    with tag_db.transaction() as tags:
        return tags.for_types(["Player", "InventoryItem", "Comment", "Category", "custom_tag"])


class TestPluralSnake:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Player", "players"),
            ("InventoryItem", "inventory_items"),
            ("Category", "categories"),
            ("Address", "addresses"),
            ("Key", "keys"),
            ("HTTPRoute", "http_routes"),
        ],
    )
    def test_plural_snake(self, name: str, expected: str) -> None:
        from seedtrail.core.emitter import plural_snake

        assert plural_snake(name) == expected


class TestSeedFileGenerator:
    """Rendering and writing files."""

    def test_write_names_file_with_timestamp(self, seed_dir: Path) -> None:
        from seedtrail.core.emitter import SeedFileGenerator

        path = SeedFileGenerator(seed_dir).write("seed_players_updates", FIXED_NOW, [])

        assert path == seed_dir / "20260314092653_seed_players_updates.py"
        assert path.exists()

    def test_empty_operation_list_renders_valid_module(self, seed_dir: Path) -> None:
        from seedtrail.core.emitter import SeedFileGenerator

        path = SeedFileGenerator(seed_dir).write("seed_nothing", FIXED_NOW, [])
        source = path.read_text()

        compile(source, str(path), "exec")
        assert "def up(session):\n    pass\n" in source

    def test_after_generate_hook_receives_timestamp_and_name(self, seed_dir: Path) -> None:
        from seedtrail.core.emitter import SeedFileGenerator

        calls: list[tuple[str, str]] = []
        generator = SeedFileGenerator(seed_dir, after_generate=lambda ts, name: calls.append((ts, name)))

        generator.write("seed_players_updates", FIXED_NOW, [])

        assert calls == [("20260314092653", "seed_players_updates")]

    def test_custom_template_file(self, tmp_path: Path, seed_dir: Path) -> None:
        from seedtrail.core.emitter import SeedFileGenerator

        template = tmp_path / "custom.py.j2"
        template.write_text("# {{ name }} @ {{ timestamp }}: {{ operations | length }} operation(s)\n")

        path = SeedFileGenerator(seed_dir, template_file=template).write("seed_x", FIXED_NOW, [])

        assert path.read_text() == "# seed_x @ 20260314092653: 0 operation(s)\n"

    def test_missing_template_file_raises(self, tmp_path: Path, seed_dir: Path) -> None:
        from seedtrail.core.emitter import SeedFileGenerator, SeedTemplateError

        with pytest.raises(SeedTemplateError, match="nope.j2"):
            SeedFileGenerator(seed_dir, template_file=tmp_path / "nope.j2")

    def test_undefined_template_variable_raises(self, tmp_path: Path, seed_dir: Path) -> None:
        from seedtrail.core.emitter import SeedFileGenerator, SeedTemplateError

        template = tmp_path / "bad.py.j2"
        template.write_text("{{ not_provided }}\n")
        generator = SeedFileGenerator(seed_dir, template_file=template)

        with pytest.raises(SeedTemplateError, match="seed_x"):
            generator.write("seed_x", FIXED_NOW, [])
        assert not seed_dir.exists() or list(seed_dir.iterdir()) == []


class TestUpdateSeeds:
    """Created/updated tags become upsert operations in seed order."""

    def test_player_and_inventory_item_in_dependency_order(self, tracker, emitter, record_store, seed_dir) -> None:
        player = record_store.add("Player", reference="p1", name="Alice")
        entry = record_store.add("InventoryItem", player_id=player.id, item_id=3, quantity=2)
        # Events arrive dependents-first; output order must not depend on it
        tracker.apply_event(entry, EventKind.CREATED)
        tracker.apply_event(player, EventKind.CREATED)

        paths = emitter.generate_seed_for_types()

        assert [p.name for p in paths] == [
            "20260314092653_seed_players_updates.py",
            "20260314092654_seed_inventory_items_updates.py",
        ]
        players = paths[0].read_text()
        assert "record = find_by(session, Player, reference='p1')" in players
        assert "record = find_or_initialize_by(session, Player, reference='p1')" in players
        assert "update(session, record, reference='p1', name='Alice')" in players

        entries = paths[1].read_text()
        assert "record = find_by(session, InventoryItem, player=find_by(session, Player, reference='p1'), item_id=3)" in entries
        assert "update(session, record, player=find_by(session, Player, reference='p1'), item_id=3, quantity=2)" in entries
        for path in paths:
            compile(path.read_text(), str(path), "exec")

    def test_fallback_uses_stored_key_after_rename(self, tracker, emitter, record_store) -> None:
        """A renamed pre-existing record is found by its new key or initialized by its old one."""
        player = record_store.add("Player", reference="p1", name="Alice")
        record_store.change(player, reference="p1-renamed")
        tracker.apply_event(player, EventKind.UPDATED)

        (path,) = emitter.generate_seed_for_types()
        source = path.read_text()

        assert "record = find_by(session, Player, reference='p1-renamed')" in source
        assert "record = find_or_initialize_by(session, Player, reference='p1')" in source

    def test_generation_consumes_tags(self, tracker, emitter, record_store, tag_db) -> None:
        player = record_store.add("Player", reference="p1")
        tracker.apply_event(player, EventKind.CREATED)

        emitter.generate_seed_for_types()

        assert _all_tags(tag_db) == []
        assert emitter.generate_seed_for_types() == []

    def test_created_updated_destroyed_emits_nothing(self, tracker, emitter, record_store, seed_dir) -> None:
        player = record_store.add("Player", reference="p1")
        tracker.apply_event(player, EventKind.CREATED)
        tracker.apply_event(player, EventKind.UPDATED)
        tracker.apply_event(player, EventKind.DESTROYED)
        record_store.remove(player)

        assert emitter.generate_seed_for_types() == []
        assert not seed_dir.exists()


class TestDestroySeeds:
    """Destroyed tags become destroy operations in reverse seed order."""

    def test_inventory_item_destroyed_before_player(self, tracker, emitter, record_store) -> None:
        player = record_store.add("Player", reference="p1")
        entry = record_store.add("InventoryItem", player_id=player.id, item_id=3)
        tracker.apply_event(entry, EventKind.DESTROYED)
        record_store.remove(entry)
        tracker.apply_event(player, EventKind.DESTROYED)
        record_store.remove(player)

        paths = emitter.generate_seed_for_types()

        # Update pass advances the clock for all 4 types, destroy pass runs reversed
        assert [p.name for p in paths] == [
            "20260314092659_seed_inventory_items_destroys.py",
            "20260314092700_seed_players_destroys.py",
        ]
        assert (
            "destroy(session, find_by(session, InventoryItem, player=find_by(session, Player, reference='p1'), item_id=3))"
            in paths[0].read_text()
        )
        assert "destroy(session, find_by(session, Player, reference='p1'))" in paths[1].read_text()

    def test_updated_then_destroyed_preexisting_entity(self, tracker, emitter, record_store) -> None:
        """One destroyed tag remains and produces a destroy-only seed."""
        player = record_store.add("Player", reference="p1")
        tracker.apply_event(player, EventKind.UPDATED)
        tracker.apply_event(player, EventKind.DESTROYED)
        record_store.remove(player)

        (path,) = emitter.generate_seed_for_types()

        assert path.name.endswith("_seed_players_destroys.py")
        source = path.read_text()
        assert "destroy(session, find_by(session, Player, reference='p1'))" in source
        assert "update(" not in source.split("def up(session):")[1]


class TestGenerationScope:
    def test_single_type_only_consumes_its_tags(self, tracker, emitter, record_store, tag_db) -> None:
        player = record_store.add("Player", reference="p1")
        category = record_store.add("Category", parent_id=None, reference="root")
        tracker.apply_event(player, EventKind.CREATED)
        tracker.apply_event(category, EventKind.CREATED)

        (path,) = emitter.generate_seed_for_types(["Category"])

        assert path.name == "20260314092653_seed_categories_updates.py"
        assert [t.entity_type for t in _all_tags(tag_db)] == ["Player"]

    def test_custom_tags_are_never_consumed(self, tracker, emitter, record_store, tag_db) -> None:
        with tag_db.transaction() as tags:
            tags.find_or_create_custom("custom_tag", TagKind.TOUCHED, "n/a")
        player = record_store.add("Player", reference="p1")
        tracker.apply_event(player, EventKind.CREATED)

        emitter.generate_seed_for_types()

        assert [t.entity_type for t in _all_tags(tag_db)] == ["custom_tag"]

    def test_cycle_aborts_before_any_file_is_written(self, registry, tag_db, record_store, seed_dir) -> None:
        from seedtrail.contracts import BelongsTo, CyclicDependencyError, EntityType
        from seedtrail.core.emitter import SeedEmitter, SeedFileGenerator

        registry.register(EntityType("A", references=(BelongsTo("b_id", "B"),)))
        registry.register(EntityType("B", references=(BelongsTo("a_id", "A"),)))
        emitter = SeedEmitter(registry, tag_db, record_store, SeedFileGenerator(seed_dir), clock=fixed_clock)

        with pytest.raises(CyclicDependencyError):
            emitter.generate_seed_for_types()
        assert not seed_dir.exists()


class TestPartialFailure:
    def test_failure_removes_written_files_and_keeps_tags(self, tracker, emitter, record_store, tag_db, seed_dir) -> None:
        """A failing type rolls back the whole pass."""
        from seedtrail.contracts import ReferenceNotFoundError

        player = record_store.add("Player", reference="p1")
        entry = record_store.add("InventoryItem", player_id=player.id, item_id=3)
        tracker.apply_event(player, EventKind.CREATED)
        tracker.apply_event(entry, EventKind.CREATED)
        # Row vanished without a destroy event: its created tag cannot be replayed
        record_store.remove(entry)

        with pytest.raises(ReferenceNotFoundError, match="InventoryItem"):
            emitter.generate_seed_for_types()

        assert list(seed_dir.iterdir()) == []
        assert len(_all_tags(tag_db)) == 2
