# tests/contracts/test_descriptions.py
"""Tests for literal rendering and key description rendering."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

import pytest


class Color(Enum):
    RED = "red"


class TestRenderLiteral:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "None"),
            (True, "True"),
            (False, "False"),
            (3, "3"),
            (2.5, "2.5"),
            ("it's", '"it\'s"'),
            (Decimal("9.99"), "Decimal('9.99')"),
            (date(2024, 1, 2), "date.fromisoformat('2024-01-02')"),
            (datetime(2024, 1, 2, 3, 4, 5), "datetime.fromisoformat('2024-01-02T03:04:05')"),
            (Color.RED, "'red'"),
        ],
    )
    def test_renders_python_literal(self, value: object, expected: str) -> None:
        from seedtrail.contracts import render_literal

        assert render_literal(value) == expected


class TestKeyDescription:
    def _player(self):
        from seedtrail.contracts import KeyDescription, LiteralField

        return KeyDescription("Player", (LiteralField("reference", "p1"),), "app.models:Player")

    def test_render_lookup(self) -> None:
        assert self._player().render_lookup() == "find_by(session, Player, reference='p1')"

    def test_empty_lookup(self) -> None:
        from seedtrail.contracts import KeyDescription

        assert KeyDescription("Setting", ()).render_lookup() == "find_by(session, Setting)"

    def test_reference_via_relationship(self) -> None:
        from seedtrail.contracts import KeyDescription, LiteralField, ReferenceField

        entry = KeyDescription(
            "InventoryItem",
            (ReferenceField("player", self._player()), LiteralField("item_id", 3)),
            "app.models:InventoryItem",
        )

        assert entry.render() == "player=find_by(session, Player, reference='p1'), item_id=3"

    def test_reference_via_foreign_key(self) -> None:
        from seedtrail.contracts import KeyDescription, ReferenceField

        comment = KeyDescription(
            "Comment",
            (ReferenceField("commentable_id", self._player(), via_relationship=False),),
        )

        assert comment.render() == "commentable_id=row_id_of(find_by(session, Player, reference='p1'))"

    def test_import_paths_include_nested_targets(self) -> None:
        from seedtrail.contracts import KeyDescription, ReferenceField

        entry = KeyDescription("InventoryItem", (ReferenceField("player", self._player()),), "app.models:InventoryItem")

        assert entry.import_paths() == {"app.models:Player", "app.models:InventoryItem"}
        assert [d.entity_type for d in entry.walk()] == ["InventoryItem", "Player"]

    def test_model_name_from_import_path(self) -> None:
        from seedtrail.contracts import KeyDescription

        assert KeyDescription("Thing", (), "app.models:Outer.Inner").model_name == "Outer.Inner"
        assert KeyDescription("Thing", ()).model_name == "Thing"

    def test_literal_values_skip_references(self) -> None:
        from seedtrail.contracts import KeyDescription, LiteralField, ReferenceField

        entry = KeyDescription(
            "InventoryItem",
            (ReferenceField("player", self._player()), LiteralField("item_id", 3)),
        )

        assert entry.literal_values() == {"item_id": 3}
