# tests/cli/conftest.py
"""Fixtures for CLI tests: file-backed databases and a settings file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from tests.fixtures.models import Base, Item


@dataclass
class CliWorkspace:
    """Paths for one CLI test: settings file, databases and seed directory."""

    root: Path
    settings: Path
    app_db: Path
    tags_db: Path
    seed_dir: Path

    @property
    def app_url(self) -> str:
        return f"sqlite:///{self.app_db}"

    @property
    def tags_url(self) -> str:
        return f"sqlite:///{self.tags_db}"


def write_settings(path: Path, *, seed_dir: Path, tags_url: str, app_url: str | None) -> None:
    database = f'database:\n  url: "{app_url}"\n' if app_url is not None else ""
    path.write_text(
        f"""
seed_path: "{seed_dir}"
trackable:
  - "tests.fixtures.models:Player"
  - "tests.fixtures.models:InventoryItem"
tag_store:
  url: "{tags_url}"
{database}"""
    )


def create_app_database(url: str) -> None:
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    with Session(engine) as session, session.begin():
        session.add(Item(id=1, name="sword"))
    engine.dispose()


@pytest.fixture
def workspace(tmp_path: Path) -> CliWorkspace:
    ws = CliWorkspace(
        root=tmp_path,
        settings=tmp_path / "settings.yaml",
        app_db=tmp_path / "app.db",
        tags_db=tmp_path / "tags.db",
        seed_dir=tmp_path / "seeds",
    )
    create_app_database(ws.app_url)
    write_settings(ws.settings, seed_dir=ws.seed_dir, tags_url=ws.tags_url, app_url=ws.app_url)
    return ws
