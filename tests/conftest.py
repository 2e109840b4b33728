# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/

Two families of fixtures:
- Core fixtures (registry, record_store, tracker, resolver) run against the
  dictionary-backed InMemoryRecordStore and EntityType constants.
- ORM fixtures (app_session, trail) run against SQLAlchemy models on an
  in-memory SQLite database with mapper events installed.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from seedtrail.core.emitter import SeedEmitter, SeedFileGenerator
from seedtrail.core.registry import Registry
from seedtrail.core.tags import TagDB
from seedtrail.core.tracker import TagTracker
from seedtrail.engine import SeedTrail
from seedtrail.orm import TrackingInstallation, install_tracking, uninstall_tracking
from tests.fixtures.entities import ALL_TYPES
from tests.fixtures.models import TRACKABLE_MODELS, Base, Item
from tests.fixtures.store import InMemoryRecordStore

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53)


def fixed_clock() -> datetime:
    return FIXED_NOW


# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def tag_db() -> Iterator[TagDB]:
    db = TagDB.in_memory()
    yield db
    db.close()


@pytest.fixture
def registry() -> Registry:
    """Registry with the fixture entity types, tracking enabled."""
    registry = Registry(enabled=True)
    registry.register_all(ALL_TYPES)
    return registry


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def tracker(registry: Registry, tag_db: TagDB, record_store: InMemoryRecordStore) -> TagTracker:
    return TagTracker(registry, tag_db, record_store)


@pytest.fixture
def seed_dir(tmp_path: Path) -> Path:
    return tmp_path / "seeds"


@pytest.fixture
def emitter(registry: Registry, tag_db: TagDB, record_store: InMemoryRecordStore, seed_dir: Path) -> SeedEmitter:
    return SeedEmitter(registry, tag_db, record_store, SeedFileGenerator(seed_dir), clock=fixed_clock)


# =============================================================================
# ORM fixtures
# =============================================================================


def make_app_engine() -> Engine:
    """In-memory application database with the fixture schema and one Item."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session, session.begin():
        session.add(Item(id=1, name="sword"))
    return engine


@pytest.fixture
def app_engine() -> Iterator[Engine]:
    engine = make_app_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def app_session(app_engine: Engine) -> Iterator[Session]:
    with Session(app_engine) as session:
        yield session


@pytest.fixture
def trail(app_session: Session, tag_db: TagDB, seed_dir: Path) -> Iterator[SeedTrail]:
    """SeedTrail over the fixture models with mapper events installed.

    Tracking starts disabled; tests enable it with trail.tracking().
    """
    from seedtrail.orm import SQLAlchemyRecordStore

    registry = Registry()
    trail = SeedTrail(
        registry=registry,
        tag_db=tag_db,
        store=SQLAlchemyRecordStore(app_session, registry),
        generator=SeedFileGenerator(seed_dir),
        clock=fixed_clock,
    )
    for model in TRACKABLE_MODELS:
        trail.register(model)
    installation: TrackingInstallation = install_tracking(trail, registry)
    yield trail
    uninstall_tracking(installation)
