# src/seedtrail/orm/replay.py
"""Helpers called by generated seed scripts, and the script loader.

A generated script defines `up(session)` and locates records only through
find_by() with candidate-key attributes, never with row ids from the
database it was recorded on.
"""

from __future__ import annotations

import importlib.util
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from seedtrail.core.logging import get_logger

logger = get_logger(__name__)


def find_by(session: Session, model: type[Any], **attributes: Any) -> Any | None:
    """First record matching all attributes, or None."""
    return session.scalars(select(model).filter_by(**attributes).limit(1)).first()


def find_or_initialize_by(session: Session, model: type[Any], **attributes: Any) -> Any:
    """Matching record, or a new pending one built from the attributes."""
    record = find_by(session, model, **attributes)
    if record is None:
        record = model(**attributes)
        session.add(record)
    return record


def update(session: Session, record: Any, **attributes: Any) -> Any:
    """Assign attributes and flush so later lookups see the row."""
    for attribute, value in attributes.items():
        setattr(record, attribute, value)
    session.add(record)
    session.flush()
    return record


def destroy(session: Session, record: Any | None) -> bool:
    """Delete the record if present. Returns whether anything was deleted."""
    if record is None:
        return False
    session.delete(record)
    session.flush()
    return True


def row_id_of(record: Any | None) -> Any:
    """Primary key of a persisted record (None passes through)."""
    if record is None:
        return None
    return inspect(type(record)).primary_key_from_instance(record)[0]


def apply_seed_file(path: Path | str, session: Session) -> None:
    """Import a generated seed script and run its up(session).

    Raises:
        ImportError: If the file cannot be loaded as a module
        AttributeError: If the module defines no up()
    """
    path = Path(path)
    spec = importlib.util.spec_from_file_location(f"seedtrail_seed_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load seed script: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    module.up(session)
    logger.info("seed_applied", path=str(path))


def apply_seed_files(paths: Iterable[Path | str], session: Session) -> list[Path]:
    """Apply scripts in file-name order (their timestamp prefix is replay order)."""
    ordered = sorted((Path(p) for p in paths), key=lambda p: p.name)
    for path in ordered:
        apply_seed_file(path, session)
    return ordered
