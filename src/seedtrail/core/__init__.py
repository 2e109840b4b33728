# src/seedtrail/core/__init__.py
"""Core: Registry, DAG, Tag store, Tracker, Resolver, Emitter, Configuration, Logging."""

from seedtrail.core.canonical import decode_candidate_key, encode_candidate_key
from seedtrail.core.config import (
    DatabaseSettings,
    SeedTrailSettings,
    TagStoreSettings,
    load_settings,
)
from seedtrail.core.dag import DependencyGraph
from seedtrail.core.emitter import SeedEmitter, SeedFileGenerator, SeedTemplateError
from seedtrail.core.logging import configure_logging, get_logger
from seedtrail.core.registry import Registry
from seedtrail.core.resolver import CandidateKeyResolver
from seedtrail.core.tags import SchemaCompatibilityError, TagDB, TagStore
from seedtrail.core.tracker import TagTracker

__all__ = [
    "CandidateKeyResolver",
    "DatabaseSettings",
    "DependencyGraph",
    "Registry",
    "SchemaCompatibilityError",
    "SeedEmitter",
    "SeedFileGenerator",
    "SeedTemplateError",
    "SeedTrailSettings",
    "TagDB",
    "TagStore",
    "TagStoreSettings",
    "TagTracker",
    "configure_logging",
    "decode_candidate_key",
    "encode_candidate_key",
    "get_logger",
    "load_settings",
]
