# src/seedtrail/core/dag/__init__.py
"""Entity type dependency graph and seed ordering."""

from seedtrail.core.dag.graph import DependencyGraph

__all__ = [
    "DependencyGraph",
]
