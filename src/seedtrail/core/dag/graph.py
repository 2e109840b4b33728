# src/seedtrail/core/dag/graph.py
"""DependencyGraph: entity type dependencies and seed ordering.

Nodes are entity type names. An edge A -> B means "A depends on B": A holds
a non-polymorphic belongs-to reference to B, so B's rows must exist before
A's rows can be replayed. Self references are dropped. Types owning a
polymorphic reference are kept in a separate bucket because the graph
cannot know which types they point at.

Seed order is a depth-first post-order from every root (a registered type
nothing depends on), followed by the polymorphic bucket, so every type
precedes the types that depend on it. Destruction replays the reverse.
"""

from __future__ import annotations

import networkx as nx
from networkx import DiGraph

from seedtrail.contracts.entities import EntityType
from seedtrail.contracts.errors import CyclicDependencyError
from seedtrail.core.logging import get_logger

logger = get_logger(__name__)


class DependencyGraph:
    """Directed graph of entity type dependencies.

    Wraps a NetworkX DiGraph. Node insertion order is registration order,
    which keeps seed order deterministic for a given registration sequence.
    """

    def __init__(self) -> None:
        self._graph: DiGraph[str] = nx.DiGraph()
        self._registered: set[str] = set()
        self._polymorphic: list[str] = []

    @property
    def node_count(self) -> int:
        """Number of types known to the graph, registered or only referenced."""
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def has_node(self, name: str) -> bool:
        return self._graph.has_node(name)

    def is_registered(self, name: str) -> bool:
        """True for types registered as trackable (not merely referenced)."""
        return name in self._registered

    def register(self, entity_type: EntityType) -> None:
        """Add a trackable entity type and its dependency edges.

        Idempotent per type: registering again replaces the type's edges.
        Referenced types that are not registered become plain nodes; they
        are skipped when computing seed order.
        """
        name = entity_type.name
        self._graph.add_node(name)
        self._registered.add(name)

        if entity_type.is_polymorphic:
            if name not in self._polymorphic:
                self._polymorphic.append(name)
        elif name in self._polymorphic:
            self._polymorphic.remove(name)

        self._graph.remove_edges_from(list(self._graph.out_edges(name)))
        for target in entity_type.dependencies():
            self._graph.add_edge(name, target)

        logger.debug(
            "entity_type_registered",
            entity_type=name,
            depends_on=entity_type.dependencies(),
            polymorphic=entity_type.is_polymorphic,
        )

    def dependencies(self, name: str) -> list[str]:
        """Types `name` points at (must be replayed before it)."""
        return list(self._graph.successors(name))

    def dependents(self, name: str) -> list[str]:
        """Types pointing at `name` (must be replayed after it)."""
        return list(self._graph.predecessors(name))

    @property
    def roots(self) -> list[str]:
        """Registered, non-polymorphic types no other type depends on."""
        return [
            name
            for name in self._graph.nodes
            if name in self._registered and name not in self._polymorphic and self._graph.in_degree(name) == 0
        ]

    @property
    def polymorphic(self) -> list[str]:
        return list(self._polymorphic)

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def validate(self) -> None:
        """Fail if the registered dependencies contain a cycle.

        Raises:
            CyclicDependencyError: With the cycle's type names
        """
        if self.is_acyclic():
            return
        try:
            cycle = nx.find_cycle(self._graph)
        except nx.NetworkXNoCycle:
            raise CyclicDependencyError([]) from None
        names = [edge[0] for edge in cycle]
        raise CyclicDependencyError([*names, names[0]])

    def seed_order(self) -> list[str]:
        """Return trackable types so that dependencies precede dependents.

        Raises:
            CyclicDependencyError: If traversal re-enters a type still in progress,
                or a registered type is only reachable through a cycle
        """
        order: dict[str, None] = {}  # insertion-ordered set
        for root in self.roots:
            self._visit(root, order, [])
        for name in self._polymorphic:
            self._visit(name, order, [])
        for name in self._polymorphic:
            order.setdefault(name)

        unreached = [name for name in self._graph.nodes if name in self._registered and name not in order]
        if unreached:
            # Every registered type is reachable from a root unless it sits on a cycle
            self.validate()
        return list(order)

    def destroy_order(self) -> list[str]:
        """Seed order reversed: dependents are destroyed before their dependencies."""
        return list(reversed(self.seed_order()))

    def _visit(self, name: str, order: dict[str, None], in_progress: list[str]) -> None:
        """Post-order traversal appending `name` after all its dependencies."""
        if name not in self._registered or name in order:
            return
        if name in in_progress:
            cycle = in_progress[in_progress.index(name) :]
            raise CyclicDependencyError([*cycle, name])
        in_progress.append(name)
        for dependency in self._graph.successors(name):
            self._visit(dependency, order, in_progress)
        in_progress.pop()
        order[name] = None
