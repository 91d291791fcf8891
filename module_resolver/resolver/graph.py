"""In-memory snapshot of the dependency graph."""

import logging
from typing import Iterable, Optional

from module_resolver.models.module import DependencyEdge, DependencyType, ModuleNode
from module_resolver.source.base import GraphDataSource

logger = logging.getLogger(__name__)


class GraphSnapshot:
    """Call-scoped copy of the subgraph reachable from one or more modules.

    Built with a single subgraph fetch plus one batch module lookup, so the
    graph algorithms run without further round trips to the data source.

    Attributes:
        root_ids: Modules the snapshot was loaded from.
        adjacency: Outgoing edges per module ID, in declaration order.
        modules: Module records for every ID seen in the snapshot.
    """

    def __init__(
        self,
        root_ids: Iterable[str],
        edges: Iterable[DependencyEdge],
        modules: dict[str, ModuleNode],
    ) -> None:
        """Initialize the snapshot.

        Args:
            root_ids: Start modules.
            edges: Reachable edges.
            modules: Module records by ID.
        """
        self.root_ids = list(root_ids)
        self.adjacency: dict[str, list[DependencyEdge]] = {}
        seen: set[tuple[str, str]] = set()
        for edge in edges:
            if edge.key in seen:
                continue
            seen.add(edge.key)
            self.adjacency.setdefault(edge.module_id, []).append(edge)
        self.modules = modules

    @classmethod
    async def load(
        cls,
        source: GraphDataSource,
        root_id: str,
        max_depth: Optional[int] = None,
    ) -> "GraphSnapshot":
        """Load the subgraph reachable from one module.

        Args:
            source: Graph data source.
            root_id: Start module ID.
            max_depth: Optional expansion depth limit.

        Returns:
            Loaded snapshot.
        """
        return await cls.load_many(source, [root_id], max_depth=max_depth)

    @classmethod
    async def load_many(
        cls,
        source: GraphDataSource,
        root_ids: Iterable[str],
        max_depth: Optional[int] = None,
    ) -> "GraphSnapshot":
        """Load the union of the subgraphs reachable from several modules.

        Args:
            source: Graph data source.
            root_ids: Start module IDs.
            max_depth: Optional expansion depth limit.

        Returns:
            Loaded snapshot.
        """
        roots = list(dict.fromkeys(root_ids))
        edges: list[DependencyEdge] = []
        for root_id in roots:
            edges.extend(await source.get_subgraph(root_id, max_depth=max_depth))

        module_ids = dict.fromkeys(roots)
        for edge in edges:
            module_ids[edge.module_id] = None
            module_ids[edge.depends_on_id] = None
        modules = await source.get_modules(module_ids)

        logger.debug(
            f"Loaded snapshot for {roots}: {len(module_ids)} modules, {len(edges)} edges"
        )
        return cls(roots, edges, modules)

    def edges_from(
        self,
        module_id: str,
        dependency_types: Optional[Iterable[DependencyType]] = None,
    ) -> list[DependencyEdge]:
        """Get outgoing edges of a module.

        Args:
            module_id: Declaring module ID.
            dependency_types: Restrict to these dependency types.

        Returns:
            Matching edges in declaration order.
        """
        edges = self.adjacency.get(module_id, [])
        if dependency_types is None:
            return list(edges)
        allowed = set(dependency_types)
        return [e for e in edges if e.dependency_type in allowed]

    def module(self, module_id: str) -> Optional[ModuleNode]:
        """Get a module record, or None for dangling references."""
        return self.modules.get(module_id)

    def name_of(self, module_id: str) -> str:
        """Display name of a module, falling back to its ID."""
        module = self.modules.get(module_id)
        return module.name if module else module_id
