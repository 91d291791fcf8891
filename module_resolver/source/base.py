"""Abstract base classes for graph data sources and mutation sinks."""

from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Optional

from module_resolver.models.module import DependencyEdge, ModuleNode


class GraphDataSource(ABC):
    """Read access to module records, dependency edges and install state.

    All implementations must inherit from this class and implement the
    abstract methods. The batch methods have per-item fallbacks; override
    them when the backend can answer in one round trip.

    Attributes:
        name: Unique name for this data source.
    """

    name: str = "base"

    @abstractmethod
    async def get_outgoing_edges(self, module_id: str) -> list[DependencyEdge]:
        """Get the dependencies declared by a module.

        Args:
            module_id: Declaring module ID.

        Returns:
            Edges whose source is the module, in declaration order.

        Raises:
            GraphSourceError: If the source is unavailable.
        """
        ...

    @abstractmethod
    async def get_incoming_edges(self, module_id: str) -> list[DependencyEdge]:
        """Get the edges of modules that depend on a module.

        Args:
            module_id: Depended-upon module ID.

        Returns:
            Edges whose target is the module.
        """
        ...

    @abstractmethod
    async def get_module(self, module_id: str) -> Optional[ModuleNode]:
        """Get a module record.

        Args:
            module_id: Module ID.

        Returns:
            ModuleNode or None if not found.
        """
        ...

    @abstractmethod
    async def get_installed_modules(self, target_id: str) -> set[str]:
        """Get the modules installed and enabled on a target.

        Args:
            target_id: Installation target ID (e.g., a site).

        Returns:
            Set of enabled module IDs.
        """
        ...

    async def get_installed_versions(self, target_id: str) -> dict[str, Optional[str]]:
        """Get installed modules with their installed versions.

        Default implementation reports every enabled module with an unknown
        version. Override when the backend tracks installed versions.

        Args:
            target_id: Installation target ID.

        Returns:
            Mapping of enabled module ID to installed version or None.
        """
        return {module_id: None for module_id in await self.get_installed_modules(target_id)}

    async def get_modules(self, module_ids: Iterable[str]) -> dict[str, ModuleNode]:
        """Get several module records.

        Args:
            module_ids: Module IDs to load.

        Returns:
            Mapping of ID to ModuleNode; unknown IDs are omitted.
        """
        modules: dict[str, ModuleNode] = {}
        for module_id in dict.fromkeys(module_ids):
            module = await self.get_module(module_id)
            if module is not None:
                modules[module_id] = module
        return modules

    async def get_subgraph(
        self,
        module_id: str,
        max_depth: Optional[int] = None,
    ) -> list[DependencyEdge]:
        """Get every edge reachable from a module.

        Default implementation walks breadth-first with one
        `get_outgoing_edges` call per reached module.

        Args:
            module_id: Start module ID.
            max_depth: Only expand modules closer than this many hops to the
                start; None expands everything reachable.

        Returns:
            Reachable edges, each listed once.
        """
        edges: list[DependencyEdge] = []
        depths = {module_id: 0}
        queue = deque([module_id])

        while queue:
            current = queue.popleft()
            if max_depth is not None and depths[current] >= max_depth:
                continue
            for edge in await self.get_outgoing_edges(current):
                edges.append(edge)
                if edge.depends_on_id not in depths:
                    depths[edge.depends_on_id] = depths[current] + 1
                    queue.append(edge.depends_on_id)

        return edges


class GraphMutationSink(ABC):
    """Write access to dependency edges.

    Every successful write bumps a graph revision so writers can detect
    concurrent modification between a guard check and their write.
    """

    @abstractmethod
    async def get_revision(self) -> int:
        """Get the current graph revision."""
        ...

    @abstractmethod
    async def upsert_edge(
        self,
        edge: DependencyEdge,
        expected_revision: Optional[int] = None,
    ) -> None:
        """Create or replace the edge keyed by (module_id, depends_on_id).

        Args:
            edge: Edge to store.
            expected_revision: Revision the caller validated against; the
                write is refused if the graph moved on since.

        Raises:
            ConcurrentModificationError: If the revision does not match.
        """
        ...

    @abstractmethod
    async def delete_edge(self, module_id: str, depends_on_id: str) -> bool:
        """Delete an edge.

        Args:
            module_id: Declaring module ID.
            depends_on_id: Depended-upon module ID.

        Returns:
            True if deleted, False if not found.
        """
        ...
