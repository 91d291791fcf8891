"""In-memory graph source."""

import logging
from typing import Iterable, Optional

from module_resolver.exceptions import ConcurrentModificationError
from module_resolver.models.module import DependencyEdge, ModuleNode
from module_resolver.source.base import GraphDataSource, GraphMutationSink

logger = logging.getLogger(__name__)


class InMemoryGraphSource(GraphDataSource, GraphMutationSink):
    """Graph source and sink backed by plain dictionaries.

    Useful when the caller already holds the graph (fixtures, imports,
    previews of unsaved edits).

    Attributes:
        modules: Module records by ID.
        edges: Edges by (module_id, depends_on_id), in declaration order.
        installations: Per target, module ID to (enabled, installed version).
        revision: Graph revision, bumped on every edge write.
    """

    name = "memory"

    def __init__(
        self,
        modules: Iterable[ModuleNode] = (),
        edges: Iterable[DependencyEdge] = (),
    ) -> None:
        """Initialize the source.

        Args:
            modules: Initial module records.
            edges: Initial edges.
        """
        self.modules: dict[str, ModuleNode] = {m.id: m for m in modules}
        self.edges: dict[tuple[str, str], DependencyEdge] = {e.key: e for e in edges}
        self.installations: dict[str, dict[str, tuple[bool, Optional[str]]]] = {}
        self.revision = 0

    def add_module(self, module: ModuleNode) -> ModuleNode:
        """Add or replace a module record."""
        self.modules[module.id] = module
        return module

    def install(
        self,
        target_id: str,
        module_id: str,
        version: Optional[str] = None,
        enabled: bool = True,
    ) -> None:
        """Record a module installation on a target.

        Args:
            target_id: Installation target ID.
            module_id: Installed module ID.
            version: Installed version, if tracked.
            enabled: Whether the installation is enabled.
        """
        self.installations.setdefault(target_id, {})[module_id] = (enabled, version)

    async def get_outgoing_edges(self, module_id: str) -> list[DependencyEdge]:
        return [e for e in self.edges.values() if e.module_id == module_id]

    async def get_incoming_edges(self, module_id: str) -> list[DependencyEdge]:
        return [e for e in self.edges.values() if e.depends_on_id == module_id]

    async def get_module(self, module_id: str) -> Optional[ModuleNode]:
        return self.modules.get(module_id)

    async def get_installed_modules(self, target_id: str) -> set[str]:
        installed = self.installations.get(target_id, {})
        return {module_id for module_id, (enabled, _) in installed.items() if enabled}

    async def get_installed_versions(self, target_id: str) -> dict[str, Optional[str]]:
        installed = self.installations.get(target_id, {})
        return {
            module_id: version
            for module_id, (enabled, version) in installed.items()
            if enabled
        }

    async def get_revision(self) -> int:
        return self.revision

    async def upsert_edge(
        self,
        edge: DependencyEdge,
        expected_revision: Optional[int] = None,
    ) -> None:
        if expected_revision is not None and expected_revision != self.revision:
            raise ConcurrentModificationError(expected_revision, self.revision)
        self.edges[edge.key] = edge
        self.revision += 1
        logger.debug(f"Stored edge {edge.module_id} -> {edge.depends_on_id}")

    async def delete_edge(self, module_id: str, depends_on_id: str) -> bool:
        if self.edges.pop((module_id, depends_on_id), None) is None:
            return False
        self.revision += 1
        return True
