"""Circular dependency detection."""

import logging
from typing import Iterable, Optional

from module_resolver.models.module import DependencyType
from module_resolver.models.resolution import CycleCheckResult
from module_resolver.resolver.graph import GraphSnapshot

logger = logging.getLogger(__name__)


class _CycleSearch:
    """Mutable state for one depth-first cycle search."""

    def __init__(
        self,
        snapshot: GraphSnapshot,
        dependency_types: Optional[Iterable[DependencyType]],
    ) -> None:
        self.snapshot = snapshot
        self.dependency_types = (
            list(dependency_types) if dependency_types is not None else None
        )
        self.visited: set[str] = set()
        self.on_stack: set[str] = set()
        self.path: list[str] = []

    def visit(self, start_id: str) -> bool:
        """Explore from a module; True once a cycle has been found."""
        if start_id in self.visited:
            return False

        self.on_stack.add(start_id)
        self.path.append(start_id)
        # Explicit stack of (module, remaining outgoing edges)
        stack = [(start_id, iter(self._edges(start_id)))]

        while stack:
            module_id, edges = stack[-1]
            for edge in edges:
                child_id = edge.depends_on_id
                if child_id in self.on_stack:
                    self.path.append(child_id)
                    return True
                if child_id in self.visited:
                    continue
                self.on_stack.add(child_id)
                self.path.append(child_id)
                stack.append((child_id, iter(self._edges(child_id))))
                break
            else:
                stack.pop()
                self.on_stack.remove(module_id)
                self.visited.add(module_id)
                self.path.pop()

        return False

    def _edges(self, module_id: str):
        return self.snapshot.edges_from(module_id, self.dependency_types)


def find_cycle(
    snapshot: GraphSnapshot,
    start_id: str,
    dependency_types: Optional[Iterable[DependencyType]] = None,
) -> CycleCheckResult:
    """Find the first cycle reachable from a module.

    Args:
        snapshot: Graph snapshot containing the start module's subgraph.
        start_id: Module to start from.
        dependency_types: Edge types to follow; all types when None.

    Returns:
        CycleCheckResult with the DFS path (oldest ancestor first, the
        cycle-closing module repeated last) when a cycle exists.
    """
    search = _CycleSearch(snapshot, dependency_types)
    if not search.visit(start_id):
        return CycleCheckResult(has_cycle=False)

    path = list(search.path)
    result = CycleCheckResult(
        has_cycle=True,
        cycle_path_ids=path,
        cycle_path_names=[snapshot.name_of(module_id) for module_id in path],
    )
    logger.warning(f"Circular dependency from {start_id}: {result.describe()}")
    return result
