"""Cycle guard for new dependency edges."""

from collections import deque

from module_resolver.resolver.graph import GraphSnapshot
from module_resolver.source.base import GraphDataSource


def is_reachable(snapshot: GraphSnapshot, start_id: str, goal_id: str) -> bool:
    """Check whether goal can be reached from start over existing edges.

    Args:
        snapshot: Graph snapshot containing start's subgraph.
        start_id: Module to search from.
        goal_id: Module to look for.

    Returns:
        True if goal is start or reachable from it.
    """
    visited: set[str] = set()
    queue = deque([start_id])

    while queue:
        current = queue.popleft()
        if current == goal_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        queue.extend(edge.depends_on_id for edge in snapshot.edges_from(current))

    return False


async def would_create_cycle(source: GraphDataSource, from_id: str, to_id: str) -> bool:
    """Check whether adding the edge from_id -> to_id would close a cycle.

    If to_id already depends on from_id, directly or through any chain of
    dependencies of any type, the new edge completes a cycle.

    Args:
        source: Graph data source.
        from_id: Module that would declare the dependency.
        to_id: Module that would be depended upon.

    Returns:
        True if the edge would create a cycle.
    """
    snapshot = await GraphSnapshot.load(source, to_id)
    return is_reachable(snapshot, to_id, from_id)
