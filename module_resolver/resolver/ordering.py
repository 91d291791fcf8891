"""Installation order via topological sort over required dependencies."""

from typing import Iterable

from module_resolver.exceptions import InvariantViolationError
from module_resolver.models.module import DependencyType
from module_resolver.resolver.graph import GraphSnapshot

_ORDERING_TYPES = (DependencyType.REQUIRED,)


def build_install_order(snapshot: GraphSnapshot, start_id: str) -> list[str]:
    """Build the installation order for a module.

    Only required dependencies take part; optional and peer dependencies can
    be installed independently.

    Args:
        snapshot: Graph snapshot containing the module's subgraph.
        start_id: Module being installed.

    Returns:
        Module IDs with every dependency before its dependents, start last.

    Raises:
        InvariantViolationError: If a required-edge cycle is reached.
    """
    order: list[str] = []
    visited: set[str] = set()
    visiting: set[str] = set()

    visiting.add(start_id)
    # Explicit stack of (module, remaining required edges)
    stack = [(start_id, iter(snapshot.edges_from(start_id, _ORDERING_TYPES)))]

    while stack:
        module_id, edges = stack[-1]
        for edge in edges:
            child_id = edge.depends_on_id
            if child_id in visited:
                continue
            if child_id in visiting:
                raise InvariantViolationError(
                    f"Circular dependency detected during topological sort at {child_id}"
                )
            visiting.add(child_id)
            stack.append((child_id, iter(snapshot.edges_from(child_id, _ORDERING_TYPES))))
            break
        else:
            stack.pop()
            visiting.remove(module_id)
            visited.add(module_id)
            order.append(module_id)

    return order


def build_multi_module_order(snapshot: GraphSnapshot, module_ids: Iterable[str]) -> list[str]:
    """Build one installation order for several modules.

    Per-module orders are concatenated in request order and de-duplicated by
    first occurrence.

    Args:
        snapshot: Graph snapshot covering every requested module.
        module_ids: Modules being installed.

    Returns:
        Combined installation order.
    """
    combined: dict[str, None] = {}
    for module_id in module_ids:
        for ordered_id in build_install_order(snapshot, module_id):
            combined.setdefault(ordered_id, None)
    return list(combined)
