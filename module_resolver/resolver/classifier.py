"""Classification of dependency edges into statuses and conflicts."""

from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from module_resolver.models.module import DependencyEdge, DependencyType, ModuleNode
from module_resolver.models.resolution import (
    DependencyConflict,
    DependencyNode,
    DependencyStatus,
    Severity,
)
from module_resolver.resolver.graph import GraphSnapshot
from module_resolver.resolver.semver import check_version_compatibility

UNKNOWN_NAME = "Unknown"
UNKNOWN_VERSION = "0.0.0"


@dataclass
class Classification:
    """Outcome of classifying one dependency edge.

    Attributes:
        node: The dependency enriched with its status.
        conflicts: Findings raised by the edge.
        warnings: Advisory messages raised by the edge.
    """

    node: DependencyNode
    conflicts: list[DependencyConflict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ConflictClassifier:
    """Turns dependency edges plus live install state into findings.

    Missing and unpublished dependencies, and version mismatches, are errors
    for required edges and warnings for optional or peer edges. A published
    required dependency that is not installed yet only yields a warning: it
    is expected to be installed along with the dependent module.
    """

    def classify(
        self,
        edge: DependencyEdge,
        target: Optional[ModuleNode],
        installed_versions: dict[str, Optional[str]],
        via: Optional[str] = None,
    ) -> Classification:
        """Classify a single dependency edge.

        Args:
            edge: Edge being classified.
            target: Record of the depended-upon module, None if dangling.
            installed_versions: Enabled modules on the target with their
                installed versions (None when not tracked).
            via: Name of the intermediate module declaring the edge, for
                transitive dependencies.

        Returns:
            Classification with node, conflicts and warnings.
        """
        severity = Severity.ERROR if edge.is_required else Severity.WARNING
        suffix = f" (required by {via})" if via else ""

        if target is None:
            node = build_dependency_node(edge, None, DependencyStatus.MISSING)
            return Classification(
                node=node,
                conflicts=[
                    DependencyConflict(
                        module_id=edge.depends_on_id,
                        module_name=UNKNOWN_NAME,
                        reason=f"Dependency module not found in database{suffix}",
                        severity=severity,
                    )
                ],
            )

        if not target.is_published:
            node = build_dependency_node(edge, target, DependencyStatus.NOT_PUBLISHED)
            label = edge.dependency_type.value.capitalize()
            return Classification(
                node=node,
                conflicts=[
                    DependencyConflict(
                        module_id=target.id,
                        module_name=target.name,
                        reason=(
                            f'{label} module "{target.name}" is not published '
                            f"(status: {target.status.value}){suffix}"
                        ),
                        severity=severity,
                    )
                ],
            )

        if target.id in installed_versions:
            installed_version = installed_versions[target.id]
            node = build_dependency_node(
                edge, target, DependencyStatus.INSTALLED, installed_version
            )
            if installed_version is None:
                # No version tracking: presence satisfies the constraint
                return Classification(node=node)
            check = check_version_compatibility(
                installed_version, edge.min_version, edge.max_version
            )
        else:
            node = build_dependency_node(edge, target, DependencyStatus.AVAILABLE)
            check = check_version_compatibility(
                node.version, edge.min_version, edge.max_version, label="Published"
            )

        if not check.compatible:
            node.status = DependencyStatus.VERSION_MISMATCH
            return Classification(
                node=node,
                conflicts=[
                    DependencyConflict(
                        module_id=target.id,
                        module_name=target.name,
                        reason=f"{check.reason}{suffix}",
                        severity=severity,
                        resolution=check.resolution,
                    )
                ],
            )

        result = Classification(node=node)
        if node.status == DependencyStatus.AVAILABLE and edge.is_required:
            result.warnings.append(
                f'Required dependency "{target.name}"{suffix} is not installed and will be added'
            )
        return result

    def classify_transitive(
        self,
        snapshot: GraphSnapshot,
        root_id: str,
        installed_versions: dict[str, Optional[str]],
        reported: Optional[set[str]] = None,
    ) -> tuple[list[DependencyConflict], list[str]]:
        """Check required edges deeper in the chain than the root's own.

        Walks the root's required dependencies breadth-first and classifies
        every required edge they declare. Missing, unpublished and auto-add
        findings are reported once per module; version checks run per edge.

        Args:
            snapshot: Graph snapshot of the root's subgraph.
            root_id: Module being installed.
            installed_versions: Enabled modules on the target.
            reported: Module IDs already classified through a required edge.

        Returns:
            Tuple of (conflicts, warnings).
        """
        reported = set(reported or ())
        conflicts: list[DependencyConflict] = []
        warnings: list[str] = []

        expanded = {root_id}
        queue = deque(
            e.depends_on_id for e in snapshot.edges_from(root_id, (DependencyType.REQUIRED,))
        )

        while queue:
            parent_id = queue.popleft()
            if parent_id in expanded:
                continue
            expanded.add(parent_id)
            parent_name = snapshot.name_of(parent_id)

            for edge in snapshot.edges_from(parent_id, (DependencyType.REQUIRED,)):
                outcome = self.classify(
                    edge,
                    snapshot.module(edge.depends_on_id),
                    installed_versions,
                    via=parent_name,
                )
                mismatch = outcome.node.status == DependencyStatus.VERSION_MISMATCH
                if mismatch or edge.depends_on_id not in reported:
                    conflicts.extend(outcome.conflicts)
                    warnings.extend(outcome.warnings)
                if not mismatch:
                    reported.add(edge.depends_on_id)
                queue.append(edge.depends_on_id)

        return conflicts, warnings


def build_dependency_node(
    edge: DependencyEdge,
    target: Optional[ModuleNode],
    status: DependencyStatus,
    installed_version: Optional[str] = None,
    module_id: Optional[str] = None,
) -> DependencyNode:
    """Describe the module on one end of an edge.

    Args:
        edge: Edge carrying the dependency attributes.
        target: Record of the described module, None if dangling.
        status: Resolution status.
        installed_version: Version installed on the target, if known.
        module_id: ID of the described module (default: the edge target).

    Returns:
        DependencyNode with "Unknown" / "0.0.0" placeholders for dangling rows.
    """
    return DependencyNode(
        module_id=target.id if target else (module_id or edge.depends_on_id),
        module_name=target.name if target else UNKNOWN_NAME,
        module_slug=target.slug if target else "",
        version=(target.published_version if target else None) or UNKNOWN_VERSION,
        status=status,
        dependency_type=edge.dependency_type,
        installed_version=installed_version,
        min_version=edge.min_version,
        max_version=edge.max_version,
    )
