"""Dependency resolution for module installation."""

import logging
from typing import Iterable, Optional

from module_resolver.config import Settings, get_settings
from module_resolver.exceptions import CircularDependencyError, InvariantViolationError
from module_resolver.models.module import DependencyType
from module_resolver.models.resolution import (
    CycleCheckResult,
    DependencyConflict,
    DependencyTreeNode,
    InstallValidation,
    ResolutionResult,
    Severity,
)
from module_resolver.resolver.classifier import (
    UNKNOWN_NAME,
    UNKNOWN_VERSION,
    ConflictClassifier,
)
from module_resolver.resolver.cycles import find_cycle
from module_resolver.resolver.graph import GraphSnapshot
from module_resolver.resolver.ordering import build_install_order, build_multi_module_order
from module_resolver.source.base import GraphDataSource

logger = logging.getLogger(__name__)


class ModuleDependencyResolver:
    """Resolver deciding whether and in which order a module can be installed.

    Every call loads its own snapshot of the reachable subgraph and keeps
    no state between calls, so one instance can serve concurrent requests.

    Attributes:
        source: Graph data source.
        settings: Resolver settings.
        classifier: Edge classifier.
    """

    def __init__(
        self,
        source: GraphDataSource,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            source: Graph data source.
            settings: Optional settings override.
        """
        self.source = source
        self.settings = settings or get_settings()
        self.classifier = ConflictClassifier()

    @property
    def cycle_types(self) -> Optional[tuple[DependencyType, ...]]:
        """Edge types followed by cycle detection (None means all)."""
        if self.settings.strict_cycle_detection:
            return None
        return (DependencyType.REQUIRED,)

    async def resolve(self, module_id: str, target_id: str) -> ResolutionResult:
        """Resolve a module's dependencies for installation on a target.

        Never raises for graph conditions or data source failures; those come
        back as error conflicts.

        Args:
            module_id: Module to install.
            target_id: Installation target (e.g., a site).

        Returns:
            ResolutionResult with classified dependencies, conflicts and the
            install order (empty when installation is blocked).

        Raises:
            InvariantViolationError: If a cycle slipped past cycle detection.
        """
        try:
            return await self._resolve(module_id, target_id)
        except InvariantViolationError:
            raise
        except Exception as e:
            logger.error(f"Resolution failed for {module_id} on {target_id}: {e}")
            return ResolutionResult(
                success=False,
                can_install=False,
                conflicts=[
                    DependencyConflict(
                        module_id=module_id,
                        module_name=UNKNOWN_NAME,
                        reason=str(e) or "Unknown error during resolution",
                        severity=Severity.ERROR,
                    )
                ],
            )

    async def _resolve(self, module_id: str, target_id: str) -> ResolutionResult:
        result = ResolutionResult()
        snapshot = await GraphSnapshot.load(self.source, module_id)
        module = snapshot.module(module_id)

        # Check for circular dependencies first
        cycle = find_cycle(snapshot, module_id, self.cycle_types)
        if cycle.has_cycle:
            result.success = False
            result.can_install = False
            result.conflicts.append(
                DependencyConflict(
                    module_id=module_id,
                    module_name=module.name if module else UNKNOWN_NAME,
                    reason=f"Circular dependency detected: {cycle.describe()}",
                    severity=Severity.ERROR,
                    resolution="Remove one of the dependencies along the cycle",
                )
            )
            return result

        if module is None:
            result.success = False
            result.can_install = False
            result.conflicts.append(
                DependencyConflict(
                    module_id=module_id,
                    module_name=UNKNOWN_NAME,
                    reason="Module not found in database",
                    severity=Severity.ERROR,
                )
            )
            return result

        edges = snapshot.edges_from(module_id)
        if not edges:
            result.install_order = [module_id]
            return result

        installed = await self.source.get_installed_versions(target_id)

        reported: set[str] = set()
        for edge in edges:
            outcome = self.classifier.classify(
                edge, snapshot.module(edge.depends_on_id), installed
            )
            result.bucket(edge.dependency_type).append(outcome.node)
            result.conflicts.extend(outcome.conflicts)
            result.warnings.extend(outcome.warnings)
            # Optional and peer findings must not hide a deeper required one
            if edge.is_required:
                reported.add(edge.depends_on_id)

        conflicts, warnings = self.classifier.classify_transitive(
            snapshot, module_id, installed, reported
        )
        result.conflicts.extend(conflicts)
        result.warnings.extend(warnings)

        install_order = build_install_order(snapshot, module_id)

        result.success = not result.errors
        result.can_install = result.success
        if result.can_install:
            result.install_order = install_order

        logger.debug(
            f"Resolved {module_id} on {target_id}: can_install={result.can_install}, "
            f"order={result.install_order}"
        )
        return result

    async def validate_for_install(self, module_id: str, target_id: str) -> InstallValidation:
        """Validate that all required dependencies are satisfied.

        Args:
            module_id: Module to install.
            target_id: Installation target.

        Returns:
            InstallValidation with one "<module>: <reason>" line per error.
        """
        resolution = await self.resolve(module_id, target_id)
        errors = [f"{c.module_name}: {c.reason}" for c in resolution.errors]
        return InstallValidation(valid=not errors, errors=errors)

    async def check_circular_dependencies(self, module_id: str) -> CycleCheckResult:
        """Check whether a cycle is reachable from a module.

        Args:
            module_id: Module to start from.

        Returns:
            CycleCheckResult with the cycle path when one exists.
        """
        snapshot = await GraphSnapshot.load(self.source, module_id)
        return find_cycle(snapshot, module_id, self.cycle_types)

    async def get_multi_module_install_order(self, module_ids: Iterable[str]) -> list[str]:
        """Get one installation order for several modules.

        Args:
            module_ids: Modules to install, in request order.

        Returns:
            Combined install order, each module listed once.

        Raises:
            CircularDependencyError: If a requested module has a required
                dependency cycle.
        """
        module_ids = list(module_ids)
        snapshot = await GraphSnapshot.load_many(self.source, module_ids)

        for module_id in module_ids:
            cycle = find_cycle(snapshot, module_id, (DependencyType.REQUIRED,))
            if cycle.has_cycle:
                raise CircularDependencyError(
                    f"Circular dependency detected: {cycle.describe()}",
                    cycle=cycle.cycle_path_ids,
                )

        return build_multi_module_order(snapshot, module_ids)

    async def get_dependency_tree(
        self,
        module_id: str,
        max_depth: Optional[int] = None,
    ) -> DependencyTreeNode:
        """Get the dependency tree of a module for visualization.

        Expansion stops at max_depth, so cyclic graphs stay finite.

        Args:
            module_id: Root module.
            max_depth: Levels to expand (default from settings).

        Returns:
            Root DependencyTreeNode.
        """
        if max_depth is None:
            max_depth = self.settings.dependency_tree_max_depth
        snapshot = await GraphSnapshot.load(self.source, module_id, max_depth=max_depth)

        def build(
            current_id: str,
            depth: int,
            dependency_type: Optional[DependencyType],
        ) -> DependencyTreeNode:
            module = snapshot.module(current_id)
            node = DependencyTreeNode(
                module_id=module.id if module else current_id,
                module_name=module.name if module else UNKNOWN_NAME,
                version=(module.published_version if module else None) or UNKNOWN_VERSION,
                dependency_type=dependency_type,
            )
            if depth >= max_depth:
                return node
            for edge in snapshot.edges_from(current_id):
                node.dependencies.append(
                    build(edge.depends_on_id, depth + 1, edge.dependency_type)
                )
            return node

        return build(module_id, 0, None)
