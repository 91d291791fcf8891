"""Dependency graph service for edge mutations and listings."""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from module_resolver.config import Settings, get_settings
from module_resolver.exceptions import (
    CircularDependencyError,
    ConcurrentModificationError,
    SelfDependencyError,
    UnknownModuleError,
    ValidationError,
)
from module_resolver.models.module import DependencyEdge, DependencyType, ModuleNode
from module_resolver.models.resolution import DependencyNode, DependencyStatus
from module_resolver.models.schemas import EdgeCreate
from module_resolver.resolver.classifier import build_dependency_node
from module_resolver.resolver.guard import would_create_cycle
from module_resolver.source.base import GraphDataSource, GraphMutationSink

logger = logging.getLogger(__name__)


class DependencyGraphService:
    """Service for declaring, removing and listing module dependencies.

    Handles the only mutating path of the dependency graph: every new edge
    is checked for self-dependency and cycles before it is written.

    Attributes:
        source: Graph data source.
        sink: Graph mutation sink.
        settings: Resolver settings.
    """

    def __init__(
        self,
        source: GraphDataSource,
        sink: GraphMutationSink,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize the service.

        Args:
            source: Graph data source.
            sink: Graph mutation sink.
            settings: Optional settings override.
        """
        self.source = source
        self.sink = sink
        self.settings = settings or get_settings()

    async def add_dependency(
        self,
        module_id: str,
        depends_on_id: str,
        dependency_type: DependencyType = DependencyType.REQUIRED,
        min_version: Optional[str] = None,
        max_version: Optional[str] = None,
    ) -> DependencyEdge:
        """Declare that one module depends on another.

        Re-declaring an existing pair replaces its attributes.

        Args:
            module_id: Module declaring the dependency.
            depends_on_id: Module depended upon.
            dependency_type: Kind of dependency.
            min_version: Minimum compatible version.
            max_version: Maximum compatible version.

        Returns:
            The stored edge.

        Raises:
            SelfDependencyError: If both IDs are the same.
            ValidationError: If the version bounds are malformed.
            UnknownModuleError: If either module does not exist.
            CircularDependencyError: If the edge would close a cycle.
            ConcurrentModificationError: If concurrent writes kept
                invalidating the cycle check.
        """
        # Prevent self-dependency
        if module_id == depends_on_id:
            logger.warning(f"Rejected self-dependency for {module_id}")
            raise SelfDependencyError(module_id)

        try:
            request = EdgeCreate(
                module_id=module_id,
                depends_on_id=depends_on_id,
                dependency_type=dependency_type,
                min_version=min_version,
                max_version=max_version,
            )
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise ValidationError(error["msg"], field=field) from e

        for required_id in (module_id, depends_on_id):
            if await self.source.get_module(required_id) is None:
                raise UnknownModuleError(required_id)

        edge = request.to_edge()
        attempts = self.settings.max_write_attempts
        for attempt in range(1, attempts + 1):
            revision = await self.sink.get_revision()

            if await would_create_cycle(self.source, module_id, depends_on_id):
                logger.warning(
                    f"Rejected dependency {module_id} -> {depends_on_id}: would create a cycle"
                )
                raise CircularDependencyError(
                    "Adding this dependency would create a circular dependency",
                    cycle=[module_id, depends_on_id],
                )

            try:
                await self.sink.upsert_edge(edge, expected_revision=revision)
            except ConcurrentModificationError:
                if attempt == attempts:
                    raise
                logger.warning(
                    f"Graph changed while adding {module_id} -> {depends_on_id}, "
                    f"re-checking (attempt {attempt}/{attempts})"
                )
                continue

            logger.info(
                f"Added {edge.dependency_type.value} dependency {module_id} -> {depends_on_id}"
            )
            return edge

    async def remove_dependency(self, module_id: str, depends_on_id: str) -> bool:
        """Remove a dependency declaration.

        Args:
            module_id: Module declaring the dependency.
            depends_on_id: Module depended upon.

        Returns:
            True if removed, False if the edge did not exist.
        """
        removed = await self.sink.delete_edge(module_id, depends_on_id)
        if removed:
            logger.info(f"Removed dependency {module_id} -> {depends_on_id}")
        return removed

    async def would_create_cycle(self, module_id: str, depends_on_id: str) -> bool:
        """Check whether a new edge would close a cycle.

        Args:
            module_id: Module that would declare the dependency.
            depends_on_id: Module that would be depended upon.

        Returns:
            True if the edge would create a cycle.
        """
        return await would_create_cycle(self.source, module_id, depends_on_id)

    async def get_module_dependencies(self, module_id: str) -> list[DependencyNode]:
        """Get the direct dependencies declared by a module.

        Args:
            module_id: Declaring module.

        Returns:
            One node per edge, describing the depended-upon module.
        """
        edges = await self.source.get_outgoing_edges(module_id)
        modules = await self.source.get_modules(e.depends_on_id for e in edges)
        return [
            _listing_node(edge, modules.get(edge.depends_on_id), edge.depends_on_id)
            for edge in edges
        ]

    async def get_module_dependents(self, module_id: str) -> list[DependencyNode]:
        """Get the modules that depend on a module.

        Args:
            module_id: Depended-upon module.

        Returns:
            One node per edge, describing the dependent module.
        """
        edges = await self.source.get_incoming_edges(module_id)
        modules = await self.source.get_modules(e.module_id for e in edges)
        return [
            _listing_node(edge, modules.get(edge.module_id), edge.module_id)
            for edge in edges
        ]


def _listing_node(
    edge: DependencyEdge,
    module: Optional[ModuleNode],
    module_id: str,
) -> DependencyNode:
    if module is None:
        status = DependencyStatus.MISSING
    elif module.is_published:
        status = DependencyStatus.AVAILABLE
    else:
        status = DependencyStatus.NOT_PUBLISHED
    return build_dependency_node(edge, module, status, module_id=module_id)
