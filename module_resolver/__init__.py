"""Module dependency resolution engine."""

from module_resolver.config import Settings, get_settings
from module_resolver.exceptions import (
    CircularDependencyError,
    ConcurrentModificationError,
    GraphSourceError,
    InvariantViolationError,
    ResolverException,
    SelfDependencyError,
    UnknownModuleError,
    ValidationError,
)
from module_resolver.models import (
    CycleCheckResult,
    DependencyConflict,
    DependencyEdge,
    DependencyNode,
    DependencyStatus,
    DependencyTreeNode,
    DependencyType,
    InstallValidation,
    ModuleNode,
    PublicationStatus,
    ResolutionResult,
    Severity,
    VersionCheckResult,
)
from module_resolver.resolver import (
    ModuleDependencyResolver,
    check_version_compatibility,
    compare_version_strings,
    parse_version,
)
from module_resolver.services import DependencyGraphService
from module_resolver.source import GraphDataSource, GraphMutationSink, InMemoryGraphSource

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    # Exceptions
    "CircularDependencyError",
    "ConcurrentModificationError",
    "GraphSourceError",
    "InvariantViolationError",
    "ResolverException",
    "SelfDependencyError",
    "UnknownModuleError",
    "ValidationError",
    # Models
    "CycleCheckResult",
    "DependencyConflict",
    "DependencyEdge",
    "DependencyNode",
    "DependencyStatus",
    "DependencyTreeNode",
    "DependencyType",
    "InstallValidation",
    "ModuleNode",
    "PublicationStatus",
    "ResolutionResult",
    "Severity",
    "VersionCheckResult",
    # Resolution
    "ModuleDependencyResolver",
    "DependencyGraphService",
    "check_version_compatibility",
    "compare_version_strings",
    "parse_version",
    # Sources
    "GraphDataSource",
    "GraphMutationSink",
    "InMemoryGraphSource",
]
