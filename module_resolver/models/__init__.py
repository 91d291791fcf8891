"""Data models for the module resolver."""

from module_resolver.models.module import (
    DependencyEdge,
    DependencyType,
    ModuleNode,
    PublicationStatus,
)
from module_resolver.models.resolution import (
    CycleCheckResult,
    DependencyConflict,
    DependencyNode,
    DependencyStatus,
    DependencyTreeNode,
    InstallValidation,
    ResolutionResult,
    Severity,
    VersionCheckResult,
)

__all__ = [
    # Graph models
    "DependencyEdge",
    "DependencyType",
    "ModuleNode",
    "PublicationStatus",
    # Resolution models
    "CycleCheckResult",
    "DependencyConflict",
    "DependencyNode",
    "DependencyStatus",
    "DependencyTreeNode",
    "InstallValidation",
    "ResolutionResult",
    "Severity",
    "VersionCheckResult",
]
