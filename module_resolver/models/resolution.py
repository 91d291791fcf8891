"""Resolution result models."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from module_resolver.models.module import DependencyType


class DependencyStatus(str, Enum):
    """Resolution status of a single dependency."""

    INSTALLED = "installed"
    AVAILABLE = "available"
    MISSING = "missing"
    VERSION_MISMATCH = "version_mismatch"
    NOT_PUBLISHED = "not_published"


class Severity(str, Enum):
    """Conflict severity levels."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class DependencyNode:
    """Dependency edge enriched with resolved target module info.

    Attributes:
        module_id: ID of the dependency module.
        module_name: Display name of the dependency module.
        module_slug: Slug of the dependency module.
        version: Published version of the dependency module.
        status: Resolution status.
        dependency_type: Kind of dependency.
        installed_version: Version installed on the target, if known.
        min_version: Minimum compatible version.
        max_version: Maximum compatible version.
    """

    module_id: str
    module_name: str
    module_slug: str
    version: str
    status: DependencyStatus
    dependency_type: DependencyType
    installed_version: Optional[str] = None
    min_version: Optional[str] = None
    max_version: Optional[str] = None


@dataclass
class DependencyConflict:
    """Classified finding produced during resolution.

    Attributes:
        module_id: ID of the module the finding is about.
        module_name: Display name of that module.
        reason: Human-readable description.
        severity: Whether the finding blocks installation.
        resolution: Suggested fix.
    """

    module_id: str
    module_name: str
    reason: str
    severity: Severity
    resolution: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


@dataclass
class ResolutionResult:
    """Result of resolving a module for installation on a target.

    Attributes:
        success: Whether resolution produced no error conflicts.
        can_install: Whether the module may be installed.
        required: Required dependencies.
        optional: Optional dependencies.
        peer: Peer dependencies.
        conflicts: Classified findings.
        install_order: Module IDs in install sequence, requested module last.
        warnings: Advisory messages.
    """

    success: bool = True
    can_install: bool = True
    required: list[DependencyNode] = field(default_factory=list)
    optional: list[DependencyNode] = field(default_factory=list)
    peer: list[DependencyNode] = field(default_factory=list)
    conflicts: list[DependencyConflict] = field(default_factory=list)
    install_order: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def errors(self) -> list[DependencyConflict]:
        """Error-severity conflicts."""
        return [c for c in self.conflicts if c.is_error]

    def bucket(self, dependency_type: DependencyType) -> list[DependencyNode]:
        """Get the dependency list matching a dependency type.

        Args:
            dependency_type: Kind of dependency.

        Returns:
            The result list holding nodes of that type.
        """
        if dependency_type == DependencyType.REQUIRED:
            return self.required
        if dependency_type == DependencyType.OPTIONAL:
            return self.optional
        return self.peer

    def pending_install_order(self, installed_ids: Iterable[str]) -> list[str]:
        """Install order without modules the target already has.

        The resolver always lists every required module; dropping the ones
        already installed is left to the installation workflow.

        Args:
            installed_ids: Module IDs installed on the target.

        Returns:
            Filtered install order.
        """
        installed = set(installed_ids)
        return [module_id for module_id in self.install_order if module_id not in installed]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-ready plain data."""
        return _plain(asdict(self))


@dataclass
class VersionCheckResult:
    """Outcome of a version range check."""

    compatible: bool
    reason: str
    resolution: Optional[str] = None


@dataclass
class CycleCheckResult:
    """Outcome of cycle detection.

    Attributes:
        has_cycle: Whether a cycle was found.
        cycle_path_ids: Module IDs along the DFS path, closing node last.
        cycle_path_names: Display names for the same path.
    """

    has_cycle: bool
    cycle_path_ids: Optional[list[str]] = None
    cycle_path_names: Optional[list[str]] = None

    def describe(self) -> str:
        """Render the cycle path for diagnostics."""
        path = self.cycle_path_names or self.cycle_path_ids or []
        return " → ".join(path)


@dataclass
class DependencyTreeNode:
    """Node of a bounded-depth dependency tree."""

    module_id: str
    module_name: str
    version: str
    dependency_type: Optional[DependencyType] = None
    dependencies: list["DependencyTreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-ready plain data."""
        return _plain(asdict(self))


@dataclass
class InstallValidation:
    """Result of validating a module for installation."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def _plain(value: Any) -> Any:
    """Replace enum members with their values, recursively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value
