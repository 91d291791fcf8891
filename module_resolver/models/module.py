"""Module graph data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DependencyType(str, Enum):
    """Kinds of declared module dependencies."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    PEER = "peer"


class PublicationStatus(str, Enum):
    """Publication states of a module."""

    PUBLISHED = "published"
    TESTING = "testing"
    DRAFT = "draft"
    DEPRECATED = "deprecated"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class ModuleNode:
    """Snapshot of a module record.

    Attributes:
        id: Unique module ID.
        name: Human-readable module name.
        slug: URL-safe module slug.
        published_version: Currently published semantic version.
        status: Publication status.
    """

    id: str
    name: str
    slug: str = ""
    published_version: Optional[str] = None
    status: PublicationStatus = PublicationStatus.DRAFT

    @property
    def is_published(self) -> bool:
        """Check whether the module is in published state."""
        return self.status == PublicationStatus.PUBLISHED


@dataclass(frozen=True)
class DependencyEdge:
    """Directed dependency declaration between two modules.

    The pair (module_id, depends_on_id) is the edge key; declaring the same
    pair again replaces its attributes.

    Attributes:
        module_id: ID of the module declaring the dependency.
        depends_on_id: ID of the module depended upon.
        dependency_type: Kind of dependency.
        min_version: Minimum compatible version (inclusive).
        max_version: Maximum compatible version (inclusive).
    """

    module_id: str
    depends_on_id: str
    dependency_type: DependencyType = DependencyType.REQUIRED
    min_version: Optional[str] = None
    max_version: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        """Composite key of the edge."""
        return (self.module_id, self.depends_on_id)

    @property
    def is_required(self) -> bool:
        """Check whether the edge gates installation order."""
        return self.dependency_type == DependencyType.REQUIRED
