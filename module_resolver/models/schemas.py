"""Pydantic models for graph mutation input."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from module_resolver.models.module import DependencyEdge, DependencyType
from module_resolver.resolver.semver import compare_version_strings

VERSION_PATTERN = r"^\d+(\.\d+){0,2}(-[a-zA-Z0-9.]+)?$"


class EdgeCreate(BaseModel):
    """Request model for declaring a module dependency.

    Attributes:
        module_id: ID of the module declaring the dependency.
        depends_on_id: ID of the module depended upon.
        dependency_type: Kind of dependency.
        min_version: Minimum compatible version.
        max_version: Maximum compatible version.
    """

    module_id: str = Field(..., min_length=1)
    depends_on_id: str = Field(..., min_length=1)
    dependency_type: DependencyType = DependencyType.REQUIRED
    min_version: Optional[str] = Field(default=None, pattern=VERSION_PATTERN)
    max_version: Optional[str] = Field(default=None, pattern=VERSION_PATTERN)

    @field_validator("min_version", "max_version", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @model_validator(mode="after")
    def check_range(self) -> "EdgeCreate":
        if (
            self.min_version
            and self.max_version
            and compare_version_strings(self.min_version, self.max_version) > 0
        ):
            raise ValueError(
                f"min_version {self.min_version} is greater than "
                f"max_version {self.max_version}"
            )
        return self

    def to_edge(self) -> DependencyEdge:
        """Build the graph edge for this request."""
        return DependencyEdge(
            module_id=self.module_id,
            depends_on_id=self.depends_on_id,
            dependency_type=self.dependency_type,
            min_version=self.min_version,
            max_version=self.max_version,
        )
