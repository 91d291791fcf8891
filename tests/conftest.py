"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio

from module_resolver.config import Settings
from module_resolver.db.database import Database
from module_resolver.db.repositories.module_repo import ModuleRepository
from module_resolver.models.module import (
    DependencyEdge,
    DependencyType,
    ModuleNode,
    PublicationStatus,
)
from module_resolver.source.memory import InMemoryGraphSource

SITE = "site-1"


class GraphBuilder:
    """Small helper for declaring test graphs on an in-memory source.

    Attributes:
        source: The in-memory source being populated.
    """

    def __init__(self) -> None:
        self.source = InMemoryGraphSource()

    def module(
        self,
        module_id: str,
        version: Optional[str] = "1.0.0",
        status: PublicationStatus = PublicationStatus.PUBLISHED,
        name: Optional[str] = None,
    ) -> ModuleNode:
        return self.source.add_module(
            ModuleNode(
                id=module_id,
                name=name or module_id.upper(),
                slug=module_id,
                published_version=version,
                status=status,
            )
        )

    def edge(
        self,
        module_id: str,
        depends_on_id: str,
        dependency_type: DependencyType = DependencyType.REQUIRED,
        min_version: Optional[str] = None,
        max_version: Optional[str] = None,
    ) -> DependencyEdge:
        edge = DependencyEdge(
            module_id=module_id,
            depends_on_id=depends_on_id,
            dependency_type=dependency_type,
            min_version=min_version,
            max_version=max_version,
        )
        self.source.edges[edge.key] = edge
        return edge

    def install(
        self,
        module_id: str,
        version: Optional[str] = None,
        target_id: str = SITE,
        enabled: bool = True,
    ) -> None:
        self.source.install(target_id, module_id, version=version, enabled=enabled)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with temporary database.

    Args:
        tmp_path: Pytest temporary path fixture.

    Returns:
        Test settings.
    """
    db_path = tmp_path / "test_modules.db"
    return Settings(
        database_url=f"sqlite:///{db_path}",
        dependency_tree_max_depth=5,
        strict_cycle_detection=True,
        max_write_attempts=3,
        debug=True,
    )


@pytest.fixture
def graph() -> GraphBuilder:
    """Empty in-memory graph."""
    return GraphBuilder()


@pytest_asyncio.fixture
async def database(test_settings: Settings):
    """Initialized SQLite database in a temporary directory."""
    db = Database(test_settings.database_url)
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def repo(database: Database) -> ModuleRepository:
    """Module repository on the temporary database."""
    return ModuleRepository(database)
