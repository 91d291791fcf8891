"""Module graph repository for database operations."""

import logging
import sqlite3
from typing import Iterable, Optional

from module_resolver.db.database import Database
from module_resolver.exceptions import ConcurrentModificationError, GraphSourceError
from module_resolver.models.module import (
    DependencyEdge,
    DependencyType,
    ModuleNode,
    PublicationStatus,
)
from module_resolver.source.base import GraphDataSource, GraphMutationSink

logger = logging.getLogger(__name__)

# Stay below SQLite's default host parameter limit
_BATCH_SIZE = 500

_SUBGRAPH_QUERY = """
WITH RECURSIVE reach(id) AS (
    SELECT ?
    UNION
    SELECT g.depends_on_module_id
    FROM module_dependencies_graph g
    JOIN reach r ON g.module_source_id = r.id
)
SELECT g.* FROM module_dependencies_graph g
WHERE g.module_source_id IN (SELECT id FROM reach)
ORDER BY g.id
"""

_BOUNDED_SUBGRAPH_QUERY = """
WITH RECURSIVE reach(id, depth) AS (
    SELECT ?, 0
    UNION
    SELECT g.depends_on_module_id, r.depth + 1
    FROM module_dependencies_graph g
    JOIN reach r ON g.module_source_id = r.id
    WHERE r.depth < ?
)
SELECT g.* FROM module_dependencies_graph g
WHERE g.module_source_id IN (SELECT id FROM reach WHERE depth < ?)
ORDER BY g.id
"""


class ModuleRepository(GraphDataSource, GraphMutationSink):
    """Repository serving the dependency graph from SQLite.

    Attributes:
        db: Database instance.
    """

    name = "sqlite"

    def __init__(self, db: Database) -> None:
        """Initialize the repository.

        Args:
            db: Database instance.
        """
        self.db = db

    async def _fetch_all(self, operation: str, query: str, params: tuple = ()) -> list:
        if self.db.connection is None:
            raise GraphSourceError("database is not initialized", operation)
        try:
            return await self.db.fetch_all(query, params)
        except sqlite3.Error as e:
            raise GraphSourceError(str(e), operation) from e

    async def save_module(self, module: ModuleNode) -> ModuleNode:
        """Create or update a module record.

        Args:
            module: Module to store.

        Returns:
            Stored module.
        """
        query = """
        INSERT INTO module_source (id, name, slug, published_version, status)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            name = excluded.name,
            slug = excluded.slug,
            published_version = excluded.published_version,
            status = excluded.status
        """
        await self.db.execute(
            query,
            (
                module.id,
                module.name,
                module.slug,
                module.published_version,
                module.status.value,
            ),
        )
        await self.db.commit()
        logger.info(f"Saved module: {module.id}")
        return module

    async def get_module(self, module_id: str) -> Optional[ModuleNode]:
        rows = await self._fetch_all(
            "get_module",
            "SELECT * FROM module_source WHERE id = ?",
            (module_id,),
        )
        return self._row_to_module(rows[0]) if rows else None

    async def get_modules(self, module_ids: Iterable[str]) -> dict[str, ModuleNode]:
        ids = list(dict.fromkeys(module_ids))
        modules: dict[str, ModuleNode] = {}
        for start in range(0, len(ids), _BATCH_SIZE):
            batch = ids[start:start + _BATCH_SIZE]
            placeholders = ", ".join("?" for _ in batch)
            rows = await self._fetch_all(
                "get_modules",
                f"SELECT * FROM module_source WHERE id IN ({placeholders})",
                tuple(batch),
            )
            for row in rows:
                modules[row["id"]] = self._row_to_module(row)
        return modules

    async def get_outgoing_edges(self, module_id: str) -> list[DependencyEdge]:
        rows = await self._fetch_all(
            "get_outgoing_edges",
            "SELECT * FROM module_dependencies_graph WHERE module_source_id = ? ORDER BY id",
            (module_id,),
        )
        return [self._row_to_edge(row) for row in rows]

    async def get_incoming_edges(self, module_id: str) -> list[DependencyEdge]:
        rows = await self._fetch_all(
            "get_incoming_edges",
            "SELECT * FROM module_dependencies_graph WHERE depends_on_module_id = ? ORDER BY id",
            (module_id,),
        )
        return [self._row_to_edge(row) for row in rows]

    async def get_subgraph(
        self,
        module_id: str,
        max_depth: Optional[int] = None,
    ) -> list[DependencyEdge]:
        if max_depth is None:
            rows = await self._fetch_all("get_subgraph", _SUBGRAPH_QUERY, (module_id,))
        else:
            rows = await self._fetch_all(
                "get_subgraph",
                _BOUNDED_SUBGRAPH_QUERY,
                (module_id, max_depth, max_depth),
            )
        return [self._row_to_edge(row) for row in rows]

    async def get_installed_modules(self, target_id: str) -> set[str]:
        return set(await self.get_installed_versions(target_id))

    async def get_installed_versions(self, target_id: str) -> dict[str, Optional[str]]:
        rows = await self._fetch_all(
            "get_installed_modules",
            """
            SELECT module_id, installed_version FROM site_module_installations
            WHERE site_id = ? AND is_enabled = 1
            """,
            (target_id,),
        )
        return {row["module_id"]: row["installed_version"] for row in rows}

    async def get_revision(self) -> int:
        rows = await self._fetch_all(
            "get_revision",
            "SELECT revision FROM graph_meta WHERE id = 1",
        )
        return rows[0]["revision"] if rows else 0

    async def upsert_edge(
        self,
        edge: DependencyEdge,
        expected_revision: Optional[int] = None,
    ) -> None:
        if self.db.connection is None:
            raise GraphSourceError("database is not initialized", "upsert_edge")

        try:
            # Revision bump and edge write commit in one transaction
            if expected_revision is None:
                await self.db.execute(
                    "UPDATE graph_meta SET revision = revision + 1 WHERE id = 1"
                )
            else:
                cursor = await self.db.execute(
                    "UPDATE graph_meta SET revision = revision + 1 WHERE id = 1 AND revision = ?",
                    (expected_revision,),
                )
                if cursor.rowcount == 0:
                    await self.db.rollback()
                    raise ConcurrentModificationError(
                        expected_revision, await self.get_revision()
                    )

            await self.db.execute(
                """
                INSERT INTO module_dependencies_graph (
                    module_source_id, depends_on_module_id, dependency_type,
                    min_version, max_version
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(module_source_id, depends_on_module_id) DO UPDATE SET
                    dependency_type = excluded.dependency_type,
                    min_version = excluded.min_version,
                    max_version = excluded.max_version
                """,
                (
                    edge.module_id,
                    edge.depends_on_id,
                    edge.dependency_type.value,
                    edge.min_version,
                    edge.max_version,
                ),
            )
            await self.db.commit()
        except sqlite3.Error as e:
            await self.db.rollback()
            raise GraphSourceError(str(e), "upsert_edge") from e

        logger.debug(f"Stored edge {edge.module_id} -> {edge.depends_on_id}")

    async def delete_edge(self, module_id: str, depends_on_id: str) -> bool:
        if self.db.connection is None:
            raise GraphSourceError("database is not initialized", "delete_edge")

        try:
            cursor = await self.db.execute(
                """
                DELETE FROM module_dependencies_graph
                WHERE module_source_id = ? AND depends_on_module_id = ?
                """,
                (module_id, depends_on_id),
            )
            deleted = cursor.rowcount > 0
            if deleted:
                await self.db.execute(
                    "UPDATE graph_meta SET revision = revision + 1 WHERE id = 1"
                )
            await self.db.commit()
        except sqlite3.Error as e:
            await self.db.rollback()
            raise GraphSourceError(str(e), "delete_edge") from e

        return deleted

    def _row_to_module(self, row) -> ModuleNode:
        """Convert a database row to a ModuleNode.

        Args:
            row: Database row.

        Returns:
            ModuleNode object.
        """
        return ModuleNode(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            published_version=row["published_version"],
            status=PublicationStatus(row["status"]),
        )

    def _row_to_edge(self, row) -> DependencyEdge:
        """Convert a database row to a DependencyEdge.

        Args:
            row: Database row.

        Returns:
            DependencyEdge object.
        """
        return DependencyEdge(
            module_id=row["module_source_id"],
            depends_on_id=row["depends_on_module_id"],
            dependency_type=DependencyType(row["dependency_type"]),
            min_version=row["min_version"],
            max_version=row["max_version"],
        )
