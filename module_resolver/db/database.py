"""Async SQLite database management."""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from module_resolver.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """Async SQLite database manager.

    Handles connection management and schema creation for module records,
    the dependency graph and site installations.

    Attributes:
        db_path: Path to the SQLite database file.
        connection: Active database connection.
    """

    def __init__(self, db_url: Optional[str] = None) -> None:
        """Initialize the database manager.

        Args:
            db_url: Database URL (default: from settings).
        """
        url = db_url or get_settings().database_url
        # Extract path from sqlite:/// URL
        if url.startswith("sqlite:///"):
            self.db_path = Path(url[10:])
        else:
            self.db_path = Path(url)
        self.connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize the database connection and schema.

        Creates the database directory if needed and sets up tables.
        """
        # Ensure directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Connect to database
        self.connection = await aiosqlite.connect(str(self.db_path))
        self.connection.row_factory = aiosqlite.Row

        # Enable foreign keys
        await self.connection.execute("PRAGMA foreign_keys = ON")

        # Create schema
        await self._create_schema()

        logger.info(f"Database initialized at {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self.connection:
            await self.connection.close()
            self.connection = None
            logger.info("Database connection closed")

    async def _create_schema(self) -> None:
        """Create database tables if they don't exist."""
        schema = """
        -- Module records
        CREATE TABLE IF NOT EXISTS module_source (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            slug TEXT NOT NULL DEFAULT '',
            published_version TEXT,
            status TEXT NOT NULL DEFAULT 'draft',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        -- Module inter-dependencies
        CREATE TABLE IF NOT EXISTS module_dependencies_graph (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            module_source_id TEXT NOT NULL REFERENCES module_source(id) ON DELETE CASCADE,
            depends_on_module_id TEXT NOT NULL REFERENCES module_source(id) ON DELETE CASCADE,
            dependency_type TEXT NOT NULL DEFAULT 'required'
                CHECK (dependency_type IN ('required', 'optional', 'peer')),
            min_version TEXT,
            max_version TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(module_source_id, depends_on_module_id),
            CHECK (module_source_id != depends_on_module_id)
        );

        -- Installations per site (read by the resolver only)
        CREATE TABLE IF NOT EXISTS site_module_installations (
            site_id TEXT NOT NULL,
            module_id TEXT NOT NULL,
            is_enabled BOOLEAN DEFAULT 1,
            installed_version TEXT,
            installed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (site_id, module_id)
        );

        -- Graph revision for optimistic concurrency
        CREATE TABLE IF NOT EXISTS graph_meta (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            revision INTEGER NOT NULL DEFAULT 0
        );
        INSERT OR IGNORE INTO graph_meta (id, revision) VALUES (1, 0);

        -- Create indexes for performance
        CREATE INDEX IF NOT EXISTS idx_deps_source ON module_dependencies_graph(module_source_id);
        CREATE INDEX IF NOT EXISTS idx_deps_target ON module_dependencies_graph(depends_on_module_id);
        CREATE INDEX IF NOT EXISTS idx_installations_site ON site_module_installations(site_id);
        """
        await self.connection.executescript(schema)
        await self.connection.commit()

    async def execute(
        self,
        query: str,
        params: tuple = (),
    ) -> aiosqlite.Cursor:
        """Execute a query and return the cursor.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            Database cursor.
        """
        return await self.connection.execute(query, params)

    async def fetch_one(
        self,
        query: str,
        params: tuple = (),
    ) -> Optional[aiosqlite.Row]:
        """Fetch a single row.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            Single row or None.
        """
        cursor = await self.connection.execute(query, params)
        return await cursor.fetchone()

    async def fetch_all(
        self,
        query: str,
        params: tuple = (),
    ) -> list[aiosqlite.Row]:
        """Fetch all rows.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            List of rows.
        """
        cursor = await self.connection.execute(query, params)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.connection.commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self.connection.rollback()

    async def health_check(self) -> bool:
        """Check database connectivity.

        Returns:
            True if database is healthy, False otherwise.
        """
        try:
            if not self.connection:
                return False
            cursor = await self.connection.execute("SELECT 1")
            result = await cursor.fetchone()
            return result is not None and result[0] == 1
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
