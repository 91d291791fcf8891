"""Tests for the SQLite module repository."""

import pytest

from module_resolver.db.database import Database
from module_resolver.db.repositories.module_repo import ModuleRepository
from module_resolver.exceptions import (
    CircularDependencyError,
    ConcurrentModificationError,
    GraphSourceError,
)
from module_resolver.models.module import (
    DependencyEdge,
    DependencyType,
    ModuleNode,
    PublicationStatus,
)
from module_resolver.models.resolution import DependencyStatus
from module_resolver.resolver.dependency import ModuleDependencyResolver
from module_resolver.services.graph_service import DependencyGraphService


async def seed(repo: ModuleRepository, *module_ids: str, status=PublicationStatus.PUBLISHED) -> None:
    for module_id in module_ids:
        await repo.save_module(
            ModuleNode(
                id=module_id,
                name=module_id.upper(),
                slug=module_id,
                published_version="1.0.0",
                status=status,
            )
        )


async def install(database: Database, site_id: str, module_id: str, version=None, enabled=True):
    await database.execute(
        """
        INSERT INTO site_module_installations (site_id, module_id, is_enabled, installed_version)
        VALUES (?, ?, ?, ?)
        """,
        (site_id, module_id, 1 if enabled else 0, version),
    )
    await database.commit()


class TestDatabase:
    """Tests for the database manager."""

    @pytest.mark.asyncio
    async def test_health_check(self, database: Database) -> None:
        assert await database.health_check()

    @pytest.mark.asyncio
    async def test_health_check_without_connection(self, test_settings) -> None:
        assert not await Database(test_settings.database_url).health_check()

    @pytest.mark.asyncio
    async def test_schema_is_idempotent(self, database: Database) -> None:
        await database._create_schema()
        row = await database.fetch_one("SELECT revision FROM graph_meta WHERE id = 1")
        assert row["revision"] == 0


class TestModuleRecords:
    """Tests for module record access."""

    @pytest.mark.asyncio
    async def test_save_and_get_module(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", status=PublicationStatus.TESTING)

        module = await repo.get_module("a")

        assert module == ModuleNode("a", "A", "a", "1.0.0", PublicationStatus.TESTING)
        assert await repo.get_module("missing") is None

    @pytest.mark.asyncio
    async def test_save_module_updates(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", status=PublicationStatus.DRAFT)
        await seed(repo, "a")

        module = await repo.get_module("a")
        assert module.is_published

    @pytest.mark.asyncio
    async def test_get_modules_omits_unknown(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b")

        modules = await repo.get_modules(["a", "b", "ghost", "a"])

        assert set(modules) == {"a", "b"}


class TestEdges:
    """Tests for edge storage."""

    @pytest.mark.asyncio
    async def test_edges_in_declaration_order(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b", "c")
        await repo.upsert_edge(DependencyEdge("a", "c"))
        await repo.upsert_edge(DependencyEdge("a", "b", DependencyType.PEER))

        edges = await repo.get_outgoing_edges("a")

        assert [e.depends_on_id for e in edges] == ["c", "b"]
        assert edges[1].dependency_type == DependencyType.PEER

    @pytest.mark.asyncio
    async def test_upsert_replaces_attributes(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b")
        await repo.upsert_edge(DependencyEdge("a", "b"))
        await repo.upsert_edge(
            DependencyEdge("a", "b", DependencyType.OPTIONAL, min_version="1.0", max_version="2.0")
        )

        edges = await repo.get_outgoing_edges("a")

        assert edges == [
            DependencyEdge("a", "b", DependencyType.OPTIONAL, min_version="1.0", max_version="2.0")
        ]

    @pytest.mark.asyncio
    async def test_incoming_edges(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b", "c")
        await repo.upsert_edge(DependencyEdge("b", "a"))
        await repo.upsert_edge(DependencyEdge("c", "a"))

        edges = await repo.get_incoming_edges("a")

        assert [e.module_id for e in edges] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_self_loop_rejected_by_schema(self, repo: ModuleRepository) -> None:
        await seed(repo, "a")

        with pytest.raises(GraphSourceError):
            await repo.upsert_edge(DependencyEdge("a", "a"))

        assert await repo.get_revision() == 0
        assert await repo.get_outgoing_edges("a") == []

    @pytest.mark.asyncio
    async def test_edge_to_unknown_module_rejected(self, repo: ModuleRepository) -> None:
        await seed(repo, "a")

        with pytest.raises(GraphSourceError):
            await repo.upsert_edge(DependencyEdge("a", "ghost"))

    @pytest.mark.asyncio
    async def test_delete_edge(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b")
        await repo.upsert_edge(DependencyEdge("a", "b"))

        assert await repo.delete_edge("a", "b")
        assert not await repo.delete_edge("a", "b")
        assert await repo.get_revision() == 2


class TestRevision:
    """Tests for optimistic concurrency on edge writes."""

    @pytest.mark.asyncio
    async def test_matching_revision_bumps(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b")

        await repo.upsert_edge(DependencyEdge("a", "b"), expected_revision=0)

        assert await repo.get_revision() == 1

    @pytest.mark.asyncio
    async def test_stale_revision_rejected(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b", "c")
        await repo.upsert_edge(DependencyEdge("a", "b"), expected_revision=0)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await repo.upsert_edge(DependencyEdge("a", "c"), expected_revision=0)

        assert exc_info.value.actual == 1
        assert [e.depends_on_id for e in await repo.get_outgoing_edges("a")] == ["b"]


class TestSubgraph:
    """Tests for the recursive subgraph query."""

    @pytest.mark.asyncio
    async def test_reachable_edges_only(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b", "c", "x", "y")
        await repo.upsert_edge(DependencyEdge("a", "b"))
        await repo.upsert_edge(DependencyEdge("b", "c", DependencyType.OPTIONAL))
        await repo.upsert_edge(DependencyEdge("x", "y"))

        edges = await repo.get_subgraph("a")

        assert {e.key for e in edges} == {("a", "b"), ("b", "c")}

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b")
        await repo.upsert_edge(DependencyEdge("a", "b"))
        await repo.upsert_edge(DependencyEdge("b", "a"))

        edges = await repo.get_subgraph("a", max_depth=10)

        assert {e.key for e in edges} == {("a", "b"), ("b", "a")}
        assert len(await repo.get_subgraph("a")) == 2

    @pytest.mark.asyncio
    async def test_depth_limit(self, repo: ModuleRepository) -> None:
        await seed(repo, "a", "b", "c")
        await repo.upsert_edge(DependencyEdge("a", "b"))
        await repo.upsert_edge(DependencyEdge("b", "c"))

        assert {e.key for e in await repo.get_subgraph("a", max_depth=1)} == {("a", "b")}
        assert await repo.get_subgraph("a", max_depth=0) == []


class TestInstallations:
    """Tests for installation lookups."""

    @pytest.mark.asyncio
    async def test_only_enabled_installations(self, repo: ModuleRepository, database: Database) -> None:
        await seed(repo, "a", "b")
        await install(database, "site-1", "a", version="1.2.0")
        await install(database, "site-1", "b", enabled=False)
        await install(database, "site-2", "b")

        assert await repo.get_installed_modules("site-1") == {"a"}
        assert await repo.get_installed_versions("site-1") == {"a": "1.2.0"}
        assert await repo.get_installed_versions("site-2") == {"b": None}


class TestUninitialized:
    """Tests for a repository on a closed database."""

    @pytest.mark.asyncio
    async def test_reads_raise_source_error(self, test_settings) -> None:
        repo = ModuleRepository(Database(test_settings.database_url))

        with pytest.raises(GraphSourceError) as exc_info:
            await repo.get_module("a")

        assert exc_info.value.operation == "get_module"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_resolve_reports_unavailable_source(self, test_settings) -> None:
        repo = ModuleRepository(Database(test_settings.database_url))

        result = await ModuleDependencyResolver(repo, test_settings).resolve("a", "site-1")

        assert not result.can_install
        assert len(result.conflicts) == 1
        assert "database is not initialized" in result.conflicts[0].reason


class TestEndToEnd:
    """Service and resolver running against SQLite."""

    @pytest.mark.asyncio
    async def test_declare_and_resolve(self, repo, database, test_settings) -> None:
        await seed(repo, "crm", "contacts", "mailer")
        service = DependencyGraphService(repo, repo, test_settings)
        await service.add_dependency("crm", "contacts", min_version="1.0.0")
        await service.add_dependency("contacts", "mailer")
        await install(database, "site-1", "mailer", version="1.0.0")

        result = await ModuleDependencyResolver(repo, test_settings).resolve("crm", "site-1")

        assert result.can_install
        assert result.install_order == ["mailer", "contacts", "crm"]
        assert result.pending_install_order(await repo.get_installed_modules("site-1")) == [
            "contacts",
            "crm",
        ]
        assert result.required[0].status == DependencyStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_cycle_rejected_and_not_stored(self, repo, test_settings) -> None:
        await seed(repo, "a", "b", "c")
        service = DependencyGraphService(repo, repo, test_settings)
        await service.add_dependency("a", "b")
        await service.add_dependency("b", "c")

        with pytest.raises(CircularDependencyError):
            await service.add_dependency("c", "a")

        assert await repo.get_outgoing_edges("c") == []
        assert await repo.get_revision() == 2
