"""Tests for the conflict classifier."""

from module_resolver.models.module import (
    DependencyEdge,
    DependencyType,
    ModuleNode,
    PublicationStatus,
)
from module_resolver.models.resolution import DependencyStatus, Severity
from module_resolver.resolver.classifier import ConflictClassifier
from module_resolver.resolver.graph import GraphSnapshot


def make_module(module_id: str, version: str = "1.0.0", status=PublicationStatus.PUBLISHED):
    return ModuleNode(
        id=module_id,
        name=module_id.upper(),
        slug=module_id,
        published_version=version,
        status=status,
    )


class TestClassify:
    """Tests for single-edge classification."""

    def setup_method(self) -> None:
        self.classifier = ConflictClassifier()

    def test_missing_required_is_error(self) -> None:
        edge = DependencyEdge("a", "ghost")
        outcome = self.classifier.classify(edge, None, {})

        assert outcome.node.status == DependencyStatus.MISSING
        assert outcome.node.module_id == "ghost"
        assert outcome.node.module_name == "Unknown"
        assert outcome.node.version == "0.0.0"
        assert len(outcome.conflicts) == 1
        assert outcome.conflicts[0].severity == Severity.ERROR
        assert outcome.conflicts[0].reason == "Dependency module not found in database"

    def test_missing_optional_is_warning(self) -> None:
        edge = DependencyEdge("a", "ghost", DependencyType.OPTIONAL)
        outcome = self.classifier.classify(edge, None, {})
        assert outcome.conflicts[0].severity == Severity.WARNING

    def test_not_published_required_is_error(self) -> None:
        target = make_module("b", status=PublicationStatus.DRAFT)
        outcome = self.classifier.classify(DependencyEdge("a", "b"), target, {})

        assert outcome.node.status == DependencyStatus.NOT_PUBLISHED
        conflict = outcome.conflicts[0]
        assert conflict.severity == Severity.ERROR
        assert conflict.reason == 'Required module "B" is not published (status: draft)'

    def test_not_published_peer_is_warning(self) -> None:
        target = make_module("b", status=PublicationStatus.TESTING)
        edge = DependencyEdge("a", "b", DependencyType.PEER)
        outcome = self.classifier.classify(edge, target, {})

        assert outcome.conflicts[0].severity == Severity.WARNING
        assert outcome.conflicts[0].reason.startswith('Peer module "B"')

    def test_not_published_wins_over_installed(self) -> None:
        target = make_module("b", status=PublicationStatus.DEPRECATED)
        outcome = self.classifier.classify(DependencyEdge("a", "b"), target, {"b": "1.0.0"})
        assert outcome.node.status == DependencyStatus.NOT_PUBLISHED

    def test_installed_without_version_satisfies_bounds(self) -> None:
        edge = DependencyEdge("a", "b", min_version="9.0.0")
        outcome = self.classifier.classify(edge, make_module("b"), {"b": None})

        assert outcome.node.status == DependencyStatus.INSTALLED
        assert outcome.conflicts == []
        assert outcome.warnings == []

    def test_installed_compatible_version(self) -> None:
        edge = DependencyEdge("a", "b", min_version="1.0.0", max_version="2.0.0")
        outcome = self.classifier.classify(edge, make_module("b"), {"b": "1.4.0"})

        assert outcome.node.status == DependencyStatus.INSTALLED
        assert outcome.node.installed_version == "1.4.0"
        assert outcome.conflicts == []

    def test_installed_version_below_minimum(self) -> None:
        edge = DependencyEdge("a", "b", min_version="2.0.0")
        outcome = self.classifier.classify(edge, make_module("b"), {"b": "1.4.0"})

        assert outcome.node.status == DependencyStatus.VERSION_MISMATCH
        conflict = outcome.conflicts[0]
        assert conflict.severity == Severity.ERROR
        assert conflict.reason == "Installed version 1.4.0 is below minimum 2.0.0"
        assert conflict.resolution == "Update to version 2.0.0 or higher"

    def test_optional_version_mismatch_is_warning(self) -> None:
        edge = DependencyEdge("a", "b", DependencyType.OPTIONAL, max_version="1.0.0")
        outcome = self.classifier.classify(edge, make_module("b"), {"b": "1.4.0"})
        assert outcome.conflicts[0].severity == Severity.WARNING

    def test_available_required_warns_auto_add(self) -> None:
        outcome = self.classifier.classify(DependencyEdge("a", "b"), make_module("b"), {})

        assert outcome.node.status == DependencyStatus.AVAILABLE
        assert outcome.conflicts == []
        assert outcome.warnings == ['Required dependency "B" is not installed and will be added']

    def test_available_optional_is_silent(self) -> None:
        edge = DependencyEdge("a", "b", DependencyType.OPTIONAL)
        outcome = self.classifier.classify(edge, make_module("b"), {})
        assert outcome.conflicts == []
        assert outcome.warnings == []

    def test_available_published_version_checked_against_bounds(self) -> None:
        edge = DependencyEdge("a", "b", min_version="2.0.0")
        outcome = self.classifier.classify(edge, make_module("b", "1.0.0"), {})

        assert outcome.node.status == DependencyStatus.VERSION_MISMATCH
        assert outcome.conflicts[0].reason == "Published version 1.0.0 is below minimum 2.0.0"

    def test_transitive_suffix(self) -> None:
        outcome = self.classifier.classify(DependencyEdge("b", "c"), None, {}, via="B")
        assert outcome.conflicts[0].reason.endswith("(required by B)")


class TestClassifyTransitive:
    """Tests for required edges below the root's direct dependencies."""

    def test_reports_unpublished_grandchild(self) -> None:
        modules = {
            "a": make_module("a"),
            "b": make_module("b"),
            "c": make_module("c", status=PublicationStatus.DRAFT),
        }
        snap = GraphSnapshot(["a"], [DependencyEdge("a", "b"), DependencyEdge("b", "c")], modules)

        conflicts, warnings = ConflictClassifier().classify_transitive(snap, "a", {}, {"b"})

        assert len(conflicts) == 1
        assert conflicts[0].module_id == "c"
        assert conflicts[0].reason.endswith("(required by B)")
        assert warnings == []

    def test_ignores_optional_branches(self) -> None:
        modules = {"a": make_module("a"), "b": make_module("b")}
        edges = [
            DependencyEdge("a", "b", DependencyType.OPTIONAL),
            DependencyEdge("b", "ghost"),
        ]
        snap = GraphSnapshot(["a"], edges, modules)
        conflicts, warnings = ConflictClassifier().classify_transitive(snap, "a", {}, {"b"})
        assert conflicts == []
        assert warnings == []

    def test_shared_dependency_reported_once(self) -> None:
        modules = {i: make_module(i) for i in ("a", "b", "c")}
        edges = [
            DependencyEdge("a", "b"),
            DependencyEdge("a", "c"),
            DependencyEdge("b", "ghost"),
            DependencyEdge("c", "ghost"),
        ]
        snap = GraphSnapshot(["a"], edges, modules)
        conflicts, _ = ConflictClassifier().classify_transitive(snap, "a", {}, {"b", "c"})
        assert len(conflicts) == 1
        assert conflicts[0].module_id == "ghost"
