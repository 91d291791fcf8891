"""Dependency resolution module for the module resolver."""

from module_resolver.resolver.semver import (
    check_version_compatibility,
    compare_version_strings,
    compare_versions,
    parse_version,
)
from module_resolver.resolver.graph import GraphSnapshot
from module_resolver.resolver.cycles import find_cycle
from module_resolver.resolver.ordering import build_install_order, build_multi_module_order
from module_resolver.resolver.classifier import ConflictClassifier
from module_resolver.resolver.guard import is_reachable, would_create_cycle
from module_resolver.resolver.dependency import ModuleDependencyResolver

__all__ = [
    "check_version_compatibility",
    "compare_version_strings",
    "compare_versions",
    "parse_version",
    "GraphSnapshot",
    "find_cycle",
    "build_install_order",
    "build_multi_module_order",
    "ConflictClassifier",
    "is_reachable",
    "would_create_cycle",
    "ModuleDependencyResolver",
]
