"""Services module for the module resolver."""

from module_resolver.services.graph_service import DependencyGraphService

__all__ = [
    "DependencyGraphService",
]
