"""Graph data sources for the module resolver."""

from module_resolver.source.base import GraphDataSource, GraphMutationSink
from module_resolver.source.memory import InMemoryGraphSource

__all__ = [
    "GraphDataSource",
    "GraphMutationSink",
    "InMemoryGraphSource",
]
