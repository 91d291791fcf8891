"""Database repositories for the module resolver."""

from module_resolver.db.repositories.module_repo import ModuleRepository

__all__ = ["ModuleRepository"]
