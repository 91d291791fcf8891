"""SQLite persistence for the module resolver."""

from module_resolver.db.database import Database
from module_resolver.db.repositories import ModuleRepository

__all__ = ["Database", "ModuleRepository"]
