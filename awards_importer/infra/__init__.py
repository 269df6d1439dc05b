"""Infra layer utilities (SQLite connections, catalog store)."""

from .catalog import CatalogSession, CatalogStore
from .storage import SQLiteManager

__all__ = ["CatalogSession", "CatalogStore", "SQLiteManager"]
