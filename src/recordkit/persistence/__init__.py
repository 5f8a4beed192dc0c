"""Persistence layer - record stores and configuration."""

from recordkit.persistence.adapter import StoreAdapter
from recordkit.persistence.config import (
    StoreConfig,
    create_store,
    get_default_store,
    set_default_store,
)
from recordkit.persistence.sqlite import SQLiteStore

__all__ = [
    "SQLiteStore",
    "StoreAdapter",
    "StoreConfig",
    "create_store",
    "get_default_store",
    "set_default_store",
]
