"""Store configuration, store factory and the process default store."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recordkit.persistence.adapter import StoreAdapter

logger = logging.getLogger(__name__)


@dataclass
class StoreConfig:
    """Store connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> StoreConfig:
        """Create config from environment variables.

        Resolution order:
        1. RECORDKIT_DATABASE_URL env var
        2. DATABASE_URL env var (standard)
        3. RECORDKIT_DB_PATH env var (converted to sqlite:/// URL)
        4. sqlite:///{base_path}/data/recordkit.db when base_path is given
        5. Default: in-memory SQLite
        """
        url = os.environ.get("RECORDKIT_DATABASE_URL") or os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("RECORDKIT_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'recordkit.db'}")

        return cls(url="sqlite:///:memory:")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")


def create_store(config: StoreConfig) -> StoreAdapter:
    """Create a store based on the database URL scheme.

    Args:
        config: Store configuration with URL.

    Returns:
        A StoreAdapter instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from recordkit.persistence.sqlite import SQLiteStore

        # Extract path from sqlite:///path
        db_path = config.url.replace("sqlite:///", "")
        if not db_path:
            db_path = ":memory:"
        return SQLiteStore(db_path)

    if config.is_postgresql:
        from recordkit.persistence.postgresql import PostgreSQLStore

        return PostgreSQLStore(config.url)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")


_default_store: StoreAdapter | None = None
_default_lock = threading.Lock()


def get_default_store() -> StoreAdapter:
    """Return the process default store, creating and connecting it from
    the environment on first use."""
    global _default_store
    with _default_lock:
        if _default_store is None:
            config = StoreConfig.from_env()
            store = create_store(config)
            store.connect()
            logger.info("Default store connected (%s)", config.url.split("://", 1)[0])
            _default_store = store
        return _default_store


def set_default_store(store: StoreAdapter | None) -> None:
    """Install the store used by models created without one.

    Passing None resets it so the next use re-reads the environment.
    The previous store is not closed.
    """
    global _default_store
    with _default_lock:
        _default_store = store
