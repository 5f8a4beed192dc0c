"""PostgreSQL record store.

Uses psycopg v3 (psycopg[binary]>=3.1.0) for database access.
Mirrors SQLiteStore method-for-method with PostgreSQL-specific SQL:
  - %s placeholders instead of ?
  - JSONB column for the tagged property mapping
  - INSERT ... ON CONFLICT DO UPDATE for sequences and upserts
  - dict_row cursor factory for dict-based row access
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from recordkit.core.types import decode_properties, encode_properties
from recordkit.models.errors import StoreError
from recordkit.persistence.sequences import SequenceService

logger = logging.getLogger(__name__)


def _decode(kind: str, id: int, data: Any) -> dict[str, Any]:
    """Decode a stored JSONB properties value, wrapping corrupt data."""
    try:
        return decode_properties(data)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StoreError(f"Corrupt properties for {kind} {id}: {e}") from e


class PostgreSQLStore:
    """PostgreSQL record store using psycopg v3."""

    def __init__(self, url: str):
        # psycopg.connect() wants a plain libpq DSN or postgres:// URL,
        # so strip the +psycopg driver suffix when present.
        self.url = url.replace("postgresql+psycopg://", "postgresql://")
        self.conn: Any = None
        self._sequence_service: SequenceService | None = None
        self._lock = threading.RLock()

    def connect(self) -> None:
        """Establish database connection and create the records table."""
        import psycopg
        from psycopg.rows import dict_row

        try:
            self.conn = psycopg.connect(self.url, row_factory=dict_row)
            self.conn.autocommit = False
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS _records (
                    kind TEXT NOT NULL,
                    id BIGINT NOT NULL,
                    properties JSONB NOT NULL,
                    PRIMARY KEY (kind, id)
                )
            """)
            self.conn.commit()
            self._sequence_service = SequenceService(self.conn, dialect="postgresql")
        except psycopg.Error as e:
            self.close()
            raise StoreError(f"Could not connect to PostgreSQL: {e}") from e
        logger.debug("Connected PostgreSQL store")

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
        self._sequence_service = None

    def _connection(self) -> Any:
        if not self.conn:
            raise StoreError("Store not connected")
        return self.conn

    def get(self, kind: str, id: int) -> dict[str, Any] | None:
        """Fetch one record's properties, or None if absent."""
        import psycopg

        conn = self._connection()
        with self._lock:
            try:
                row = conn.execute(
                    "SELECT properties FROM _records WHERE kind = %s AND id = %s",
                    [kind, id],
                ).fetchone()
                conn.commit()
            except (psycopg.Error, OverflowError) as e:
                conn.rollback()
                raise StoreError(f"Failed to read {kind} {id}: {e}") from e

        if row is None:
            return None
        return _decode(kind, id, row["properties"])

    def put(self, kind: str, id: int | None, properties: dict[str, Any]) -> int:
        """Insert or replace a record, allocating an id when none is given.

        Returns:
            The record id
        """
        import psycopg
        from psycopg.types.json import Jsonb

        conn = self._connection()
        try:
            payload = Jsonb(encode_properties(properties))
        except (TypeError, ValueError) as e:
            raise StoreError(f"Cannot serialize {kind} properties: {e}") from e

        with self._lock:
            try:
                if id is None:
                    id = self._sequence_service.next_id(kind, commit=False)
                conn.execute(
                    """
                    INSERT INTO _records (kind, id, properties) VALUES (%s, %s, %s)
                    ON CONFLICT (kind, id) DO UPDATE SET properties = EXCLUDED.properties
                    """,
                    [kind, id, payload],
                )
                conn.commit()
            except (psycopg.Error, OverflowError) as e:
                conn.rollback()
                raise StoreError(f"Failed to write {kind} {id}: {e}") from e

        return id

    def delete(self, kind: str, id: int) -> None:
        """Delete a record. Deleting an absent record is not an error."""
        import psycopg

        conn = self._connection()
        with self._lock:
            try:
                conn.execute(
                    "DELETE FROM _records WHERE kind = %s AND id = %s",
                    [kind, id],
                )
                conn.commit()
            except (psycopg.Error, OverflowError) as e:
                conn.rollback()
                raise StoreError(f"Failed to delete {kind} {id}: {e}") from e

    def query(self, kind: str) -> Iterator[tuple[int, dict[str, Any]]]:
        """Yield (id, properties) for every record of a kind, in id order."""
        import psycopg

        conn = self._connection()
        with self._lock:
            try:
                rows = conn.execute(
                    "SELECT id, properties FROM _records WHERE kind = %s ORDER BY id",
                    [kind],
                ).fetchall()
                conn.commit()
            except psycopg.Error as e:
                conn.rollback()
                raise StoreError(f"Failed to query {kind}: {e}") from e

        for row in rows:
            yield row["id"], _decode(kind, row["id"], row["properties"])
