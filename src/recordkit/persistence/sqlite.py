"""SQLite record store."""

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from recordkit.core.types import decode_properties, encode_properties
from recordkit.models.errors import StoreError
from recordkit.persistence.sequences import SequenceService

logger = logging.getLogger(__name__)

# OverflowError: ids outside SQLite's 64-bit INTEGER range
_DRIVER_ERRORS = (sqlite3.Error, OverflowError)


def _decode(kind: str, id: int, payload: str) -> dict[str, Any]:
    """Decode a stored properties payload, wrapping corrupt data."""
    try:
        return decode_properties(json.loads(payload))
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StoreError(f"Corrupt properties for {kind} {id}: {e}") from e


class SQLiteStore:
    """Simple SQLite record store.

    All kinds share one ``_records`` table keyed by (kind, id); the
    property mapping is stored as tagged JSON text.
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._sequence_service: SequenceService | None = None
        self._lock = threading.RLock()

    def connect(self) -> None:
        """Establish database connection and create the records table."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS _records (
                    kind TEXT NOT NULL,
                    id INTEGER NOT NULL,
                    properties TEXT NOT NULL,
                    PRIMARY KEY (kind, id)
                )
            """)
            self.conn.commit()
            self._sequence_service = SequenceService(self.conn)
        except sqlite3.Error as e:
            self.close()
            raise StoreError(f"Could not open SQLite store {self.db_path}: {e}") from e
        logger.debug("Connected SQLite store %s", self.db_path)

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
        self._sequence_service = None

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            raise StoreError("Store not connected")
        return self.conn

    def get(self, kind: str, id: int) -> dict[str, Any] | None:
        """Fetch one record's properties, or None if absent."""
        conn = self._connection()
        with self._lock:
            try:
                row = conn.execute(
                    "SELECT properties FROM _records WHERE kind = ? AND id = ?",
                    [kind, id],
                ).fetchone()
            except _DRIVER_ERRORS as e:
                raise StoreError(f"Failed to read {kind} {id}: {e}") from e

        if row is None:
            return None
        return _decode(kind, id, row[0])

    def put(self, kind: str, id: int | None, properties: dict[str, Any]) -> int:
        """Insert or replace a record, allocating an id when none is given.

        Returns:
            The record id
        """
        conn = self._connection()
        try:
            payload = json.dumps(encode_properties(properties))
        except (TypeError, ValueError) as e:
            raise StoreError(f"Cannot serialize {kind} properties: {e}") from e

        with self._lock:
            try:
                if id is None:
                    id = self._sequence_service.next_id(kind, commit=False)
                conn.execute(
                    """
                    INSERT INTO _records (kind, id, properties) VALUES (?, ?, ?)
                    ON CONFLICT (kind, id) DO UPDATE SET properties = excluded.properties
                    """,
                    [kind, id, payload],
                )
                conn.commit()
            except _DRIVER_ERRORS as e:
                conn.rollback()
                raise StoreError(f"Failed to write {kind} {id}: {e}") from e

        return id

    def delete(self, kind: str, id: int) -> None:
        """Delete a record. Deleting an absent record is not an error."""
        conn = self._connection()
        with self._lock:
            try:
                conn.execute(
                    "DELETE FROM _records WHERE kind = ? AND id = ?",
                    [kind, id],
                )
                conn.commit()
            except _DRIVER_ERRORS as e:
                conn.rollback()
                raise StoreError(f"Failed to delete {kind} {id}: {e}") from e

    def query(self, kind: str) -> Iterator[tuple[int, dict[str, Any]]]:
        """Yield (id, properties) for every record of a kind, in id order."""
        conn = self._connection()
        with self._lock:
            try:
                rows = conn.execute(
                    "SELECT id, properties FROM _records WHERE kind = ? ORDER BY id",
                    [kind],
                ).fetchall()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to query {kind}: {e}") from e

        for id, payload in rows:
            yield id, _decode(kind, id, payload)
