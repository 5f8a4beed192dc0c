"""Sequence management for record id allocation.

Each kind has its own sequence of integer ids starting at 1.
Ids are never reused, even after the record holding one is deleted.

Supports both SQLite and PostgreSQL dialects.
"""

from typing import Any


class SequenceService:
    """Manages per-kind sequences for record id allocation."""

    def __init__(self, conn: Any, dialect: str = "sqlite"):
        """Initialize the sequence service.

        Args:
            conn: Database connection (sqlite3.Connection or psycopg.Connection).
            dialect: Database dialect, "sqlite" or "postgresql".
        """
        self.conn = conn
        self.dialect = dialect
        self._ensure_table()

    def _ensure_table(self) -> None:
        """Create the sequences table if it doesn't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS _sequences (
                kind TEXT NOT NULL PRIMARY KEY,
                next_value INTEGER NOT NULL DEFAULT 1
            )
        """)
        self.conn.commit()

    def next_id(self, kind: str, commit: bool = True) -> int:
        """Allocate the next id for a kind.

        Args:
            kind: The record kind (used as sequence key)
            commit: Commit immediately; pass False when the caller commits
                the allocation together with its own write

        Returns:
            The allocated id (1, 2, 3, ...)
        """
        if self.dialect == "postgresql":
            value = self._get_and_increment_postgresql(kind)
        else:
            value = self._get_and_increment_sqlite(kind)
        if commit:
            self.conn.commit()
        return value

    def _get_and_increment_sqlite(self, kind: str) -> int:
        """SQLite implementation using SELECT + UPDATE/INSERT pattern."""
        cursor = self.conn.execute(
            "SELECT next_value FROM _sequences WHERE kind = ?",
            [kind],
        )
        row = cursor.fetchone()

        if row:
            current_value = row[0]
            self.conn.execute(
                "UPDATE _sequences SET next_value = next_value + 1 WHERE kind = ?",
                [kind],
            )
        else:
            # Insert new sequence starting at 1
            current_value = 1
            self.conn.execute(
                "INSERT INTO _sequences (kind, next_value) VALUES (?, 2)",
                [kind],
            )

        return current_value

    def _get_and_increment_postgresql(self, kind: str) -> int:
        """PostgreSQL implementation using INSERT ... ON CONFLICT DO UPDATE RETURNING.

        Atomic upsert avoids TOCTOU races; RETURNING gives us the value
        that was current before the increment.
        """
        result = self.conn.execute(
            """
            INSERT INTO _sequences (kind, next_value)
            VALUES (%s, 2)
            ON CONFLICT (kind) DO UPDATE
                SET next_value = _sequences.next_value + 1
            RETURNING next_value - 1 AS current_value
            """,
            [kind],
        ).fetchone()

        if result is None:
            raise RuntimeError("Sequence upsert returned no rows")

        # psycopg dict_row returns a dict
        if isinstance(result, dict):
            return result["current_value"]
        return result[0]

    def current_value(self, kind: str) -> int:
        """Get the last allocated id without incrementing.

        Returns 0 if no id has been allocated yet.
        """
        placeholder = "%s" if self.dialect == "postgresql" else "?"

        cursor = self.conn.execute(
            f"SELECT next_value - 1 FROM _sequences WHERE kind = {placeholder}",
            [kind],
        )
        row = cursor.fetchone()
        if row is None:
            return 0
        if isinstance(row, dict):
            return list(row.values())[0]
        return row[0]

    def reset(self, kind: str, start_value: int = 1) -> None:
        """Reset a sequence so the next allocated id is start_value.

        Use with caution - can cause id collisions if records exist.
        """
        if self.dialect == "postgresql":
            self.conn.execute(
                """
                INSERT INTO _sequences (kind, next_value)
                VALUES (%s, %s)
                ON CONFLICT (kind) DO UPDATE
                    SET next_value = EXCLUDED.next_value
                """,
                [kind, start_value],
            )
        else:
            self.conn.execute(
                "INSERT OR REPLACE INTO _sequences (kind, next_value) VALUES (?, ?)",
                [kind, start_value],
            )
        self.conn.commit()
