"""StoreAdapter Protocol — shared interface for all record stores."""

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StoreAdapter(Protocol):
    """Interface all record stores must implement.

    Matches the public API of SQLiteStore. Stores address entities by
    (kind, id) and hold an opaque property mapping per entity. Property
    values are decoded back to Python values on read.

    Failures are raised as StoreError.
    """

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def get(self, kind: str, id: int) -> dict[str, Any] | None: ...

    def put(self, kind: str, id: int | None, properties: dict[str, Any]) -> int: ...

    def delete(self, kind: str, id: int) -> None: ...

    def query(self, kind: str) -> Iterator[tuple[int, dict[str, Any]]]: ...
