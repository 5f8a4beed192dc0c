"""Model: per-kind record factory, finder and lifecycle event owner."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from recordkit.events import Event, EventContext
from recordkit.models.errors import (
    OperationCancelledByEventCallbackError,
    RecordNotFoundError,
)
from recordkit.models.record import Record

if TYPE_CHECKING:
    from recordkit.persistence.adapter import StoreAdapter

logger = logging.getLogger(__name__)

# Model initializer signature: (Model) -> None
ModelInitializer = Callable[["Model"], None]


class Model:
    """Describes one kind of record and orchestrates its CRUD operations.

    Every operation follows the same shape: build an EventContext, fire
    the before event, check cancellation, touch the store, fire the after
    event with the same context. Records produced by a model share its
    event registries by reference.

    Args:
        kind: Name of the entity collection (immutable)
        *initializers: Callables run once with the new model, in order,
            typically to register event handlers
        store: Backing store; defaults to the process default store

    Example:
        def track_people(model: Model) -> None:
            model.after_put.do(audit)

        people = Model("people", track_people)
    """

    def __init__(
        self,
        kind: str,
        *initializers: ModelInitializer,
        store: StoreAdapter | None = None,
    ):
        self._kind = kind
        self._store = store

        self.after_find = Event("after_find")
        self.before_put = Event("before_put")
        self.after_put = Event("after_put")
        self.before_delete_by_id = Event("before_delete_by_id")
        self.after_delete_by_id = Event("after_delete_by_id")

        for initializer in initializers:
            initializer(self)

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def record_type(self) -> str:
        """The kind of record this model manages."""
        return self._kind

    @property
    def store(self) -> StoreAdapter:
        """The backing store, resolving the default store on first use."""
        if self._store is None:
            from recordkit.persistence.config import get_default_store

            self._store = get_default_store()
        return self._store

    def _record_id(self, id: Any) -> int:
        """Normalize a caller-supplied id to the integer identity.

        Integers and decimal strings are accepted; anything else cannot
        name a stored record.
        """
        if isinstance(id, bool):
            raise RecordNotFoundError(self._kind, id)
        if isinstance(id, int):
            return id
        if isinstance(id, str):
            try:
                return int(id)
            except ValueError:
                raise RecordNotFoundError(self._kind, id) from None
        raise RecordNotFoundError(self._kind, id)

    # ------------------------------------------------------------------
    # Factory / finders
    # ------------------------------------------------------------------

    def new(self) -> Record:
        """Create an unpersisted, empty record. No events fire."""
        return Record(self)

    def find(self, id: int) -> Record:
        """Load one record by id and fire after_find for it.

        Raises:
            RecordNotFoundError: No record with this id exists for the kind
        """
        record_id = self._record_id(id)
        properties = self.store.get(self._kind, record_id)
        if properties is None:
            raise RecordNotFoundError(self._kind, id)

        record = Record.from_store(self, record_id, properties)
        self.after_find.fire(EventContext(args=[record]))
        return record

    def all(self) -> list[Record]:
        """Load every record of this kind, firing after_find once per record.

        Order is whatever the store returns.
        """
        records: list[Record] = []
        for id, properties in self.store.query(self._kind):
            record = Record.from_store(self, id, properties)
            self.after_find.fire(EventContext(args=[record]))
            records.append(record)
        return records

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, id: int) -> None:
        """Delete a record by id.

        Raises:
            RecordNotFoundError: No record with this id exists (no events fire)
            OperationCancelledByEventCallbackError: A before_delete_by_id handler set cancel
            StoreError: The store delete failed (after_delete_by_id does not fire)
        """
        record_id = self._record_id(id)
        if self.store.get(self._kind, record_id) is None:
            raise RecordNotFoundError(self._kind, id)
        id = record_id

        context = EventContext(args=[id])

        self.before_delete_by_id.fire(context)
        if context.cancel:
            logger.info(
                "delete of %s %s cancelled by before_delete_by_id handler",
                self._kind,
                id,
            )
            raise OperationCancelledByEventCallbackError("delete", context)

        self.store.delete(self._kind, id)
        logger.debug("Deleted %s record %s", self._kind, id)

        self.after_delete_by_id.fire(context)

    def __str__(self) -> str:
        return f"{{Model:{self._kind}}}"

    def __repr__(self) -> str:
        return f"Model({self._kind!r})"
