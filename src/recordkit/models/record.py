"""Record: one entity instance bound to a Model."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from recordkit.core.types import Key
from recordkit.events.types import EventContext
from recordkit.models.errors import (
    OperationCancelledByEventCallbackError,
    RecordNotFoundError,
)

if TYPE_CHECKING:
    from recordkit.models.model import Model

logger = logging.getLogger(__name__)


class Record:
    """A single entity with a property mapping and an optional identity.

    Records are created by Model.new() (unpersisted) or returned by
    Model.find()/Model.all() (hydrated from the store). The id stays
    None until the first successful put() and never changes afterwards.

    Example:
        person = people.new().set("name", "Mat").set("age", 29)
        person.put()
        assert person.is_persisted
    """

    def __init__(self, model: Model):
        self.model = model
        self._id: int | None = None
        self._properties: dict[str, Any] = {}
        self._put_lock = threading.Lock()

    @classmethod
    def from_store(
        cls, model: Model, id: int, properties: dict[str, Any]
    ) -> Record:
        """Build a persisted record from data read back from the store."""
        record = cls(model)
        record._properties = dict(properties)
        record._set_id(int(id))
        return record

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def is_persisted(self) -> bool:
        return self._id is not None

    @property
    def key(self) -> Key | None:
        """Store key for this record, or None before the first put()."""
        if self._id is None:
            return None
        return Key(kind=self.model.kind, id=self._id)

    def _set_id(self, id: int) -> None:
        if self._id is not None and self._id != id:
            raise ValueError(
                f"Record already has id {self._id}, refusing to change it to {id}"
            )
        self._id = id

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def set(self, name: str, value: Any) -> Record:
        """Set a property and return the record for chaining."""
        self._properties[name] = value
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self._properties.get(name, default)

    @property
    def properties(self) -> dict[str, Any]:
        """Copy of the property mapping."""
        return dict(self._properties)

    def __getitem__(self, name: str) -> Any:
        return self._properties[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._properties

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def put(self) -> Record:
        """Write the record to the store.

        Fires before_put, then writes unless a handler cancelled, then
        fires after_put with the same context. An unpersisted record is
        assigned the id allocated by the store.

        Returns:
            The record itself

        Raises:
            OperationCancelledByEventCallbackError: A before_put handler set cancel
            StoreError: The store write failed (after_put does not fire)
        """
        model = self.model
        context = EventContext(args=[self])

        model.before_put.fire(context)
        if context.cancel:
            logger.info("put on %s cancelled by before_put handler", model)
            raise OperationCancelledByEventCallbackError("put", context)

        # Id allocation and assignment are atomic per record
        with self._put_lock:
            new_id = model.store.put(model.kind, self._id, self._properties)
            if self._id is None:
                self._set_id(new_id)
        logger.debug("Stored %s record %s", model.kind, self._id)

        model.after_put.fire(context)
        return self

    def delete(self) -> None:
        """Delete this record through its model (fires the delete-by-id events).

        Raises:
            RecordNotFoundError: The record was never persisted or is already gone
            OperationCancelledByEventCallbackError: A before_delete_by_id handler set cancel
        """
        if self._id is None:
            raise RecordNotFoundError(self.model.kind, None)
        self.model.delete(self._id)

    def __repr__(self) -> str:
        return f"<Record {self.model.kind}:{self._id} {self._properties!r}>"
