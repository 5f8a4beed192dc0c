"""Errors raised by models, records and stores."""

from typing import Any


class RecordError(Exception):
    """Base class for recordkit errors."""


class RecordNotFoundError(RecordError):
    """No entity with the given id exists for the kind."""

    def __init__(self, kind: str, id: Any):
        self.kind = kind
        self.id = id
        super().__init__(f"No {kind} record with id {id!r}")


class OperationCancelledByEventCallbackError(RecordError):
    """A before-event handler set cancel, so the store was not touched."""

    def __init__(self, operation: str, context: Any = None):
        self.operation = operation
        self.context = context
        super().__init__(f"{operation} was cancelled by an event callback")


class StoreError(RecordError):
    """The backing store failed (I/O, serialization, connection)."""

