"""recordkit - typed records over a keyed entity store with lifecycle events.

Usage:
    from recordkit import Model, SQLiteStore

    store = SQLiteStore(":memory:")
    store.connect()

    people = Model("people", store=store)
    person = people.new().set("name", "Mat").set("age", 29).put()
    assert people.find(person.id).get("name") == "Mat"
"""

from recordkit.core.types import Key, PropertyType
from recordkit.events import Event, EventContext
from recordkit.models import (
    Model,
    OperationCancelledByEventCallbackError,
    Record,
    RecordError,
    RecordNotFoundError,
    StoreError,
)
from recordkit.persistence import (
    SQLiteStore,
    StoreAdapter,
    StoreConfig,
    create_store,
    get_default_store,
    set_default_store,
)

__all__ = [
    "Event",
    "EventContext",
    "Key",
    "Model",
    "OperationCancelledByEventCallbackError",
    "PropertyType",
    "Record",
    "RecordError",
    "RecordNotFoundError",
    "SQLiteStore",
    "StoreAdapter",
    "StoreConfig",
    "StoreError",
    "create_store",
    "get_default_store",
    "set_default_store",
]
