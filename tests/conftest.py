"""Shared fixtures for recordkit tests."""

import pytest

from recordkit.models import Model, Record
from recordkit.persistence.sqlite import SQLiteStore


@pytest.fixture
def store():
    """Connected in-memory SQLite store."""
    store = SQLiteStore(":memory:")
    store.connect()
    yield store
    store.close()


@pytest.fixture
def make_model(store):
    """Factory for models bound to the test store."""

    def _make(kind: str = "model", *initializers) -> Model:
        return Model(kind, *initializers, store=store)

    return _make


@pytest.fixture
def create_persisted_record():
    """Write a person straight to the store, bypassing the put events."""

    def _create(model: Model, name: str = "Mat", age: int = 29) -> Record:
        record = model.new().set("name", name).set("age", age)
        new_id = model.store.put(model.kind, None, record.properties)
        record._set_id(new_id)
        return record

    return _create
