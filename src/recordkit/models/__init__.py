"""Models and records."""

from recordkit.models.errors import (
    OperationCancelledByEventCallbackError,
    RecordError,
    RecordNotFoundError,
    StoreError,
)
from recordkit.models.model import Model, ModelInitializer
from recordkit.models.record import Record

__all__ = [
    "Model",
    "ModelInitializer",
    "OperationCancelledByEventCallbackError",
    "Record",
    "RecordError",
    "RecordNotFoundError",
    "StoreError",
]
