"""Property value types with storage encoding.

Every property value stored on a record carries a type tag so the
stored form can be decoded back into the same Python value:

    {"type": "int", "value": 29}
    {"type": "key", "value": {"kind": "people", "id": 4}}
"""

import base64
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class PropertyType(Enum):
    """Supported property value kinds."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    DATETIME = "datetime"
    KEY = "key"
    LIST = "list"


@dataclass(frozen=True)
class Key:
    """Identity of a stored entity: its kind plus numeric id."""

    kind: str
    id: int

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "id": self.id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Key":
        return cls(kind=data["kind"], id=int(data["id"]))


def property_type_of(value: Any) -> PropertyType:
    """Return the type tag for a Python value.

    Records are accepted and stored by key.

    Raises:
        TypeError: If the value has no supported property type
    """
    # bool is a subclass of int, check it first
    if value is None:
        return PropertyType.NULL
    if isinstance(value, bool):
        return PropertyType.BOOL
    if isinstance(value, int):
        return PropertyType.INT
    if isinstance(value, float):
        return PropertyType.FLOAT
    if isinstance(value, str):
        return PropertyType.STRING
    if isinstance(value, (bytes, bytearray)):
        return PropertyType.BYTES
    if isinstance(value, datetime):
        return PropertyType.DATETIME
    if isinstance(value, Key) or _is_record(value):
        return PropertyType.KEY
    if isinstance(value, (list, tuple)):
        return PropertyType.LIST
    raise TypeError(f"Unsupported property value type: {type(value).__name__}")


def _is_record(value: Any) -> bool:
    # Avoid importing models here (models import this module)
    from recordkit.models.record import Record

    return isinstance(value, Record)


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a property value into its tagged, JSON-safe form."""
    ptype = property_type_of(value)

    if ptype is PropertyType.BYTES:
        encoded: Any = base64.b64encode(bytes(value)).decode("ascii")
    elif ptype is PropertyType.DATETIME:
        encoded = value.isoformat()
    elif ptype is PropertyType.KEY:
        key = value if isinstance(value, Key) else value.key
        if key is None:
            raise TypeError("Cannot store a reference to an unpersisted record")
        encoded = key.to_dict()
    elif ptype is PropertyType.LIST:
        encoded = [encode_value(item) for item in value]
    else:
        encoded = value

    return {"type": ptype.value, "value": encoded}


def decode_value(data: dict[str, Any]) -> Any:
    """Decode a tagged value produced by encode_value()."""
    ptype = PropertyType(data["type"])
    value = data.get("value")

    if ptype is PropertyType.BYTES:
        return base64.b64decode(value)
    if ptype is PropertyType.DATETIME:
        return datetime.fromisoformat(value)
    if ptype is PropertyType.KEY:
        return Key.from_dict(value)
    if ptype is PropertyType.LIST:
        return [decode_value(item) for item in value]
    if ptype is PropertyType.FLOAT:
        return float(value)
    return value


def encode_properties(properties: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Encode a whole property mapping."""
    return {name: encode_value(value) for name, value in properties.items()}


def decode_properties(data: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Decode a whole property mapping."""
    return {name: decode_value(value) for name, value in data.items()}
