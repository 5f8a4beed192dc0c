"""Event context passed to lifecycle event handlers."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(eq=False)
class EventContext:
    """Runtime state shared by every handler of one operation.

    A single instance is created per operation invocation and is passed
    to both the before and the after event of that operation, so a
    handler on the after event sees exactly what the before handlers
    left behind.

    Attributes:
        cancel: Set to True by a before handler to veto the store mutation
        args: Operation arguments (the Record for put/find events,
            the numeric id for delete-by-id events)
    """

    cancel: bool = False
    args: list[Any] = field(default_factory=list)
