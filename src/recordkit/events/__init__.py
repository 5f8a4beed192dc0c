"""Record lifecycle events.

Models expose one Event per lifecycle point:
- after_find: After a record is loaded by find() or all()
- before_put: Before a record is written (can cancel)
- after_put: After a record is written
- before_delete_by_id: Before a record is deleted (can cancel)
- after_delete_by_id: After a record is deleted

Usage:
    from recordkit.events import EventContext

    def protect_admins(ctx: EventContext) -> None:
        if ctx.args[0] == ADMIN_ID:
            ctx.cancel = True

    users.before_delete_by_id.do(protect_admins)
"""

from recordkit.events.registry import Event, HandlerFn
from recordkit.events.types import EventContext

EVENT_NAMES = (
    "after_find",
    "before_put",
    "after_put",
    "before_delete_by_id",
    "after_delete_by_id",
)

__all__ = [
    "EVENT_NAMES",
    "Event",
    "EventContext",
    "HandlerFn",
]
