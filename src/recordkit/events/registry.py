"""Handler registry for one lifecycle event.

Each Model owns one Event per lifecycle point. Handlers run
synchronously on the caller's thread, in registration order.
"""

import logging
import threading
from collections.abc import Callable

from recordkit.events.types import EventContext

logger = logging.getLogger(__name__)

# Handler signature: (EventContext) -> None
HandlerFn = Callable[[EventContext], None]


class Event:
    """Ordered list of handlers for a named lifecycle point.

    The handler list is copy-on-write: registration swaps in a new tuple
    under a lock, and fire() dispatches over the tuple it read when it
    started. A handler registered while another thread is dispatching
    runs from the next fire() on.

    Example:
        people.before_put.do(validate_person)

        @people.after_put.handler
        def audit(ctx: EventContext) -> None:
            ...
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: tuple[HandlerFn, ...] = ()
        self._lock = threading.Lock()

    def do(self, handler: HandlerFn) -> None:
        """Register a handler. Duplicates are allowed and fire twice."""
        with self._lock:
            self._handlers = self._handlers + (handler,)

    def handler(self, fn: HandlerFn) -> HandlerFn:
        """Decorator form of do()."""
        self.do(fn)
        return fn

    def fire(self, context: EventContext) -> None:
        """Invoke every registered handler with the same context.

        A handler setting context.cancel does not stop the remaining
        handlers; only the operation reading the flag afterwards reacts
        to it. An exception raised by a handler stops dispatch and
        propagates to the caller.
        """
        handlers = self._handlers
        if not handlers:
            return

        logger.debug("Firing %s to %d handler(s)", self.name, len(handlers))
        for handler_fn in handlers:
            try:
                handler_fn(context)
            except Exception:
                logger.warning(
                    "%s handler %r raised, aborting dispatch",
                    self.name,
                    getattr(handler_fn, "__name__", handler_fn),
                )
                raise

    @property
    def handlers(self) -> tuple[HandlerFn, ...]:
        """Snapshot of the registered handlers in firing order."""
        return self._handlers

    def clear(self) -> None:
        """Remove all handlers. Primarily for testing."""
        with self._lock:
            self._handlers = ()

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"Event({self.name!r}, handlers={len(self._handlers)})"
