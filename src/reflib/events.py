"""Minimal synchronous event channel used by parse streams and writers."""

from collections.abc import Callable
from typing import Any

from reflib.errors import InvalidArguments

__all__ = ["EventChannel", "Handler"]

Handler = Callable[..., Any]


class EventChannel:
    """Named-event subscription with an explicit, closed event vocabulary.

    Subclasses declare ``EVENTS``; subscribing to any other name is a usage
    error. Handlers run synchronously, in subscription order, on the thread
    that calls ``emit``.
    """

    EVENTS: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._handlers: dict[str, list[tuple[Handler, bool]]] = {name: [] for name in self.EVENTS}

    def on(self, event: str, handler: Handler) -> Callable[[], None]:
        """Subscribe ``handler`` to ``event``.

        Parameters
        ----------
        event : str
            Event name, one of ``EVENTS``.
        handler : Handler
            Callable invoked with the event arguments.

        Returns
        -------
        Callable[[], None]
            Function that removes this subscription.
        """
        self._subscribers(event).append((handler, False))
        return lambda: self.off(event, handler)

    def once(self, event: str, handler: Handler) -> Callable[[], None]:
        """Subscribe ``handler`` for the next emission of ``event`` only."""
        self._subscribers(event).append((handler, True))
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: Handler) -> None:
        """Remove every subscription of ``handler`` to ``event``."""
        subscribers = self._subscribers(event)
        subscribers[:] = [(h, once) for h, once in subscribers if h != handler]

    def has_subscribers(self, event: str) -> bool:
        """Return True if anything is listening for ``event``."""
        return bool(self._subscribers(event))

    def emit(self, event: str, *args: Any) -> None:
        """Invoke the handlers of ``event`` with ``args``."""
        subscribers = self._subscribers(event)
        current = list(subscribers)
        subscribers[:] = [(h, once) for h, once in subscribers if not once]
        for handler, _ in current:
            handler(*args)

    def _subscribers(self, event: str) -> list[tuple[Handler, bool]]:
        try:
            return self._handlers[event]
        except KeyError:
            raise InvalidArguments(
                f"Unknown event {event!r}; expected one of {list(self.EVENTS)}"
            ) from None
