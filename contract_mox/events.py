"""Event subscription and synchronous firing."""

from __future__ import annotations

import logging
import typing as t
from collections import defaultdict

from .contract import Contract

logger = logging.getLogger(__name__)

Handler: t.TypeAlias = t.Callable[..., object]


class EventHub:
    """Ordered handler lists for the events of one contract."""

    def __init__(self, contract: Contract) -> None:
        self._contract = contract
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> None:
        """Append *handler* to *event*'s subscribers."""
        self._contract.event(event)
        if not callable(handler):
            msg = f"event handlers must be callable, got {handler!r}"
            raise TypeError(msg)
        self._handlers[event].append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        """Remove the most recent subscription of *handler*, if any."""
        self._contract.event(event)
        handlers = self._handlers[event]
        for index in range(len(handlers) - 1, -1, -1):
            if handlers[index] == handler:
                del handlers[index]
                return

    def handlers(self, event: str) -> tuple[Handler, ...]:
        """Return the current subscribers of *event*."""
        return tuple(self._handlers.get(event, ()))

    def raise_event(self, event: str, args: t.Sequence[object] = ()) -> None:
        """Invoke every subscriber of *event* in subscription order.

        A handler exception propagates and the remaining handlers are skipped.
        """
        self._contract.event(event)
        handlers = self.handlers(event)
        logger.debug("Raising %s to %d handler(s)", event, len(handlers))
        for handler in handlers:
            handler(*args)


class EventAccessor:
    """Object exposed on the synthesized mock for each event.

    Supports ``obj.event += handler`` and ``obj.event -= handler`` as well as
    explicit ``subscribe``/``unsubscribe`` calls.
    """

    __slots__ = ("_name", "_subscribe", "_unsubscribe")

    def __init__(
        self,
        name: str,
        subscribe: t.Callable[[Handler], None],
        unsubscribe: t.Callable[[Handler], None],
    ) -> None:
        self._name = name
        self._subscribe = subscribe
        self._unsubscribe = unsubscribe

    @property
    def name(self) -> str:
        """Return the event name."""
        return self._name

    def subscribe(self, handler: Handler) -> None:
        """Add *handler* to the event."""
        self._subscribe(handler)

    def unsubscribe(self, handler: Handler) -> None:
        """Remove *handler* from the event."""
        self._unsubscribe(handler)

    def __iadd__(self, handler: Handler) -> EventAccessor:
        """Subscribe *handler* (``obj.event += handler``)."""
        self.subscribe(handler)
        return self

    def __isub__(self, handler: Handler) -> EventAccessor:
        """Unsubscribe *handler* (``obj.event -= handler``)."""
        self.unsubscribe(handler)
        return self

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<event {self._name}>"


__all__ = ["EventAccessor", "EventHub", "Handler"]
