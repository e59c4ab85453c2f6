"""Property value tracking and lazily created child mocks."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as t

from .contract import Contract, Property

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .controller import Mock

logger = logging.getLogger(__name__)

_UNSET: t.Final = object()


@dc.dataclass(slots=True)
class PropertySlot:
    """Stored value of a tracked property."""

    name: str
    value: object = _UNSET
    has_explicit_setup: bool = False

    @property
    def is_assigned(self) -> bool:
        """Return ``True`` once a value has been stored."""
        return self.value is not _UNSET


class PropertyStore:
    """Per-mock property slots and memoized child mocks.

    Children are keyed by member name and are only built on first access, so
    self-referential contracts never recurse eagerly.
    """

    def __init__(
        self,
        contract: Contract,
        *,
        default_for: t.Callable[[Property], object],
        child_factory: t.Callable[[str, object], Mock[t.Any]],
    ) -> None:
        self._contract = contract
        self._default_for = default_for
        self._child_factory = child_factory
        self._slots: dict[str, PropertySlot] = {}
        self._children: dict[str, Mock[t.Any]] = {}

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------
    def track(self, name: str, initial: object = _UNSET) -> PropertySlot:
        """Enable automatic tracking for *name*, optionally preset."""
        self._contract.prop(name)
        slot = self._slots.get(name)
        if slot is None:
            slot = self._slots[name] = PropertySlot(name)
        if initial is not _UNSET:
            slot.value = initial
        return slot

    def track_all(self) -> None:
        """Enable tracking for every property of the contract."""
        for prop in self._contract.properties:
            self.track(prop.name)

    def is_tracked(self, name: str) -> bool:
        """Return ``True`` when *name* is tracked."""
        return name in self._slots

    def mark_explicit(self, name: str) -> None:
        """Note that *name* has an explicit setup."""
        slot = self._slots.get(name)
        if slot is not None:
            slot.has_explicit_setup = True

    def read(self, name: str) -> object:
        """Return the stored value, initialising it to the default."""
        slot = self._slots[name]
        if not slot.is_assigned:
            slot.value = self._default_for(self._contract.prop(name))
        return slot.value

    def write(self, name: str, value: object) -> None:
        """Store *value* for the tracked property *name*."""
        self._slots[name].value = value

    @property
    def slots(self) -> dict[str, PropertySlot]:
        """Return a snapshot of the tracked slots."""
        return dict(self._slots)

    # ------------------------------------------------------------------
    # Child mocks
    # ------------------------------------------------------------------
    def child(self, name: str, contract_type: object) -> Mock[t.Any]:
        """Return the child mock for *name*, creating it on first access."""
        child = self._children.get(name)
        if child is None:
            child = self._child_factory(name, contract_type)
            self._children[name] = child
            logger.debug("Created child mock %s", child.name)
        return child

    def existing_child(self, name: str) -> Mock[t.Any] | None:
        """Return the memoized child for *name* without creating one."""
        return self._children.get(name)

    @property
    def children(self) -> dict[str, Mock[t.Any]]:
        """Return the memoized children keyed by member name."""
        return dict(self._children)


__all__ = ["PropertySlot", "PropertyStore"]
