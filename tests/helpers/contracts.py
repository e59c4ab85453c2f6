"""Sample contracts and consumers shared by the test suites."""

from __future__ import annotations

import abc
import dataclasses as dc
import typing as t

from contract_mox import Event, Out, Ref


@dc.dataclass(eq=True)
class Bar:
    """Value object equal by ``name``; passed by reference to ``submit``."""

    name: str = ""


class IBaz(t.Protocol):
    """Contract reached through ``IFoo.some_baz``."""

    @property
    def name(self) -> str: ...


class IFoo(t.Protocol):
    """Contract exercising methods, slots, properties and a nested contract."""

    name: str
    some_other_property: int

    @property
    def some_baz(self) -> IBaz: ...

    def do_something(self, command: str | None) -> bool: ...

    def process_string(self, value: str) -> str: ...

    def try_parse(self, value: str, output: Out[str]) -> bool: ...

    def submit(self, bar: Ref[Bar]) -> bool: ...

    def get_count(self) -> int: ...

    def add(self, amount: int) -> bool: ...


class IAnimal(abc.ABC):
    """Abstract contract with events."""

    falls_ill = Event(params=("sender", "args"))
    abducted_by_aliens = Event(params=("galaxy", "returned"))

    @abc.abstractmethod
    def stumble(self) -> None: ...


class Person(abc.ABC):
    """Abstract contract whose members are all protected."""

    @property
    def _ssn(self) -> int: ...

    @_ssn.setter
    def _ssn(self, value: int) -> None: ...

    @abc.abstractmethod
    def _execute(self, cmd: str) -> None: ...

    def __audit(self) -> None: ...


class INode(t.Protocol):
    """Self-referential contract used for recursive child mocks."""

    label: str

    @property
    def parent(self) -> INode: ...


class Doctor:
    """Subscribes to an animal's events and counts them."""

    def __init__(self, animal: IAnimal) -> None:
        self.times_cured = 0
        self.abductions_observed = 0
        animal.falls_ill += self._cure
        animal.abducted_by_aliens += self._observe

    def _cure(self, sender: object, args: object) -> None:
        self.times_cured += 1

    def _observe(self, galaxy: int, returned: bool) -> None:
        self.abductions_observed += 1


class Consumer:
    """Uses an ``IFoo`` the way production code would."""

    def __init__(self, foo: IFoo) -> None:
        self._foo = foo

    def hello(self) -> str:
        """Ping the collaborator, read its name and set a property."""
        self._foo.do_something("ping")
        name = self._foo.name
        self._foo.some_other_property = 123
        return name


__all__ = [
    "Bar",
    "Consumer",
    "Doctor",
    "IAnimal",
    "IBaz",
    "IFoo",
    "INode",
    "Person",
]
