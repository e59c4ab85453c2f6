"""Unit tests for :mod:`contract_mox.journal`."""

from __future__ import annotations

import functools
import itertools

from contract_mox.comparators import Any
from contract_mox.contract import Accessor
from contract_mox.expectations import CallPattern
from contract_mox.journal import Invocation, InvocationLog


def _log() -> InvocationLog:
    return InvocationLog(functools.partial(next, itertools.count(1)))


def test_record_appends_in_call_order() -> None:
    """Entries keep their call order and carry increasing ordinals."""
    log = _log()
    first = log.record("do_something", Accessor.CALL, ("ping",))
    second = log.record("name", Accessor.GET)

    assert list(log) == [first, second]
    assert len(log) == 2
    assert log[1] is second
    assert (first.sequence, second.sequence) == (1, 2)
    assert first.ordinal < second.ordinal


def test_ordinals_are_shared_between_logs() -> None:
    """Invocations on different logs can be ordered against each other."""
    left, right = _log(), _log()
    a = left.record("a", Accessor.CALL)
    b = right.record("b", Accessor.CALL)
    c = left.record("c", Accessor.CALL)
    assert a.ordinal < b.ordinal < c.ordinal


def test_iteration_is_a_snapshot() -> None:
    """Recording while iterating does not disturb the iterator."""
    log = _log()
    log.record("a", Accessor.CALL)
    seen = []
    for inv in log:
        seen.append(inv.member)
        log.record("b", Accessor.CALL)
    assert seen == ["a"]
    assert len(log) == 2


def test_matching_and_for_member() -> None:
    """Queries filter by member, accessor and pattern."""
    log = _log()
    log.record("name", Accessor.GET)
    log.record("name", Accessor.SET, ("abc",))
    log.record("name", Accessor.SET, ("def",))

    assert len(log.for_member("name")) == 3
    assert len(log.for_member("name", Accessor.SET)) == 2
    pattern = CallPattern("name", Accessor.SET, (Any(),))
    assert [inv.args for inv in log.matching(pattern)] == [("abc",), ("def",)]


def test_unverified_tracks_marked_entries() -> None:
    """Entries matched by a verification are excluded from ``unverified``."""
    log = _log()
    ping = log.record("do_something", Accessor.CALL, ("ping",))
    pong = log.record("do_something", Accessor.CALL, ("pong",))
    log.mark_verified([ping])
    assert log.unverified() == [pong]


def test_describe_renders_each_accessor() -> None:
    """Invocations render like the expression that produced them."""
    assert Invocation("f", Accessor.CALL, ("x", 1), 1, 1).describe() == "f('x', 1)"
    assert Invocation("name", Accessor.GET, (), 1, 1).describe() == "name"
    assert Invocation("name", Accessor.SET, (3,), 1, 1).describe() == "name = 3"
    assert Invocation("ev", Accessor.ADD, ("h",), 1, 1).describe() == "ev add('h')"


def test_describe_shortens_long_arguments() -> None:
    """Very long argument reprs are truncated."""
    text = Invocation("f", Accessor.CALL, ("x" * 200,), 1, 1).describe()
    assert text.endswith("…)")
    assert len(text) < 100
