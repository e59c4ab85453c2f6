"""Unit tests for :class:`contract_mox.repository.MockRepository`."""

from __future__ import annotations

import pytest

from contract_mox import (
    AggregateVerificationError,
    CollectingReporter,
    ConfigurationMissingError,
    DefaultValue,
    Mock,
    MockBehavior,
    MockRepository,
    VerificationError,
)
from tests.helpers.contracts import IAnimal, IBaz, IFoo


def test_create_uses_repository_defaults() -> None:
    """Mocks inherit behaviour and default value policy."""
    repository = MockRepository(MockBehavior.STRICT, default_value=DefaultValue.MOCK)
    foo = repository.create(IFoo)

    assert foo.behavior is MockBehavior.STRICT
    assert foo.default_value is DefaultValue.MOCK
    assert foo.reporter is repository.reporter
    assert repository.mocks == (foo,)
    with pytest.raises(ConfigurationMissingError):
        foo.object.get_count()


def test_per_mock_overrides() -> None:
    """Individual mocks may override the repository settings."""
    repository = MockRepository(MockBehavior.STRICT)
    baz = repository.create(IBaz, behavior=MockBehavior.LOOSE, name="baz")
    assert baz.behavior is MockBehavior.LOOSE
    assert baz.name == "baz"
    assert baz.object.name == ""


def test_verify_passes_when_verifiable_setups_matched() -> None:
    """A repository with satisfied setups verifies silently."""
    repository = MockRepository()
    foo = repository.create(IFoo)
    foo.setup("do_something", "abc").returns(True).verifiable()
    foo.object.do_something("abc")
    repository.verify()


def test_verify_aggregates_failures_across_mocks() -> None:
    """Every failing mock is reported in one error."""
    repository = MockRepository(MockBehavior.LOOSE)
    foo = repository.create(IFoo)
    animal = repository.create(IAnimal)
    foo.setup("get_count").returns(1).verifiable()
    animal.setup("stumble").verifiable()

    with pytest.raises(AggregateVerificationError) as excinfo:
        repository.verify()

    err = excinfo.value
    assert len(err.failures) == 2
    assert all(isinstance(f, VerificationError) for f in err.failures)
    text = str(err)
    assert text.startswith("verify() failed for 2 of 2 mocks.")
    assert "Setups of IFoo" in text
    assert "Setups of IAnimal" in text


def test_verify_all_and_no_other_calls() -> None:
    """Repository-wide checks cover every mock."""
    repository = MockRepository(MockBehavior.LOOSE)
    foo = repository.create(IFoo)
    foo.setup("get_count").returns(1)
    with pytest.raises(AggregateVerificationError):
        repository.verify_all()

    foo.object.get_count()
    repository.verify_all()
    with pytest.raises(AggregateVerificationError, match="get_count"):
        repository.verify_no_other_calls()
    foo.verify("get_count")
    repository.verify_no_other_calls()


def test_verify_in_order_across_mocks() -> None:
    """Ordered verification follows invocations across mocks."""
    repository = MockRepository(MockBehavior.LOOSE)
    foo = repository.create(IFoo)
    other = repository.create(IFoo, name="other")

    foo.object.do_something("first")
    other.object.add(1)
    foo.object.do_something("unrelated")
    foo.object.do_something("second")

    repository.verify_in_order(
        foo.call("do_something", "first"),
        other.call("add", 1),
        foo.call("do_something", "second"),
    )
    with pytest.raises(VerificationError, match="Ordered expectation violated"):
        repository.verify_in_order(
            foo.call("do_something", "second"),
            other.call("add", 1),
        )


def test_of_returns_loose_preset_objects() -> None:
    """``of`` creates tracked, loose objects registered with the repository."""
    repository = MockRepository(MockBehavior.STRICT)
    foo = repository.of(IFoo, name="preset")
    assert foo.name == "preset"
    assert foo.get_count() == 0
    assert Mock.get(foo) in repository.mocks


def test_failures_go_to_the_reporter() -> None:
    """A collecting reporter receives the aggregate instead of raising."""
    reporter = CollectingReporter()
    repository = MockRepository(reporter=reporter)
    repository.create(IFoo).setup("get_count").verifiable()
    repository.verify()
    assert len(reporter.failures) == 1
    assert isinstance(reporter.failures[0], AggregateVerificationError)


def test_repr() -> None:
    """The repository summarises its settings."""
    repository = MockRepository()
    repository.create(IBaz)
    assert repr(repository) == (
        "<MockRepository behavior=strict default_value=zero mocks=1>"
    )
