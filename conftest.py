"""Global test configuration and shared fixtures."""

from __future__ import annotations

import logging

import pytest

from contract_mox import CollectingReporter, Mock, MockBehavior
from tests.helpers.contracts import IFoo

pytest_plugins = ("contract_mox.pytest_plugin", "pytester")


@pytest.fixture
def collecting_reporter() -> CollectingReporter:
    """Return a reporter that stores failures instead of raising them."""
    return CollectingReporter()


@pytest.fixture
def foo_mock() -> Mock[IFoo]:
    """Return a loose mock of the ``IFoo`` sample contract."""
    return Mock(IFoo)


@pytest.fixture
def strict_foo_mock() -> Mock[IFoo]:
    """Return a strict mock of the ``IFoo`` sample contract."""
    return Mock(IFoo, behavior=MockBehavior.STRICT)


@pytest.fixture(autouse=True)
def capture_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    """Capture contract_mox debug records so failing tests show dispatch."""
    caplog.set_level(logging.DEBUG, logger="contract_mox")
