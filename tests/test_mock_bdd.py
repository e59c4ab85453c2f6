"""Behavioural tests for mocks using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"), "set membership selects the setup"
)
def test_set_membership() -> None:
    """Matching and default values for ``do_something``."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"),
    "factory and after callback produce a counter",
)
def test_counter() -> None:
    """Factories and callbacks run on every call."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"),
    "output arguments are written on a match",
)
def test_output_arguments() -> None:
    """Output slots receive configured values."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"),
    "configured failures are raised and recorded",
)
def test_configured_failures() -> None:
    """Failures propagate and the call is still recorded."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"),
    "strict mocks reject unconfigured calls",
)
def test_strict_mocks() -> None:
    """Strict mocks fail fast."""
    pass


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"),
    "the most recent matching setup wins",
)
def test_last_setup_wins() -> None:
    """Later setups shadow earlier ones."""
    pass


@scenario(
    str(FEATURES_DIR / "properties.feature"),
    "tracked properties remember written values",
)
def test_tracked_properties() -> None:
    """Tracked properties store values."""
    pass


@scenario(str(FEATURES_DIR / "properties.feature"), "recursive mocks are reused")
def test_recursive_mocks() -> None:
    """Child mocks are memoized."""
    pass


@scenario(str(FEATURES_DIR / "events.feature"), "a doctor cures a sick animal")
def test_events() -> None:
    """Raised and configured events reach subscribers."""
    pass


@scenario(
    str(FEATURES_DIR / "verification.feature"),
    "a consumer's calls are verified",
)
def test_consumer_verification() -> None:
    """Call counts and unverified calls are checked."""
    pass


@scenario(
    str(FEATURES_DIR / "verification.feature"),
    "a repository aggregates failures",
)
def test_repository_aggregation() -> None:
    """Repositories gather failures from all mocks."""
    pass
