"""Pytest plugin providing the ``contract_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .controller import MockBehavior
from .defaults import DefaultValue
from .repository import MockRepository

logger = logging.getLogger(__name__)

_SETTINGS: t.Final = ("behavior", "default_value", "auto_verify")


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("contract_mox")
    group.addoption(
        "--contract-mox-behavior",
        action="store",
        dest="contract_mox_behavior",
        choices=[b.value for b in MockBehavior],
        default=None,
        help=(
            "Behaviour of mocks created through the contract_mox fixture. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--contract-mox-default-value",
        action="store",
        dest="contract_mox_default_value",
        choices=[d.value for d in DefaultValue],
        default=None,
        help=(
            "Default value policy for unconfigured members. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--contract-mox-auto-verify",
        action="store_true",
        dest="contract_mox_auto_verify",
        default=None,
        help=(
            "Verify the contract_mox repository during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-contract-mox-auto-verify",
        action="store_false",
        dest="contract_mox_auto_verify",
        default=None,
        help=(
            "Skip verification of the contract_mox repository during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "contract_mox_behavior",
        "Behaviour of fixture mocks: 'strict' or 'loose'.",
        default=MockBehavior.STRICT.value,
    )
    parser.addini(
        "contract_mox_default_value",
        "Default value policy of fixture mocks: 'zero' or 'mock'.",
        default=DefaultValue.ZERO.value,
    )
    parser.addini(
        "contract_mox_auto_verify",
        "Call verify() on the contract_mox repository during teardown.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "contract_mox(behavior: str = 'strict', default_value: str = 'zero', "
            "auto_verify: bool = True): override contract_mox fixture settings "
            "for a single test."
        ),
    )


class _ContractMoxItem(t.Protocol):
    """pytest item carrying contract_mox teardown metadata."""

    _contract_mox_repository: MockRepository | None
    _contract_mox_verify_error: Exception | None
    _contract_mox_verify_should_fail: bool


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach the report of each stage to the test item.

    Teardown uses the call-stage report to decide whether a verification
    failure should fail the test or only be attached to the report.
    """
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _apply_deferred_verify_failure(item, rep)


def _resolve_settings(request: pytest.FixtureRequest) -> dict[str, t.Any]:
    """Return the fixture settings after applying every override layer."""
    # Priority order: marker > fixture param > CLI option > INI setting
    config = request.config
    settings: dict[str, t.Any] = {
        "behavior": config.getini("contract_mox_behavior"),
        "default_value": config.getini("contract_mox_default_value"),
        "auto_verify": bool(config.getini("contract_mox_auto_verify")),
    }
    for key in _SETTINGS:
        cli_value = config.getoption(f"contract_mox_{key}", None)
        if cli_value is not None:
            settings[key] = cli_value
    settings.update(_get_param_settings(request))
    settings.update(_get_marker_settings(request))
    return {
        "behavior": MockBehavior(settings["behavior"]),
        "default_value": DefaultValue(settings["default_value"]),
        "auto_verify": bool(settings["auto_verify"]),
    }


def _get_marker_settings(request: pytest.FixtureRequest) -> dict[str, t.Any]:
    """Return marker overrides, if any."""
    marker = request.node.get_closest_marker("contract_mox")
    if marker is None:
        return {}
    unknown = sorted(set(marker.kwargs) - set(_SETTINGS))
    if unknown:
        msg = f"contract_mox marker got unexpected keywords: {unknown}"
        raise TypeError(msg)
    return dict(marker.kwargs)


def _get_param_settings(request: pytest.FixtureRequest) -> dict[str, t.Any]:
    """Return fixture parameter overrides, if any."""
    param = getattr(request, "param", None)
    if param is None:
        return {}
    if isinstance(param, bool):
        return {"auto_verify": param}
    if isinstance(param, (str, MockBehavior)):
        return {"behavior": param}
    if isinstance(param, dict):
        unknown = sorted(set(param) - set(_SETTINGS))
        if unknown:
            msg = (
                "contract_mox fixture param dict accepts "
                f"{list(_SETTINGS)}, got unexpected keys: {unknown}"
            )
            raise TypeError(msg)
        return dict(param)
    msg = (
        "contract_mox fixture param must be a bool, a behavior name or a dict, "
        f"got {type(param).__name__}"
    )
    raise TypeError(msg)


def _apply_deferred_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Attach a verification error swallowed during teardown to the report."""
    err: Exception | None = getattr(item, "_contract_mox_verify_error", None)
    if err is None:
        return
    delattr(item, "_contract_mox_verify_error")
    should_fail = getattr(item, "_contract_mox_verify_should_fail", False)
    if hasattr(item, "_contract_mox_verify_should_fail"):
        delattr(item, "_contract_mox_verify_should_fail")
    if not should_fail:
        report.sections.append(
            ("contract_mox verification", f"{type(err).__name__}: {err}")
        )


@pytest.fixture
def contract_mox(
    request: pytest.FixtureRequest,
) -> t.Generator[MockRepository, None, None]:
    """Provide a :class:`MockRepository` verified when the test finishes."""
    settings = _resolve_settings(request)
    repository = MockRepository(
        settings["behavior"], default_value=settings["default_value"]
    )
    typed_item = t.cast("_ContractMoxItem", request.node)
    typed_item._contract_mox_repository = repository
    typed_item._contract_mox_verify_error = None
    typed_item._contract_mox_verify_should_fail = False
    try:
        yield repository
    except Exception:
        logger.exception("Error during contract_mox fixture test execution")
        raise
    finally:
        _teardown_contract_mox(
            request.node, repository, auto_verify=settings["auto_verify"]
        )


def _teardown_contract_mox(
    item: pytest.Item, repository: MockRepository, *, auto_verify: bool
) -> None:
    """Verify *repository* and clear per-item state."""
    typed_item = t.cast("_ContractMoxItem", item)
    should_raise = False
    if auto_verify:
        try:
            repository.verify()
        except Exception as err:
            logger.exception("Error during contract_mox verification")
            typed_item._contract_mox_verify_error = err
            should_fail = not _call_stage_failed(item)
            typed_item._contract_mox_verify_should_fail = should_fail
            should_raise = should_fail
    if getattr(typed_item, "_contract_mox_repository", None) is repository:
        delattr(typed_item, "_contract_mox_repository")
    if should_raise:
        err = typed_item._contract_mox_verify_error
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)


__all__ = ["contract_mox", "pytest_addoption", "pytest_configure"]
