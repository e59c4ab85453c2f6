"""pytest-bdd steps for event subscriptions."""

from __future__ import annotations

from pytest_bdd import given, parsers, then, when

from contract_mox import Mock
from tests.helpers.contracts import Doctor, IAnimal


@given("a doctor watching the animal", target_fixture="doctor")
def create_doctor(mock: Mock[IAnimal]) -> Doctor:
    """Subscribe a doctor to the animal's events."""
    return Doctor(mock.object)


@when("the animal falls ill")
def animal_falls_ill(mock: Mock[IAnimal]) -> None:
    """Raise ``falls_ill`` from the test."""
    mock.raise_event("falls_ill", mock.object, {})


@when("the animal stumbles")
def animal_stumbles(mock: Mock[IAnimal]) -> None:
    """Call ``stumble`` on the mock object."""
    mock.object.stumble()


@then(parsers.cfparse("the doctor should have cured {count:d} times"))
def check_cured(doctor: Doctor, count: int) -> None:
    """Assert how often the doctor reacted."""
    assert doctor.times_cured == count
