"""Example tests for properties and recursive mocks."""

from __future__ import annotations

import typing as t

import pytest

from contract_mox import DefaultValue, Mock

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from contract_mox import MockRepository


class Address(t.Protocol):
    """Postal address."""

    city: str


class Customer(t.Protocol):
    """Customer with a nested address."""

    name: str

    @property
    def address(self) -> Address: ...


def shipping_label(customer: Customer) -> str:
    """Return the label printed on a parcel."""
    return f"{customer.name}, {customer.address.city}"


def test_nested_properties_are_configured_by_path() -> None:
    """Dotted paths reach through contract-typed properties."""
    customer = Mock(Customer)
    customer.setup_get("name").returns("Ada")
    customer.setup_get("address.city").returns("London")

    assert shipping_label(customer.object) == "Ada, London"
    customer.verify_get("address.city")


@pytest.mark.contract_mox(behavior="loose", default_value="mock")
def test_mock_defaults_from_the_fixture(contract_mox: MockRepository) -> None:
    """Loose fixture mocks with mock defaults never return ``None`` children."""
    customer = contract_mox.create(Customer)
    assert customer.default_value is DefaultValue.MOCK

    address = customer.object.address
    Mock.get(address).setup_property("city", "Paris")

    assert shipping_label(customer.object) == ", Paris"
