"""Contract-driven mock objects with setups, dispatch and verification.

A :class:`Mock` synthesizes an object implementing a contract (a
``typing.Protocol``, an abstract class or an explicit :class:`Contract`),
answers its calls from configured setups and records every invocation for
later verification.
"""

from __future__ import annotations

from .behaviors import CallbackPosition
from .comparators import (
    Any,
    Contains,
    Exact,
    IsA,
    IsIn,
    Predicate,
    Range,
    Regex,
    StartsWith,
)
from .contract import (
    Accessor,
    Contract,
    Event,
    Method,
    Out,
    Param,
    ParamKind,
    Property,
    Ref,
)
from .controller import Mock, MockBehavior, mock_of
from .defaults import DefaultValue
from .errors import (
    AdvisoryWarning,
    AggregateVerificationError,
    ConfigurationError,
    ConfigurationMissingError,
    ContractMoxError,
    VerificationError,
)
from .expectations import CallPattern, Times
from .journal import Invocation
from .pytest_plugin import contract_mox as contract_mox_fixture
from .registry import Setup
from .reporting import CollectingReporter, RaisingReporter, Reporter
from .repository import MockRepository

__all__ = [
    "Accessor",
    "AdvisoryWarning",
    "AggregateVerificationError",
    "Any",
    "CallPattern",
    "CallbackPosition",
    "CollectingReporter",
    "ConfigurationError",
    "ConfigurationMissingError",
    "Contains",
    "Contract",
    "ContractMoxError",
    "DefaultValue",
    "Event",
    "Exact",
    "Invocation",
    "IsA",
    "IsIn",
    "Method",
    "Mock",
    "MockBehavior",
    "MockRepository",
    "Out",
    "Param",
    "ParamKind",
    "Predicate",
    "Property",
    "RaisingReporter",
    "Range",
    "Ref",
    "Regex",
    "Reporter",
    "Setup",
    "StartsWith",
    "Times",
    "VerificationError",
    "contract_mox_fixture",
    "mock_of",
]
