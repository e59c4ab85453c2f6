"""Shared validation helpers."""

from __future__ import annotations


def validate_call_count(count: int, name: str = "count") -> None:
    """Ensure *count* is usable as an invocation count bound."""
    if isinstance(count, bool) or not isinstance(count, int):
        msg = f"{name} must be an integer"
        raise TypeError(msg)

    if count < 0:
        msg = f"{name} must be >= 0"
        raise ValueError(msg)


def validate_count_range(low: int, high: int) -> None:
    """Ensure ``low..high`` describes a non-empty inclusive range."""
    validate_call_count(low, "low")
    validate_call_count(high, "high")
    if low > high:
        msg = f"low ({low}) must not exceed high ({high})"
        raise ValueError(msg)
