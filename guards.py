"""Numeric guard primitives shared by every derivation formula."""

from __future__ import annotations

import math
from typing import Any, Iterable


def is_num(value: Any) -> bool:
    """True for real, finite numbers. Booleans are not numbers here."""

    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers beyond float range cannot take part in float arithmetic.
        return False


def is_count(value: Any) -> bool:
    """True for integer counts, including integral floats such as ``3.0``."""

    if not is_num(value):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return True


def _finite_or_zero(value: Any) -> float:
    return float(value) if is_num(value) else 0.0


def clamp01(x: Any) -> float:
    if not is_num(x):
        return 0.0
    return max(0.0, min(1.0, float(x)))


def safe_div(a: Any, b: Any) -> float:
    # Denominator floors at 1, so empty or negative counts under-count rather than fail.
    return _finite_or_zero(a) / max(1.0, _finite_or_zero(b))


def mean(xs: Iterable[Any]) -> float:
    finite = [float(x) for x in xs if is_num(x)]
    if not finite:
        return 0.0
    return sum(finite) / len(finite)


__all__ = ["is_num", "is_count", "clamp01", "safe_div", "mean"]
