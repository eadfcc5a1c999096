"""Ensure the report container has the nested sections derivation writes into."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Dict


class ReportShapeError(TypeError):
    """The report container (or a section the engine owns) is not a mutable object."""


def default_reliability_block() -> Dict[str, Any]:
    return {
        "band": "LOW",
        "method": "unknown",
        "r": None,
        "params": {"alpha": None, "beta": None, "mu": None, "tau": None},
    }


def _child(parent: MutableMapping[str, Any], key: str, path: str) -> MutableMapping[str, Any]:
    node = parent.get(key)
    if node is None:
        node = {}
        parent[key] = node
    elif not isinstance(node, MutableMapping):
        raise ReportShapeError(f"{path} must be an object, got {type(node).__name__}")
    return node


def ensure_backend_shape(report: Any) -> MutableMapping[str, Any]:
    """Create missing containers in place; existing values are left untouched.

    Returns the ``backend`` section.
    """

    if not isinstance(report, MutableMapping):
        raise ReportShapeError(f"report must be a mutable object, got {type(report).__name__}")

    backend = _child(report, "backend", "backend")
    cff = _child(backend, "cff", "backend.cff")
    scores = _child(cff, "indicator_scores", "backend.cff.indicator_scores")
    control = _child(backend, "control", "backend.control")

    reliability = control.get("reliability_score")
    if reliability is None:
        control["reliability_score"] = default_reliability_block()
    elif not isinstance(reliability, MutableMapping):
        raise ReportShapeError(
            f"backend.control.reliability_score must be an object, got {type(reliability).__name__}"
        )

    # Telemetry-based indicators are owned elsewhere; only mark them as not computed here.
    scores.setdefault("KPF_SIM", None)
    scores.setdefault("TPS_H", None)
    return backend


__all__ = ["ReportShapeError", "default_reliability_block", "ensure_backend_shape"]
