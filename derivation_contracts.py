from typing import Any, Dict, List

from pydantic import BaseModel, ValidationError

from derive import STRICT_NOTE
from indicators import INDICATOR_KEYS
from ledger import DeriveSummary
from models import (
    DeriveSummaryModel,
    GptRawModel,
    IndicatorScoresModel,
    ReliabilityScoreModel,
)


def _format_errors(prefix: str, exc: ValidationError) -> List[str]:
    errors: List[str] = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        path = f"{prefix}.{loc}" if loc else prefix
        errors.append(f"{path}: {error.get('msg', 'invalid value')}")
    return errors


def _validate(model: type, payload: Any, prefix: str) -> List[str]:
    try:
        model.model_validate(payload)
    except ValidationError as exc:
        return _format_errors(prefix, exc)
    return []


def _section(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def lint_gpt_raw(report: Dict[str, Any]) -> List[str]:
    """Return producer-contract violations in gpt_raw. Violations do not block derivation."""

    if not isinstance(report, dict):
        return ["Report must be a dictionary."]
    gpt_raw = report.get("gpt_raw")
    if gpt_raw is None:
        return ["Missing top-level key: gpt_raw"]
    if not isinstance(gpt_raw, dict):
        return ["gpt_raw must be an object."]
    errors = _validate(GptRawModel, gpt_raw, "gpt_raw")
    if gpt_raw.get("raw_features") is None:
        errors.append("gpt_raw.raw_features is missing.")
    return errors


def lint_derived_report(report: Dict[str, Any]) -> List[str]:
    """Return violations in the sections written by derive_report."""

    if not isinstance(report, dict):
        return ["Report must be a dictionary."]

    errors: List[str] = []

    scores = _section(report, "backend", "cff", "indicator_scores")
    if not isinstance(scores, dict):
        errors.append("backend.cff.indicator_scores must be an object.")
        scores = {}
    else:
        errors.extend(_validate(IndicatorScoresModel, scores, "backend.cff.indicator_scores"))

    reliability = _section(report, "backend", "control", "reliability_score")
    if not isinstance(reliability, dict):
        errors.append("backend.control.reliability_score must be an object.")
        return errors
    errors.extend(_validate(ReliabilityScoreModel, reliability, "backend.control.reliability_score"))

    if reliability.get("r") is not None:
        missing = [key for key in INDICATOR_KEYS if scores.get(key) is None]
        if missing:
            errors.append(
                f"backend.control.reliability_score.r is set but indicators are null: {missing}"
            )
    return errors


def lint_derive_summary(summary: Any) -> List[str]:
    """Return violations in a derivation summary (DeriveSummary or its dict form)."""

    if isinstance(summary, DeriveSummary):
        summary = summary.to_dict()
    elif isinstance(summary, BaseModel):
        summary = summary.model_dump()
    if not isinstance(summary, dict):
        return ["Summary must be a dictionary."]

    errors: List[str] = []
    for key in ("known_calcs", "unknown_calcs", "notes"):
        if key not in summary:
            errors.append(f"Missing top-level key: {key}")
    errors.extend(_validate(DeriveSummaryModel, summary, "summary"))

    notes = summary.get("notes")
    if isinstance(notes, list) and STRICT_NOTE not in notes:
        errors.append("summary.notes must carry the strict-derivation note.")
    return errors


__all__ = ["lint_gpt_raw", "lint_derived_report", "lint_derive_summary"]
