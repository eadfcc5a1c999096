"""Strict derivation of report indicators from extracted raw features.

Computes only what has an agreed formula (the CFF6 indicators and the
reliability band built from them). Missing or mistyped inputs never raise
and are never substituted: they are recorded as unknown calculations so
the upstream producer knows exactly what is still needed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from delegated_calcs import compute_backend_required_calcs
from indicators import INDICATOR_KEYS, RAW_FEATURES_PATH, Cff6, compute_cff6
from ledger import DerivationLedger, DeriveSummary
from reliability import RELIABILITY_METHOD, ReliabilityResult, aggregate_reliability
from report_shape import ensure_backend_shape

logger = logging.getLogger(__name__)

STRICT_NOTE = "Strict derivation: no fallbacks, no default substitutions. Unknowns recorded for missing inputs."


@dataclass
class DerivationResult:
    report: MutableMapping[str, Any]
    summary: DeriveSummary
    cff6: Optional[Cff6] = None
    reliability: Optional[ReliabilityResult] = None


def _raw_features(report: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    gpt_raw = report.get("gpt_raw")
    if not isinstance(gpt_raw, Mapping):
        return None
    raw_features = gpt_raw.get("raw_features")
    if not isinstance(raw_features, Mapping):
        return None
    return raw_features


def _write_reliability(reliability_block: MutableMapping[str, Any], result: Optional[ReliabilityResult]) -> None:
    reliability_block["method"] = RELIABILITY_METHOD
    if result is None:
        # Method is known but the value is not; LOW here means unknown, not bad.
        reliability_block["r"] = None
        reliability_block["band"] = "LOW"
        reliability_block["params"] = {"alpha": None, "beta": None, "mu": None, "tau": None}
        return
    reliability_block["r"] = result.reliability_score
    reliability_block["band"] = result.band
    reliability_block["params"] = {"alpha": 0, "beta": 0, "mu": 0, "tau": 0}


def derive_report(
    report: MutableMapping[str, Any], inputs: Optional[Mapping[str, Any]] = None
) -> DerivationResult:
    """Derive indicator scores and reliability into ``report`` in place.

    Raises ReportShapeError only when the container itself is malformed.
    """

    ledger = DerivationLedger()
    backend = ensure_backend_shape(report)

    cff6: Optional[Cff6] = None
    reliability: Optional[ReliabilityResult] = None

    raw_features = _raw_features(report)
    if raw_features is None:
        ledger.unknown(
            json_path=RAW_FEATURES_PATH,
            reason=f"Missing {RAW_FEATURES_PATH}, cannot compute any CFF indicators.",
            needed_inputs=[RAW_FEATURES_PATH],
        )
        logger.warning("No raw features on report; CFF6 and reliability left unknown")
    else:
        cff6 = compute_cff6(raw_features, ledger)
        scores = backend["cff"]["indicator_scores"]
        for key in INDICATOR_KEYS:
            scores[key] = getattr(cff6, key)

        reliability = aggregate_reliability(cff6, ledger)
        _write_reliability(backend["control"]["reliability_score"], reliability)

    ledger.note(STRICT_NOTE)

    report, delegated_unknown = compute_backend_required_calcs(report, inputs or {})
    ledger.extend_unknown(delegated_unknown)

    summary = ledger.summary()
    logger.info(
        "Derivation finished: %d known, %d unknown calcs",
        len(summary.known_calcs),
        len(summary.unknown_calcs),
    )
    return DerivationResult(report=report, summary=summary, cff6=cff6, reliability=reliability)


__all__ = ["STRICT_NOTE", "DerivationResult", "derive_report"]
