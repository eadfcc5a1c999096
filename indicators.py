"""CFF6 indicator formulas (AAS, CTF, RMD, RDX, EDS, IFD).

Every formula is computed only when all of its named operands are present
and well-typed in ``gpt_raw.raw_features``. A missing or mistyped operand
blocks that single indicator and is recorded in the ledger; nothing is
defaulted, proxied or estimated.
"""

from __future__ import annotations

import logging
from collections import abc
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional

from guards import clamp01, is_count, is_num, safe_div
from ledger import DerivationLedger, UnknownCalc

logger = logging.getLogger(__name__)

RAW_FEATURES_PATH = "gpt_raw.raw_features"
INDICATOR_SCORES_PATH = "backend.cff.indicator_scores"
CFF_SPEC_SOURCE = "cff6_formula_v1"

INDICATOR_KEYS = ("AAS", "CTF", "RMD", "RDX", "EDS", "IFD")

# Named operands of each formula, in the order they appear in it.
FORMULA_INPUTS: Dict[str, tuple] = {
    "AAS": ("sub_claims", "claims", "warrants", "structure_type"),
    "CTF": ("transitions", "units", "transition_ok"),
    "RMD": ("reasons", "units", "hedges", "loops"),
    "RDX": ("revision_depth_sum", "revisions", "belief_change"),
    "EDS": ("evidence_types", "evidence", "claims"),
    "IFD": ("intent_markers", "drift_segments", "units"),
}

STRUCTURE_WEIGHTS = {
    "networked": 1.0,
    "hierarchical": 0.6,
    "linear": 0.3,
}
DEFAULT_STRUCTURE_WEIGHT = 0.3

# Fixed key-to-bucket assignment. Keys outside these tuples are ignored.
EVIDENCE_BUCKETS = {
    "authority": ("authority", "citation"),
    "data": ("numeric", "observation", "counterevidence"),
    "example": ("example", "comparison"),
    "principle": ("definition", "mechanism", "normative"),
}


def raw_path(field_name: str) -> str:
    return f"{RAW_FEATURES_PATH}.{field_name}"


def indicator_path(key: str) -> str:
    return f"{INDICATOR_SCORES_PATH}.{key}"


@dataclass
class Cff6:
    """Six nullable unit-interval scores. ``None`` means not computable, never zero."""

    AAS: Optional[float] = None
    CTF: Optional[float] = None
    RMD: Optional[float] = None
    RDX: Optional[float] = None
    EDS: Optional[float] = None
    IFD: Optional[float] = None

    def as_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)

    def missing_keys(self) -> List[str]:
        return [key for key in INDICATOR_KEYS if not is_num(getattr(self, key))]

    def is_complete(self) -> bool:
        return not self.missing_keys()


class RawFeatureReader:
    """Typed access to raw features on behalf of one formula.

    Each accessor returns the value when it passes its type check and
    ``None`` otherwise, remembering the blocking cause.
    """

    def __init__(self, raw_features: Mapping[str, Any], indicator: str):
        self.raw_features = raw_features
        self.indicator = indicator
        self.missing: List[UnknownCalc] = []

    def _check(self, name: str, valid: bool, expected: str) -> bool:
        value = self.raw_features.get(name)
        if value is None:
            reason = f"Required for {self.indicator} ({CFF_SPEC_SOURCE}). Missing; no default allowed."
        elif not valid:
            reason = (
                f"Required for {self.indicator} ({CFF_SPEC_SOURCE}). "
                f"Invalid value: expected {expected}, got {type(value).__name__}."
            )
        else:
            return True
        self.missing.append(UnknownCalc(json_path=raw_path(name), reason=reason, needed_inputs=[raw_path(name)]))
        return False

    def count(self, name: str) -> Optional[float]:
        value = self.raw_features.get(name)
        if not self._check(name, is_count(value), "integer count"):
            return None
        return float(value)

    def flag(self, name: str) -> Optional[bool]:
        value = self.raw_features.get(name)
        if not self._check(name, isinstance(value, bool), "boolean"):
            return None
        return value

    def structure_type(self) -> Optional[str]:
        value = self.raw_features.get("structure_type")
        valid = isinstance(value, str) and value in STRUCTURE_WEIGHTS
        if not self._check("structure_type", valid, "one of linear, hierarchical, networked"):
            return None
        return value

    def evidence_types(self) -> Optional[Mapping[str, Any]]:
        value = self.raw_features.get("evidence_types")
        if not self._check("evidence_types", isinstance(value, abc.Mapping), "object of type counts"):
            return None
        return value

    def settle(self, ledger: DerivationLedger) -> bool:
        """Flush blocking causes into the ledger; True when the formula may run."""

        if self.missing:
            ledger.extend_unknown(self.missing)
            logger.debug(
                "%s blocked by %s", self.indicator, ", ".join(entry.json_path for entry in self.missing)
            )
            return False
        return True


def structure_weight(structure_type: Any) -> float:
    return STRUCTURE_WEIGHTS.get(structure_type, DEFAULT_STRUCTURE_WEIGHT)


def count_evidence_buckets(evidence_types: Mapping[str, Any]) -> int:
    """Number of the four evidence buckets whose summed counts are positive."""

    populated = 0
    for keys in EVIDENCE_BUCKETS.values():
        total = sum(float(evidence_types[key]) for key in keys if is_num(evidence_types.get(key)))
        if total > 0:
            populated += 1
    return populated


def _record_known(ledger: DerivationLedger, indicator: str) -> None:
    ledger.known(
        name=f"CFF.{indicator}",
        writes=[indicator_path(indicator)],
        spec_source=CFF_SPEC_SOURCE,
        uses=[raw_path(name) for name in FORMULA_INPUTS[indicator]],
    )


def compute_aas(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Optional[float]:
    """Argument architecture style."""

    reader = RawFeatureReader(raw_features, "AAS")
    sub_claims = reader.count("sub_claims")
    claims = reader.count("claims")
    warrants = reader.count("warrants")
    structure_type = reader.structure_type()
    if not reader.settle(ledger):
        return None

    hierarchy_ratio = safe_div(sub_claims, max(1.0, claims))
    warrant_ratio = safe_div(warrants, max(1.0, claims))
    value = clamp01(0.4 * hierarchy_ratio + 0.4 * warrant_ratio + 0.2 * structure_weight(structure_type))
    _record_known(ledger, "AAS")
    return value


def compute_ctf(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Optional[float]:
    """Transition flow. ``transition_ok`` is a count of valid transitions."""

    reader = RawFeatureReader(raw_features, "CTF")
    transitions = reader.count("transitions")
    units = reader.count("units")
    transition_ok = reader.count("transition_ok")
    if not reader.settle(ledger):
        return None

    transition_density = safe_div(transitions, max(1.0, units))
    valid_ratio = safe_div(transition_ok, max(1.0, transitions))
    value = clamp01(0.6 * transition_density + 0.4 * valid_ratio)
    _record_known(ledger, "CTF")
    return value


def compute_rmd(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Optional[float]:
    """Reasoning momentum: progress minus friction around a 0.5 midpoint."""

    reader = RawFeatureReader(raw_features, "RMD")
    reasons = reader.count("reasons")
    units = reader.count("units")
    hedges = reader.count("hedges")
    loops = reader.count("loops")
    if not reader.settle(ledger):
        return None

    progress_rate = safe_div(reasons, max(1.0, units))
    friction_rate = safe_div(hedges + loops, max(1.0, units))
    value = clamp01(0.5 + (progress_rate - friction_rate))
    _record_known(ledger, "RMD")
    return value


def compute_rdx(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Optional[float]:
    """Revision depth with a fixed bonus when the writer changed their position."""

    reader = RawFeatureReader(raw_features, "RDX")
    revision_depth_sum = reader.count("revision_depth_sum")
    revisions = reader.count("revisions")
    belief_change = reader.flag("belief_change")
    if not reader.settle(ledger):
        return None

    depth_avg = safe_div(revision_depth_sum, max(1.0, revisions))
    belief_bonus = 0.2 if belief_change else 0.0
    value = clamp01(0.7 * depth_avg + belief_bonus)
    _record_known(ledger, "RDX")
    return value


def compute_eds(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Optional[float]:
    """Evidence diversity: bucket coverage plus evidence per claim."""

    reader = RawFeatureReader(raw_features, "EDS")
    evidence_types = reader.evidence_types()
    evidence = reader.count("evidence")
    claims = reader.count("claims")
    if not reader.settle(ledger):
        return None

    type_diversity = clamp01(count_evidence_buckets(evidence_types) / len(EVIDENCE_BUCKETS))
    evidence_density = safe_div(evidence, max(1.0, claims))
    value = clamp01(0.6 * type_diversity + 0.4 * evidence_density)
    _record_known(ledger, "EDS")
    return value


def compute_ifd(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Optional[float]:
    """Intent-friction delta."""

    reader = RawFeatureReader(raw_features, "IFD")
    intent_markers = reader.count("intent_markers")
    drift_segments = reader.count("drift_segments")
    units = reader.count("units")
    if not reader.settle(ledger):
        return None

    intent_strength = 1.0 if intent_markers > 0 else 0.5
    drift_rate = safe_div(drift_segments, max(1.0, units))
    value = clamp01(intent_strength - drift_rate)
    _record_known(ledger, "IFD")
    return value


FORMULAS = {
    "AAS": compute_aas,
    "CTF": compute_ctf,
    "RMD": compute_rmd,
    "RDX": compute_rdx,
    "EDS": compute_eds,
    "IFD": compute_ifd,
}


def compute_cff6(raw_features: Mapping[str, Any], ledger: DerivationLedger) -> Cff6:
    """Run all six formulas independently; one blocked indicator never stops the others."""

    scores = {key: FORMULAS[key](raw_features, ledger) for key in INDICATOR_KEYS}
    cff6 = Cff6(**scores)
    logger.debug("CFF6 scores: %s", cff6.as_dict())
    return cff6


__all__ = [
    "INDICATOR_KEYS",
    "FORMULA_INPUTS",
    "EVIDENCE_BUCKETS",
    "Cff6",
    "RawFeatureReader",
    "structure_weight",
    "count_evidence_buckets",
    "compute_aas",
    "compute_ctf",
    "compute_rmd",
    "compute_rdx",
    "compute_eds",
    "compute_ifd",
    "compute_cff6",
    "raw_path",
    "indicator_path",
]
