"""Reliability score and band derived from a complete CFF6 vector."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Mapping, Optional, Union

from guards import clamp01, is_num, mean
from indicators import INDICATOR_KEYS, Cff6, indicator_path
from ledger import DerivationLedger

logger = logging.getLogger(__name__)

RELIABILITY_METHOD = "cff6_reliability_v1"
RELIABILITY_SPEC_SOURCE = "reliability_band_v1"
RELIABILITY_PATH = "backend.control.reliability_score"

# Indicator pairs expected to move together.
COHERENCE_PAIRS = (
    ("AAS", "CTF"),
    ("RDX", "CTF"),
    ("EDS", "AAS"),
    ("IFD", "CTF"),
)
GAP_TOLERANCE = 0.25
GAP_SPAN = 0.5

STRENGTH_FLOOR = 0.3
HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.5


class IncompleteIndicatorsError(ValueError):
    """Raised when reliability is requested without all six indicators."""


@dataclass
class ReliabilityResult:
    reliability_score: float
    strength: float
    coherence: float
    band: str

    def as_dict(self) -> Dict[str, Union[float, str]]:
        return asdict(self)


def pair_penalty(a: float, b: float) -> float:
    """Zero up to a 0.25 gap, rising linearly to 1 at a 0.75 gap."""

    gap = abs(clamp01(a) - clamp01(b))
    return clamp01((gap - GAP_TOLERANCE) / GAP_SPAN)


def select_band(strength: float, reliability_score: float) -> str:
    # Weak signal is LOW regardless of score.
    if strength < STRENGTH_FLOOR:
        return "LOW"
    if reliability_score >= HIGH_THRESHOLD:
        return "HIGH"
    if reliability_score >= MEDIUM_THRESHOLD:
        return "MEDIUM"
    return "LOW"


def _as_scores(cff6: Union[Cff6, Mapping[str, Optional[float]]]) -> Dict[str, Optional[float]]:
    if isinstance(cff6, Cff6):
        return cff6.as_dict()
    return {key: cff6.get(key) for key in INDICATOR_KEYS}


def reliability_from_cff6(cff6: Union[Cff6, Mapping[str, Optional[float]]]) -> ReliabilityResult:
    """Combine six indicator scores into a reliability score and band.

    All six scores must be finite numbers; anything else raises
    IncompleteIndicatorsError rather than producing a partial result.
    """

    scores = _as_scores(cff6)
    missing = [key for key in INDICATOR_KEYS if not is_num(scores.get(key))]
    if missing:
        raise IncompleteIndicatorsError(f"Reliability requires all CFF6 indicators; missing {missing}")

    xs = [clamp01(scores[key]) for key in INDICATOR_KEYS]
    strength = clamp01(mean(abs(x - 0.5) for x in xs) * 2)

    penalties = [pair_penalty(scores[a], scores[b]) for a, b in COHERENCE_PAIRS]
    coherence = clamp01(1 - mean(penalties))

    reliability_score = clamp01(0.6 * strength + 0.4 * coherence)
    band = select_band(strength, reliability_score)
    return ReliabilityResult(
        reliability_score=reliability_score,
        strength=strength,
        coherence=coherence,
        band=band,
    )


def aggregate_reliability(cff6: Cff6, ledger: DerivationLedger) -> Optional[ReliabilityResult]:
    """Compute reliability when the vector is complete, otherwise record why not."""

    needed = [indicator_path(key) for key in INDICATOR_KEYS]
    if not cff6.is_complete():
        ledger.unknown(
            json_path=RELIABILITY_PATH,
            reason="Reliability requires all CFF6 indicators. At least one indicator is null/unknown.",
            needed_inputs=needed,
        )
        logger.debug("Reliability skipped; missing indicators: %s", cff6.missing_keys())
        return None

    result = reliability_from_cff6(cff6)
    ledger.known(
        name="Reliability band from CFF6",
        writes=[f"{RELIABILITY_PATH}.{{method,r,band,params}}"],
        spec_source=RELIABILITY_SPEC_SOURCE,
        uses=needed,
    )
    logger.debug(
        "Reliability r=%.3f strength=%.3f coherence=%.3f band=%s",
        result.reliability_score,
        result.strength,
        result.coherence,
        result.band,
    )
    return result


__all__ = [
    "RELIABILITY_METHOD",
    "IncompleteIndicatorsError",
    "ReliabilityResult",
    "pair_penalty",
    "select_band",
    "reliability_from_cff6",
    "aggregate_reliability",
]
