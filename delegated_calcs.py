"""Calculation domains that have no confirmed formula yet.

Nothing here computes a value. Each domain contributes a fixed ledger
entry naming the inputs it will need once its rules are specified, and
the report passes through unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from ledger import UnknownCalc

logger = logging.getLogger(__name__)

PENDING_DOMAINS = (
    UnknownCalc(
        json_path="backend.rsl",
        reason=(
            "RSL aggregates, levels and cohort placement are not implemented. "
            "Provide confirmed formulas and cohort distributions to compute them."
        ),
        needed_inputs=[
            "gpt_raw.raw_features",
            "backend.rsl.* (targets)",
            "catalog.* (if mapping required)",
        ],
    ),
    UnknownCalc(
        json_path="backend.control",
        reason="Control distribution and pattern classification formulas are not implemented.",
        needed_inputs=[
            "backend.cff.indicator_scores.*",
            "backend.rsl.*",
            "catalog.control_patterns (if used)",
        ],
    ),
    UnknownCalc(
        json_path="backend.role_fit",
        reason=(
            "Role-fit scoring and Top-N selection are not implemented. "
            "Provide finalized distance/normalization formulas and the job catalog mapping."
        ),
        needed_inputs=[
            "backend.cff.indicator_scores.*",
            "backend.rsl.*",
            "catalog.role_fit_* (job groups/jobs)",
        ],
    ),
)


def compute_backend_required_calcs(
    report: Any, inputs: Optional[Mapping[str, Any]] = None
) -> Tuple[Any, List[UnknownCalc]]:
    """Return the report untouched plus one unknown entry per pending domain.

    ``inputs`` is reserved for cohort norms and similar external data.
    """

    unknown = [
        UnknownCalc(json_path=entry.json_path, reason=entry.reason, needed_inputs=list(entry.needed_inputs))
        for entry in PENDING_DOMAINS
    ]
    logger.debug("Delegated domains pending: %s", [entry.json_path for entry in unknown])
    return report, unknown


__all__ = ["PENDING_DOMAINS", "compute_backend_required_calcs"]
