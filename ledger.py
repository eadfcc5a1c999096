"""Side-channel records describing what a derivation computed and what it could not."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class UnknownCalc:
    """One blocking cause: a missing input or an undelivered calculation domain."""

    json_path: str
    reason: str
    needed_inputs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class KnownCalc:
    """Audit record for a calculation that ran: what it wrote and what it read."""

    name: str
    writes: List[str]
    spec_source: str
    uses: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DeriveSummary:
    known_calcs: List[KnownCalc] = field(default_factory=list)
    unknown_calcs: List[UnknownCalc] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "known_calcs": [calc.to_dict() for calc in self.known_calcs],
            "unknown_calcs": [calc.to_dict() for calc in self.unknown_calcs],
            "notes": list(self.notes),
        }


class DerivationLedger:
    """Append-only collector for a single derivation call.

    Entries are never deduplicated: the same ``json_path`` appearing twice
    means two separate calculations were blocked by it.
    """

    def __init__(self) -> None:
        self.known_calcs: List[KnownCalc] = []
        self.unknown_calcs: List[UnknownCalc] = []
        self.notes: List[str] = []

    def unknown(self, json_path: str, reason: str, needed_inputs: Optional[Iterable[str]] = None) -> UnknownCalc:
        needed = list(needed_inputs) if needed_inputs is not None else [json_path]
        entry = UnknownCalc(json_path=json_path, reason=reason, needed_inputs=needed)
        self.unknown_calcs.append(entry)
        return entry

    def known(self, name: str, writes: Iterable[str], spec_source: str, uses: Iterable[str]) -> KnownCalc:
        entry = KnownCalc(name=name, writes=list(writes), spec_source=spec_source, uses=list(uses))
        self.known_calcs.append(entry)
        return entry

    def extend_unknown(self, entries: Iterable[UnknownCalc]) -> None:
        self.unknown_calcs.extend(entries)

    def note(self, text: str) -> None:
        self.notes.append(text)

    def summary(self) -> DeriveSummary:
        return DeriveSummary(
            known_calcs=list(self.known_calcs),
            unknown_calcs=list(self.unknown_calcs),
            notes=list(self.notes),
        )


__all__ = ["UnknownCalc", "KnownCalc", "DeriveSummary", "DerivationLedger"]
