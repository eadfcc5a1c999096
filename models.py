from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, model_validator

Band = Literal["HIGH", "MEDIUM", "LOW"]
StructureType = Literal["linear", "hierarchical", "networked"]


class RawFeaturesModel(BaseModel):
    """Producer contract for gpt_raw.raw_features. Every field may be absent."""

    model_config = ConfigDict(extra="allow")

    units: Optional[StrictInt] = Field(default=None, ge=0)
    claims: Optional[StrictInt] = Field(default=None, ge=0)
    sub_claims: Optional[StrictInt] = Field(default=None, ge=0)
    evidence: Optional[StrictInt] = Field(default=None, ge=0)
    warrants: Optional[StrictInt] = Field(default=None, ge=0)
    reasons: Optional[StrictInt] = Field(default=None, ge=0)
    transitions: Optional[StrictInt] = Field(default=None, ge=0)
    # A count of valid transitions, not a yes/no flag.
    transition_ok: Optional[StrictInt] = Field(default=None, ge=0)
    revisions: Optional[StrictInt] = Field(default=None, ge=0)
    revision_depth_sum: Optional[StrictInt] = Field(default=None, ge=0)
    intent_markers: Optional[StrictInt] = Field(default=None, ge=0)
    drift_segments: Optional[StrictInt] = Field(default=None, ge=0)
    hedges: Optional[StrictInt] = Field(default=None, ge=0)
    loops: Optional[StrictInt] = Field(default=None, ge=0)
    structure_type: Optional[StructureType] = None
    belief_change: Optional[StrictBool] = None
    evidence_types: Optional[Dict[str, StrictInt]] = None

    @model_validator(mode="after")
    def validate_evidence_counts(self) -> "RawFeaturesModel":
        for key, value in (self.evidence_types or {}).items():
            if value < 0:
                raise ValueError(f"evidence_types.{key} must be non-negative (got {value})")
        return self


class GptRawModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    extraction_rules_version: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    raw_features: Optional[RawFeaturesModel] = None


class IndicatorScoresModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    AAS: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    CTF: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    RMD: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    RDX: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    EDS: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    IFD: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    KPF_SIM: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    TPS_H: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ReliabilityParamsModel(BaseModel):
    alpha: Optional[float] = None
    beta: Optional[float] = None
    mu: Optional[float] = None
    tau: Optional[float] = None


class ReliabilityScoreModel(BaseModel):
    band: Band
    method: str
    r: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    params: ReliabilityParamsModel = Field(default_factory=ReliabilityParamsModel)

    @model_validator(mode="after")
    def validate_unknown_band(self) -> "ReliabilityScoreModel":
        # r=None means unknown; the only band allowed alongside it is the LOW placeholder.
        if self.r is None and self.band != "LOW":
            raise ValueError(f"band must be LOW when r is null (got {self.band})")
        return self


class UnknownCalcModel(BaseModel):
    json_path: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    needed_inputs: List[str] = Field(default_factory=list)


class KnownCalcModel(BaseModel):
    name: str = Field(min_length=1)
    writes: List[str]
    spec_source: str
    uses: List[str]


class DeriveSummaryModel(BaseModel):
    known_calcs: List[KnownCalcModel] = Field(default_factory=list)
    unknown_calcs: List[UnknownCalcModel] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
