import pytest
from pydantic import ValidationError

from derivation_contracts import lint_derive_summary, lint_derived_report, lint_gpt_raw
from derive import derive_report
from models import RawFeaturesModel, ReliabilityScoreModel


def _valid_report():
    return {
        "gpt_raw": {
            "extraction_rules_version": "v1",
            "warnings": [],
            "raw_features": {
                "units": 12,
                "claims": 3,
                "sub_claims": 3,
                "warrants": 2,
                "structure_type": "networked",
                "transitions": 6,
                "transition_ok": 5,
                "reasons": 7,
                "hedges": 2,
                "loops": 1,
                "revisions": 3,
                "revision_depth_sum": 5,
                "belief_change": False,
                "evidence": 4,
                "evidence_types": {"citation": 2, "observation": 1, "comparison": 1, "other": 3},
                "intent_markers": 2,
                "drift_segments": 2,
            },
        }
    }


def test_derived_report_passes_lint():
    result = derive_report(_valid_report())
    assert lint_derived_report(result.report) == []
    assert lint_derive_summary(result.summary) == []
    assert lint_derive_summary(result.summary.to_dict()) == []


def test_placeholder_reliability_passes_lint():
    result = derive_report({"gpt_raw": {"raw_features": {"units": 3}}})
    assert lint_derived_report(result.report) == []


def test_out_of_range_scores_are_flagged():
    result = derive_report(_valid_report())
    report = result.report
    report["backend"]["cff"]["indicator_scores"]["AAS"] = 1.4
    report["backend"]["control"]["reliability_score"]["r"] = -0.1
    errors = lint_derived_report(report)
    assert any(error.startswith("backend.cff.indicator_scores.AAS") for error in errors)
    assert any(error.startswith("backend.control.reliability_score.r") for error in errors)


def test_unknown_reliability_must_carry_low_band():
    report = derive_report({}).report
    report["backend"]["control"]["reliability_score"]["band"] = "HIGH"
    errors = lint_derived_report(report)
    assert any("band must be LOW" in error for error in errors)


def test_reliability_without_full_vector_is_flagged():
    report = derive_report(_valid_report()).report
    report["backend"]["cff"]["indicator_scores"]["EDS"] = None
    errors = lint_derived_report(report)
    assert errors == ["backend.control.reliability_score.r is set but indicators are null: ['EDS']"]


def test_missing_sections_are_flagged():
    assert lint_derived_report([]) == ["Report must be a dictionary."]
    errors = lint_derived_report({"backend": {}})
    assert "backend.cff.indicator_scores must be an object." in errors
    assert "backend.control.reliability_score must be an object." in errors


def test_gpt_raw_producer_contract():
    assert lint_gpt_raw(_valid_report()) == []
    assert lint_gpt_raw({}) == ["Missing top-level key: gpt_raw"]
    assert lint_gpt_raw({"gpt_raw": {}}) == ["gpt_raw.raw_features is missing."]

    report = _valid_report()
    raw = report["gpt_raw"]["raw_features"]
    raw["transition_ok"] = True
    raw["structure_type"] = "circular"
    errors = lint_gpt_raw(report)
    assert any(error.startswith("gpt_raw.raw_features.transition_ok") for error in errors)
    assert any(error.startswith("gpt_raw.raw_features.structure_type") for error in errors)


def test_summary_lint():
    assert lint_derive_summary("summary") == ["Summary must be a dictionary."]
    errors = lint_derive_summary({"known_calcs": [], "unknown_calcs": [{"json_path": "", "reason": "x"}]})
    assert "Missing top-level key: notes" in errors
    assert any(error.startswith("summary.unknown_calcs.0.json_path") for error in errors)


def test_raw_features_model_rejects_negative_evidence_counts():
    with pytest.raises(ValidationError):
        RawFeaturesModel.model_validate({"evidence_types": {"numeric": -1}})
    model = RawFeaturesModel.model_validate({"units": 4, "extra_signal": "kept"})
    assert model.units == 4
    assert model.claims is None


def test_reliability_model():
    ReliabilityScoreModel.model_validate({"band": "LOW", "method": "unknown", "r": None})
    with pytest.raises(ValidationError):
        ReliabilityScoreModel.model_validate({"band": "MEDIUM", "method": "cff6_reliability_v1", "r": None})
    with pytest.raises(ValidationError):
        ReliabilityScoreModel.model_validate({"band": "GREAT", "method": "cff6_reliability_v1", "r": 0.5})
