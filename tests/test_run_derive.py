import json
from pathlib import Path

import pytest

import run_derive
from config import DeriveConfig
from derive import derive_report
from file_utils import DerivationFileManager, InputFileError, load_json_object


def _write(path: Path, payload) -> str:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _raw_features():
    return {
        "units": 10,
        "claims": 4,
        "sub_claims": 2,
        "warrants": 3,
        "structure_type": "hierarchical",
        "transitions": 5,
        "transition_ok": 4,
        "reasons": 6,
        "hedges": 1,
        "loops": 0,
        "revisions": 2,
        "revision_depth_sum": 3,
        "belief_change": True,
        "evidence": 5,
        "evidence_types": {"authority": 1, "numeric": 1},
        "intent_markers": 1,
        "drift_segments": 1,
    }


def _only_run_dir(base: Path) -> Path:
    runs = [path for path in base.iterdir() if path.is_dir()]
    assert len(runs) == 1
    return runs[0]


def test_load_json_object_rejects_non_objects(tmp_path):
    with pytest.raises(InputFileError):
        load_json_object(_write(tmp_path / "list.json", [1, 2]))
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(InputFileError):
        load_json_object(str(broken))
    with pytest.raises(InputFileError):
        load_json_object(str(tmp_path / "absent.json"))


def test_save_derivation_writes_report_and_summary(tmp_path):
    manager = DerivationFileManager(str(tmp_path / "out"))
    run_dir = manager.create_run_directory("essay 42.json")
    assert Path(run_dir).name.endswith("essay_42")

    result = derive_report({"gpt_raw": {"raw_features": _raw_features()}})
    written = manager.save_derivation(result, run_dir, {"summary": []})

    report = json.loads(Path(written["report"]).read_text(encoding="utf-8"))
    summary = json.loads(Path(written["summary"]).read_text(encoding="utf-8"))
    assert report["backend"]["control"]["reliability_score"]["band"] == "HIGH"
    assert summary["reliability_components"]["band"] == "HIGH"
    assert len(summary["known_calcs"]) == 7
    assert json.loads(Path(written["lint"]).read_text(encoding="utf-8")) == {"summary": []}


def test_summary_file_can_be_disabled(tmp_path, monkeypatch):
    monkeypatch.setattr(DeriveConfig, "WRITE_SUMMARY", False)
    manager = DerivationFileManager(str(tmp_path))
    run_dir = manager.create_run_directory("r.json")
    written = manager.save_derivation(derive_report({}), run_dir)
    assert set(written) == {"report"}


def test_cli_derives_and_lints(tmp_path):
    source = _write(tmp_path / "report.json", {"gpt_raw": {"raw_features": _raw_features()}})
    out = tmp_path / "runs"

    code = run_derive.main([source, "--output-dir", str(out), "--lint", "--require-reliability"])

    assert code == run_derive.EXIT_OK
    run_dir = _only_run_dir(out)
    lint = json.loads((run_dir / "lint_findings.json").read_text(encoding="utf-8"))
    assert lint == {"gpt_raw": [], "derived_report": [], "summary": []}
    derived = json.loads((run_dir / "derived_report.json").read_text(encoding="utf-8"))
    assert derived["backend"]["cff"]["indicator_scores"]["IFD"] == pytest.approx(0.9)
    logs = list(run_dir.glob("derive_log_*.log"))
    assert len(logs) == 1
    log_text = logs[0].read_text(encoding="utf-8")
    assert "Derivation complete." in log_text
    assert "Reliability: " in log_text and "(HIGH)" in log_text


def test_cli_reports_unknown_reliability(tmp_path):
    raw = _raw_features()
    del raw["drift_segments"]
    source = _write(tmp_path / "partial.json", {"gpt_raw": {"raw_features": raw}})
    out = tmp_path / "runs"

    assert run_derive.main([source, "--output-dir", str(out)]) == run_derive.EXIT_OK
    code = run_derive.main([source, "--output-dir", str(tmp_path / "strict"), "--require-reliability"])
    assert code == run_derive.EXIT_UNKNOWN

    summary = json.loads((_only_run_dir(out) / "derive_summary.json").read_text(encoding="utf-8"))
    paths = [entry["json_path"] for entry in summary["unknown_calcs"]]
    assert paths[:2] == ["gpt_raw.raw_features.drift_segments", "backend.control.reliability_score"]
    assert "reliability_components" not in summary


def test_cli_fails_on_malformed_container(tmp_path):
    source = _write(tmp_path / "bad.json", {"backend": ["not", "an", "object"]})
    out = tmp_path / "runs"
    assert run_derive.main([source, "--output-dir", str(out)]) == run_derive.EXIT_FAILED
    error = json.loads((_only_run_dir(out) / "error.json").read_text(encoding="utf-8"))
    assert error["error_type"] == "ReportShapeError"
    assert error["step"] == "derive_report"
    assert error["source"] == source
    log_text = next(_only_run_dir(out).glob("derive_log_*.log")).read_text(encoding="utf-8")
    assert "derive_report failed" in log_text


def test_cli_fails_on_unreadable_input(tmp_path):
    out = tmp_path / "runs"
    code = run_derive.main([str(tmp_path / "missing.json"), "--output-dir", str(out)])
    assert code == run_derive.EXIT_FAILED
    assert (_only_run_dir(out) / "error.json").exists()


def test_cli_status_lines_go_through_logging(tmp_path, capsys):
    source = _write(tmp_path / "report.json", {"gpt_raw": {"raw_features": _raw_features()}})
    assert run_derive.main([source, "--output-dir", str(tmp_path / "runs")]) == run_derive.EXIT_OK
    assert "Derivation complete." in capsys.readouterr().out
