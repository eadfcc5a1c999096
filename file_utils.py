"""
File utilities for the derivation runner.

Handles input loading, run directory creation and atomic JSON saves.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Dict, List, Optional

from config import DeriveConfig
from derive import DerivationResult

logger = logging.getLogger(__name__)


class InputFileError(ValueError):
    """Input JSON could not be read or is not an object."""


def _atomic_write_text(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=str(path.parent)) as tmp:
        tmp.write(data)
        tmp_name = tmp.name
    os.replace(tmp_name, path)


def write_json(path: Path, payload: Any) -> None:
    serialized = json.dumps(payload, indent=2, ensure_ascii=False)
    _atomic_write_text(path, serialized)


def load_json_object(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise InputFileError(f"Could not read JSON from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InputFileError(f"{path} must contain a JSON object, got {type(payload).__name__}")
    return payload


class DerivationFileManager:
    def __init__(self, base_output_dir: Optional[str] = None):
        self.base_output_dir = base_output_dir or DeriveConfig.OUTPUT_DIR
        Path(self.base_output_dir).mkdir(parents=True, exist_ok=True)

    def create_run_directory(self, source: str) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        stem = Path(source).stem or "report"
        source_slug = "".join(c.lower() if c.isalnum() else "_" for c in stem)[:24]
        path = Path(self.base_output_dir) / f"derive_{timestamp}_{source_slug}"
        path.mkdir(parents=True, exist_ok=True)
        return str(path)

    def save_derivation(
        self,
        result: DerivationResult,
        run_dir: str,
        lint_findings: Optional[Dict[str, List[str]]] = None,
    ) -> Dict[str, str]:
        """Write the derived report, summary and lint findings; return the written paths."""

        written: Dict[str, str] = {}

        report_path = Path(run_dir) / DeriveConfig.output_file("report")
        write_json(report_path, result.report)
        written["report"] = str(report_path)

        if DeriveConfig.WRITE_SUMMARY:
            summary_path = Path(run_dir) / DeriveConfig.output_file("summary")
            summary = result.summary.to_dict()
            summary["generated_at"] = datetime.now().isoformat()
            if result.reliability is not None:
                summary["reliability_components"] = result.reliability.as_dict()
            write_json(summary_path, summary)
            written["summary"] = str(summary_path)

        if lint_findings is not None:
            lint_path = Path(run_dir) / DeriveConfig.output_file("lint")
            write_json(lint_path, lint_findings)
            written["lint"] = str(lint_path)

        logger.info("Saved derivation outputs to %s", run_dir)
        return written
