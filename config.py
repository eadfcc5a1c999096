"""
Derivation Configuration

Runtime settings for the command-line runner. Formula weights, band
thresholds and method names are part of the scoring contract and live as
constants in their modules, not here.
"""

import os
from typing import Dict

from dotenv import load_dotenv

load_dotenv()


class DeriveConfig:
    """Environment-driven settings used by the runner and file helpers."""

    OUTPUT_DIR = os.getenv("DERIVE_OUTPUT_DIR", "derive_reports")
    LOG_LEVEL = os.getenv("DERIVE_LOG_LEVEL", "INFO").upper()
    WRITE_SUMMARY = os.getenv("DERIVE_WRITE_SUMMARY", "true").lower() != "false"

    OUTPUT_FILES: Dict[str, str] = {
        "report": "derived_report.json",
        "summary": "derive_summary.json",
        "lint": "lint_findings.json",
    }

    @classmethod
    def output_file(cls, kind: str) -> str:
        return cls.OUTPUT_FILES[kind]
