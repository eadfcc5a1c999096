#!/usr/bin/env python3
"""
CLI entrypoint for strict report derivation.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import DeriveConfig
from derivation_contracts import lint_derive_summary, lint_derived_report, lint_gpt_raw
from derive import derive_report
from file_utils import DerivationFileManager, InputFileError, load_json_object, write_json
from logging_utils import error_record, log_exception, setup_run_logging
from report_shape import ReportShapeError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNKNOWN = 2


def enable_debug_logging() -> None:
    logging.getLogger().setLevel(logging.DEBUG)
    for handler in logging.getLogger().handlers:
        handler.setLevel(logging.DEBUG)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Derive CFF6 indicators and reliability for a report.")
    parser.add_argument("report", type=str, help="Path to the report container JSON (with gpt_raw.raw_features).")
    parser.add_argument("--inputs", type=str, default=None, help="Optional JSON of external inputs (cohort norms etc.).")
    parser.add_argument("--output-dir", type=str, default=DeriveConfig.OUTPUT_DIR, help="Base directory for run outputs.")
    parser.add_argument("--lint", action="store_true", help="Check producer and output contracts after deriving.")
    parser.add_argument(
        "--require-reliability",
        action="store_true",
        help="Exit with status 2 when the reliability score could not be computed.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    file_manager = DerivationFileManager(args.output_dir)
    run_dir = file_manager.create_run_directory(args.report)
    run_logger, log_path = setup_run_logging(run_dir, args.report, DeriveConfig.LOG_LEVEL)

    if args.debug:
        enable_debug_logging()
        run_logger.debug("Debug logging enabled.")

    run_logger.info("🧮 Strict Derivation")
    run_logger.info(f"📄 Report: {args.report}")
    run_logger.info("=" * 60)

    try:
        report = load_json_object(args.report)
        inputs = load_json_object(args.inputs) if args.inputs else {}
    except InputFileError as exc:
        fail(run_logger, run_dir, exc, "load_inputs", args.report)
        run_logger.error(f"❌ Could not load input JSON. See {log_path}")
        return EXIT_FAILED

    lint_findings = None
    if args.lint:
        lint_findings = {"gpt_raw": lint_gpt_raw(report)}

    try:
        result = derive_report(report, inputs)
    except ReportShapeError as exc:
        fail(run_logger, run_dir, exc, "derive_report", args.report)
        run_logger.error(f"❌ Report container is malformed. See {log_path}")
        return EXIT_FAILED

    if lint_findings is not None:
        lint_findings["derived_report"] = lint_derived_report(result.report)
        lint_findings["summary"] = lint_derive_summary(result.summary)
        for section, findings in lint_findings.items():
            for finding in findings:
                run_logger.warning(f"[lint:{section}] {finding}")

    file_manager.save_derivation(result, run_dir, lint_findings)

    summary = result.summary
    reliability = result.report["backend"]["control"]["reliability_score"]
    run_logger.info("✅ Derivation complete.")
    run_logger.info(f"📁 Output directory: {run_dir}")
    run_logger.info(f"🔢 Known calcs: {len(summary.known_calcs)}  Unknown calcs: {len(summary.unknown_calcs)}")
    if reliability.get("r") is None:
        run_logger.info(f"🧭 Reliability: unknown (band placeholder {reliability.get('band')})")
    else:
        run_logger.info(f"🧭 Reliability: {reliability['r']:.3f} ({reliability['band']})")

    if args.require_reliability and result.reliability is None:
        return EXIT_UNKNOWN
    return EXIT_OK


def fail(run_logger: logging.Logger, run_dir: str, exc: Exception, step: str, source: str) -> None:
    log_exception(run_logger, exc, step, source)
    write_json(Path(run_dir) / "error.json", error_record(exc, step, source))


if __name__ == "__main__":
    sys.exit(main())
