# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from campcheck.dataloader.config_loader import ConfigLoader
from campcheck.dataloader.postload_handler import LoadResultHandler
from campcheck.dataloader.snapshot_loader import SnapshotLoader
from campcheck.errors import CampcheckError
from campcheck.export.findings_export import write_findings_csv
from campcheck.metrics.metrics import collect_metrics, write_metrics
from campcheck.validator import ScheduleValidator


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO with a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation run.

    @details
    Three parameters: config path (YAML), snapshot path (JSON) and output
    directory. When --output is omitted, the config's output_dir is used.
    """
    parser = argparse.ArgumentParser(
        prog="campcheck-run",
        description="Validate one day of camp schedule: load → validate → report → metrics → export",
    )

    # (1) Config path argument
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )

    # (2) Snapshot path argument
    parser.add_argument(
        "--input",
        type=str,
        default="data/examples/snapshot.json",
        help="Path to day snapshot JSON (default: data/examples/snapshot.json)",
    )

    # (3) Output directory argument
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: output_dir from config)",
    )

    return parser.parse_args(argv)


def run_pipeline(
    config_path: Path, input_path: Path, output_dir: Path | None = None
) -> dict[str, Any]:
    """
    @brief
    Executes the full validation run for one snapshot.

    @details
    Performs sequential steps:
    (1) Load configuration and snapshot; record consistency issues.
    (2) Run every validation check.
    (3) Persist the report, findings CSV and metrics as configured.
    Raises CampcheckError on controlled failures so the caller decides the
    exit code.

    @params
        config_path : Path
            Path to the YAML configuration file.
        input_path : Path
            Path to the snapshot JSON file.
        output_dir : Path | None
            Directory for artifacts; falls back to Config.output_dir.

    @returns
        Dictionary with validity flag, finding counts and artifact paths.

    @raises
        CampcheckError
            On configuration, snapshot or write failures.
    """
    # (1) Start timer and load configuration
    t0 = time.perf_counter()
    logging.info("Loading config: %s", config_path)
    cfg = ConfigLoader().load(config_path)

    out_dir = output_dir or Path(cfg.output_dir or "data/output")
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Load snapshot and persist consistency issues
    logging.info("Loading snapshot: %s", input_path)
    load_result = SnapshotLoader().load(input_path)
    handler = LoadResultHandler(output_dir=out_dir)
    snapshot = handler.handle(load_result)
    load_issues_path = None if load_result.success else handler.issues_path

    # (3) Validate
    logging.info("Validating schedule…")
    validator = ScheduleValidator(snapshot, cfg)
    validator.run_all_checks()
    report = validator.build_report()
    logging.info("Result: %s (%s)", "valid" if report.valid else "INVALID", report.summary())

    report_path: Path | None = None
    if cfg.validation.write_report:
        report_path = validator.save_report(report, out_dir=out_dir)

    # (4) Export findings table
    findings_path: Path | None = None
    if cfg.validation.export_findings:
        logging.info("Exporting findings.csv…")
        findings_path = write_findings_csv(report.findings(), out_path=out_dir / "findings.csv")

    # (5) Metrics summary
    metrics_path: Path | None = None
    if cfg.metrics.save_metrics:
        logging.info("Collecting metrics…")
        metrics_path = write_metrics(collect_metrics(report), out_dir=out_dir)

    dt = time.perf_counter() - t0
    logging.info("Run finished in %.2f s", dt)

    return {
        "valid": report.valid,
        "num_errors": len(report.errors),
        "num_warnings": len(report.warnings),
        "num_load_issues": len(load_result.issues),
        "artifacts": {
            "validation_report": report_path,
            "findings_csv": findings_path,
            "metrics": metrics_path,
            "load_issues": load_issues_path,
        },
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Returns numeric exit codes suitable for shell integration:
      0 – schedule valid
      1 – schedule invalid, or controlled failure (config/data/write)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    config_path = Path(args.config)
    input_path = Path(args.input)
    output_dir = Path(args.output) if args.output else None

    try:
        result = run_pipeline(config_path, input_path, output_dir)
        written = [p.name for p in result["artifacts"].values() if p is not None]
        logging.info("Artifacts: %s", ", ".join(written) or "none")
        return 0 if result.get("valid") else 1

    except CampcheckError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
